from __future__ import annotations

import logging

from ..dom.base import DomElement, DomNode, DomRoot

logger = logging.getLogger(__name__)


async def enumerate_search_roots(document: DomRoot) -> list[DomRoot]:
    """Return the document followed by every isolated fragment that holds an input.

    Modern login widgets often live inside shadow roots that a top level query
    never reaches, so each such fragment becomes its own query scope. The walk
    uses an explicit stack: pages can nest deeply enough to exhaust recursion.
    """

    roots: list[DomRoot] = [document]
    input_counts: list[int] = [0]
    frontier: list[tuple[bool, DomNode]] = [(True, document)]
    while frontier:
        entering, node = frontier.pop()
        if entering:
            frontier.append((False, node))
            if isinstance(node, DomElement):
                if await node.is_input():
                    input_counts[-1] += 1
            elif isinstance(node, DomRoot) and node.is_fragment:
                input_counts.append(0)
            for child in reversed(await node.children()):
                frontier.append((True, child))
            if isinstance(node, DomElement):
                shadow = await node.shadow_root()
                if shadow is not None:
                    frontier.append((True, shadow))
        elif isinstance(node, DomRoot) and node.is_fragment:
            count = input_counts.pop()
            if count > 0:
                roots.append(node)

    logger.debug("Enumerated %d search roots", len(roots))
    return roots
