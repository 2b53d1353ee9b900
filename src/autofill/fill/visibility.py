from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

from ..dom.base import DomElement, DomNode, Viewport
from .selectors import FieldSelector

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class VisibilityThresholds:
    min_width: float = 30
    min_height: float = 10
    opacity_limit: float = 0.1


@dataclass(slots=True)
class _Candidate:
    element: DomElement
    attributes: dict[str, str]
    input_type: str


class VisibilityFilter:
    """Select inputs a user could plausibly see and type into.

    Every call re-reads layout and style from the page; nothing is cached
    between calls because pages re-render between requests.
    """

    def __init__(self, viewport: Viewport, thresholds: VisibilityThresholds | None = None) -> None:
        self._viewport = viewport
        self._thresholds = thresholds or VisibilityThresholds()

    async def query(
        self,
        scopes: Sequence[DomNode],
        selectors: Iterable[FieldSelector],
        allowed_types: Iterable[str] | None = None,
        *,
        implicit_type: bool = False,
    ) -> list[DomElement]:
        """Return visible matches ordered selector-major, then scope-major, then tree order.

        ``type`` rules match the declared attribute unless ``implicit_type`` is
        set, in which case they match the effective input type.
        """

        allowed = None if allowed_types is None else frozenset(t.lower() for t in allowed_types)
        snapshots: list[list[_Candidate]] = []
        for scope in scopes:
            candidates = [
                _Candidate(element=element, attributes=await element.attributes(), input_type=await element.input_type())
                for element in await scope.query_inputs()
            ]
            snapshots.append(candidates)

        result: list[DomElement] = []
        for selector in selectors:
            found = len(result)
            for candidates in snapshots:
                for candidate in candidates:
                    rule_type = candidate.input_type if implicit_type else None
                    if not selector.matches(candidate.attributes, rule_type):
                        continue
                    if await self.is_visible(candidate.element, allowed, input_type=candidate.input_type):
                        result.append(candidate.element)
            if len(result) > found:
                logger.debug("%s matched %d visible fields", selector, len(result) - found)
        return result

    async def is_visible(
        self,
        element: DomElement,
        allowed_types: frozenset[str] | None = None,
        *,
        input_type: str | None = None,
    ) -> bool:
        thresholds = self._thresholds
        if await element.is_disabled():
            return False
        # Zero when the element or an ancestor is display:none; tiny fields are spam traps.
        width, height = await element.offset_size()
        if width < thresholds.min_width or height < thresholds.min_height:
            return False
        if allowed_types is not None:
            if input_type is None:
                input_type = await element.input_type()
            if input_type not in allowed_types:
                return False
        style = await element.computed_style()
        if style.visibility == "hidden":
            return False
        rect = await element.bounding_rect()
        if rect.outside(self._viewport):
            return False
        return await self._opacity(element) >= thresholds.opacity_limit

    async def _opacity(self, element: DomElement) -> float:
        limit = self._thresholds.opacity_limit
        opacity = 1.0
        current: DomElement | None = element
        while current is not None and opacity >= limit:
            style = await current.computed_style()
            if style.opacity is not None:
                opacity *= style.opacity
            current = await current.parent_element()
        return opacity
