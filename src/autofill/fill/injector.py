from __future__ import annotations

import logging
from typing import Iterable

from ..dom.base import DomElement, DomPage

logger = logging.getLogger(__name__)

FOCUS_EVENTS: tuple[str, ...] = ("click", "focus")
ACTIVATION_EVENTS: tuple[str, ...] = ("keydown", "keypress", "keyup", "input", "change")
BLUR_EVENTS: tuple[str, ...] = ("blur",)


async def _dispatch_all(field: DomElement, events: Iterable[str]) -> None:
    for event_type in events:
        await field.dispatch_event(event_type)


async def _write(field: DomElement, value: str) -> None:
    # Frameworks differ in which channel they observe, so write both.
    await field.set_attribute("value", value)
    await field.set_value(value)


async def inject_value(page: DomPage, field: DomElement, value: str) -> None:
    """Write ``value`` into ``field`` the way an interactive user would.

    The caller checks that a target exists. Page-side validators only accept
    values that arrive between focus and blur events.
    """

    await _dispatch_all(field, FOCUS_EVENTS)

    # Some pages replace the clicked node with a fresh input.
    rect = await field.bounding_rect()
    x, y = rect.center
    topmost = await page.element_from_point(x, y)
    if topmost is not None and not await topmost.is_same(field) and await topmost.is_input():
        logger.debug("Retargeting fill to replacement input %s", await topmost.describe())
        field = topmost
        await _dispatch_all(field, FOCUS_EVENTS)

    await _dispatch_all(field, ACTIVATION_EVENTS)

    max_length = await field.max_length()
    if max_length > 0:
        value = value[:max_length]
    await _write(field, value)

    await _dispatch_all(field, ACTIVATION_EVENTS)

    if await field.value() != value:
        logger.debug("Value reverted by page handlers; writing again")
        await _write(field, value)

    await _dispatch_all(field, BLUR_EVENTS)
