from __future__ import annotations

import functools
import logging
from typing import Any, Awaitable, Callable, TypeVar

from playwright.async_api import ElementHandle, Error as PlaywrightError, JSHandle, Page

from ..errors import DomError
from .base import ComputedStyle, DomElement, DomPage, DomRoot, Rect, Viewport

logger = logging.getLogger(__name__)

T = TypeVar("T")
H = TypeVar("H", bound=JSHandle)

# Elevated access first (extension content scripts expose closed roots), open roots last.
_SHADOW_ROOT_JS = """
(el) => {
    if (el.openOrClosedShadowRoot) {
        return el.openOrClosedShadowRoot;
    }
    const dom = globalThis.browser && globalThis.browser.dom;
    if (dom && typeof dom.openOrClosedShadowRoot === 'function') {
        const root = dom.openOrClosedShadowRoot(el);
        if (root) {
            return root;
        }
    }
    return el.shadowRoot || null;
}
"""

_ATTRIBUTES_JS = "(el) => Object.fromEntries(Array.from(el.attributes, (a) => [a.name.toLowerCase(), a.value]))"


def _translate_errors(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    @functools.wraps(func)
    async def wrapper(self: Any, *args: Any, **kwargs: Any) -> T:
        try:
            return await func(self, *args, **kwargs)
        except PlaywrightError as exc:
            raise DomError(f"DOM call {func.__name__} failed: {exc}") from exc

    return wrapper


async def _elements_of(array_handle: JSHandle, scope: "HandleScope") -> list["PlaywrightElement"]:
    properties = await array_handle.get_properties()
    indexed = sorted(
        ((int(key), value) for key, value in properties.items() if key.isdigit()),
        key=lambda item: item[0],
    )
    elements: list[PlaywrightElement] = []
    for _, handle in indexed:
        element = handle.as_element()
        if element is not None:
            elements.append(PlaywrightElement(scope.track(element), scope))
        else:
            await handle.dispose()
    await array_handle.dispose()
    return elements


class HandleScope:
    """Remote handles created while serving one request, released together."""

    def __init__(self) -> None:
        self._handles: list[JSHandle] = []

    def track(self, handle: H) -> H:
        self._handles.append(handle)
        return handle

    async def dispose_all(self) -> None:
        handles, self._handles = self._handles, []
        for handle in handles:
            try:
                await handle.dispose()
            except PlaywrightError as exc:
                # The page may already be gone, which frees its handles anyway.
                logger.debug("Handle disposal failed: %s", exc)
        if handles:
            logger.debug("Released %d handles", len(handles))


async def _element_or_none(handle: JSHandle, scope: HandleScope) -> "PlaywrightElement | None":
    element = handle.as_element()
    if element is None:
        await handle.dispose()
        return None
    return PlaywrightElement(scope.track(element), scope)


class _PlaywrightNode:
    def __init__(self, handle: JSHandle, scope: HandleScope) -> None:
        self._handle = handle
        self._scope = scope

    @property
    def handle(self) -> JSHandle:
        return self._handle

    @_translate_errors
    async def children(self) -> list["PlaywrightElement"]:
        array = await self._handle.evaluate_handle("(node) => Array.from(node.children)")
        return await _elements_of(array, self._scope)

    @_translate_errors
    async def query_inputs(self) -> list["PlaywrightElement"]:
        array = await self._handle.evaluate_handle("(node) => Array.from(node.querySelectorAll('input'))")
        return await _elements_of(array, self._scope)


class PlaywrightRoot(_PlaywrightNode, DomRoot):
    """Document or shadow root behind a Playwright handle."""

    def __init__(self, handle: JSHandle, scope: HandleScope, is_fragment: bool) -> None:
        super().__init__(handle, scope)
        self._is_fragment = is_fragment

    @property
    def is_fragment(self) -> bool:
        return self._is_fragment


class PlaywrightElement(_PlaywrightNode, DomElement):
    """Element behind a Playwright ``ElementHandle``."""

    def __init__(self, handle: ElementHandle, scope: HandleScope) -> None:
        super().__init__(handle, scope)
        self._element = handle

    async def is_same(self, other: DomElement) -> bool:
        if not isinstance(other, PlaywrightElement):
            return False
        if other._element is self._element:
            return True
        return bool(await self._evaluate("(a, b) => a === b", other._element))

    @_translate_errors
    async def _evaluate(self, expression: str, arg: Any = None) -> Any:
        return await self._element.evaluate(expression, arg)

    @_translate_errors
    async def _evaluate_element(self, expression: str) -> "PlaywrightElement | None":
        return await _element_or_none(await self._element.evaluate_handle(expression), self._scope)

    async def tag_name(self) -> str:
        return str(await self._evaluate("(el) => el.tagName.toLowerCase()"))

    async def attributes(self) -> dict[str, str]:
        result = await self._evaluate(_ATTRIBUTES_JS)
        return {str(key): str(value) for key, value in (result or {}).items()}

    async def get_attribute(self, name: str) -> str | None:
        result = await self._evaluate("(el, name) => el.getAttribute(name)", name)
        return None if result is None else str(result)

    async def set_attribute(self, name: str, value: str) -> None:
        await self._evaluate("(el, [name, value]) => el.setAttribute(name, value)", [name, value])

    async def input_type(self) -> str:
        return str(await self._evaluate("(el) => (el.type || 'text').toLowerCase()"))

    async def is_disabled(self) -> bool:
        return bool(await self._evaluate("(el) => !!el.disabled"))

    async def offset_size(self) -> tuple[float, float]:
        width, height = await self._evaluate("(el) => [el.offsetWidth || 0, el.offsetHeight || 0]")
        return (float(width), float(height))

    async def bounding_rect(self) -> Rect:
        box = await self._evaluate(
            "(el) => { const r = el.getBoundingClientRect(); return [r.x, r.y, r.width, r.height]; }"
        )
        x, y, width, height = (float(value) for value in box)
        return Rect(x=x, y=y, width=width, height=height)

    async def computed_style(self) -> ComputedStyle:
        style = await self._evaluate(
            "(el) => { const s = window.getComputedStyle(el); return [s.visibility, s.opacity]; }"
        )
        visibility, opacity = style
        try:
            parsed = float(opacity) if opacity not in (None, "") else None
        except (TypeError, ValueError):
            parsed = None
        return ComputedStyle(visibility=str(visibility or "visible"), opacity=parsed)

    async def parent_element(self) -> "PlaywrightElement | None":
        return await self._evaluate_element("(el) => el.parentElement")

    async def owner_form(self) -> "PlaywrightElement | None":
        return await self._evaluate_element("(el) => el.form || null")

    @_translate_errors
    async def shadow_root(self) -> PlaywrightRoot | None:
        if not await self._element.evaluate(f"(el) => ({_SHADOW_ROOT_JS})(el) !== null"):
            return None
        handle = self._scope.track(await self._element.evaluate_handle(_SHADOW_ROOT_JS))
        return PlaywrightRoot(handle, self._scope, is_fragment=True)

    async def max_length(self) -> int:
        result = await self._evaluate("(el) => (typeof el.maxLength === 'number' ? el.maxLength : -1)")
        return int(result)

    async def value(self) -> str:
        result = await self._evaluate("(el) => el.value")
        return "" if result is None else str(result)

    async def set_value(self, value: str) -> None:
        await self._evaluate("(el, value) => { el.value = value; }", value)

    @_translate_errors
    async def dispatch_event(self, event_type: str) -> None:
        await self._element.dispatch_event(event_type)


class PlaywrightPage(DomPage):
    """Adapts a Playwright ``Page`` to the DOM contract used by the fill pipeline."""

    def __init__(self, page: Page) -> None:
        self._page = page
        self._scope = HandleScope()

    @property
    def page(self) -> Page:
        return self._page

    @_translate_errors
    async def document(self) -> PlaywrightRoot:
        handle = self._scope.track(await self._page.evaluate_handle("() => document"))
        return PlaywrightRoot(handle, self._scope, is_fragment=False)

    @_translate_errors
    async def viewport(self) -> Viewport:
        width, height = await self._page.evaluate("() => [window.innerWidth, window.innerHeight]")
        return Viewport(width=float(width), height=float(height))

    @_translate_errors
    async def element_from_point(self, x: float, y: float) -> PlaywrightElement | None:
        handle = await self._page.evaluate_handle("([x, y]) => document.elementFromPoint(x, y)", [x, y])
        return await _element_or_none(handle, self._scope)

    async def release(self) -> None:
        await self._scope.dispose_all()

    def wrap(self, handle: JSHandle) -> PlaywrightElement | None:
        """Adopt a handle owned by the caller; it outlives request releases."""

        element = handle.as_element()
        if element is None:
            logger.debug("Ignoring non-element handle %s", handle)
            return None
        return PlaywrightElement(element, self._scope)
