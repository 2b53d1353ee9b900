from __future__ import annotations

from typing import Callable, Iterator

from autofill.dom.base import ComputedStyle, DomElement, DomPage, DomRoot, Rect, Viewport

Listener = Callable[["FakeElement"], None]

_INPUT_TYPES = {"text", "password", "email", "tel", "number", "search", "url", "hidden", "checkbox", "radio"}


class FakeContainer:
    def __init__(self) -> None:
        self.kids: list[FakeElement] = []

    def append(self, *children: "FakeElement") -> "FakeContainer":
        for child in children:
            child.parent = self
            self.kids.append(child)
        return self

    def remove(self, child: "FakeElement") -> None:
        self.kids.remove(child)
        child.parent = None

    def light_descendants(self) -> Iterator["FakeElement"]:
        stack = list(reversed(self.kids))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.kids))

    async def children(self) -> list["FakeElement"]:
        return list(self.kids)

    async def query_inputs(self) -> list["FakeElement"]:
        return [node for node in self.light_descendants() if node.tag == "input"]


class FakeRoot(FakeContainer, DomRoot):
    def __init__(self, fragment: bool = False, host: "FakeElement | None" = None) -> None:
        super().__init__()
        self._fragment = fragment
        self.host = host

    @property
    def is_fragment(self) -> bool:
        return self._fragment

    def composed_descendants(self) -> Iterator["FakeElement"]:
        stack = list(reversed(self.kids))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.kids))
            if node.shadow is not None:
                stack.extend(reversed(node.shadow.kids))


class FakeElement(FakeContainer, DomElement):
    def __init__(
        self,
        tag: str,
        *,
        rect: Rect | None = None,
        disabled: bool = False,
        visibility: str | None = None,
        opacity: float | None = None,
        display_none: bool = False,
        **attrs: str,
    ) -> None:
        super().__init__()
        self.tag = tag
        self.attrs = {key.rstrip("_").replace("_", "-").lower(): value for key, value in attrs.items()}
        self.rect = rect
        self.disabled = disabled
        self.visibility = visibility
        self.opacity = opacity
        self.display_none = display_none
        self.parent: FakeContainer | None = None
        self.shadow: FakeRoot | None = None
        self.live_value = self.attrs.get("value", "")
        self.events: list[str] = []
        self.listeners: dict[str, list[Listener]] = {}

    def __repr__(self) -> str:
        return f"FakeElement({self.tag!r}, {self.attrs!r})"

    def attach_shadow(self, *children: "FakeElement") -> FakeRoot:
        self.shadow = FakeRoot(fragment=True, host=self)
        self.shadow.append(*children)
        return self.shadow

    def on(self, event_type: str, listener: Listener) -> None:
        self.listeners.setdefault(event_type, []).append(listener)

    async def is_same(self, other: DomElement) -> bool:
        return other is self

    async def tag_name(self) -> str:
        return self.tag

    async def attributes(self) -> dict[str, str]:
        return dict(self.attrs)

    async def get_attribute(self, name: str) -> str | None:
        return self.attrs.get(name.lower())

    async def set_attribute(self, name: str, value: str) -> None:
        self.attrs[name.lower()] = value

    async def input_type(self) -> str:
        declared = self.attrs.get("type", "").lower()
        return declared if declared in _INPUT_TYPES else "text"

    async def is_disabled(self) -> bool:
        return self.disabled

    async def offset_size(self) -> tuple[float, float]:
        node: FakeContainer | None = self
        while isinstance(node, FakeElement):
            if node.display_none:
                return (0.0, 0.0)
            node = node.parent
        rect = self.rect or Rect(0, 0, 0, 0)
        return (rect.width, rect.height)

    async def bounding_rect(self) -> Rect:
        return self.rect or Rect(0, 0, 0, 0)

    async def computed_style(self) -> ComputedStyle:
        visibility = "visible"
        node: FakeContainer | None = self
        while isinstance(node, FakeElement):
            if node.visibility is not None:
                visibility = node.visibility
                break
            node = node.parent
        return ComputedStyle(visibility=visibility, opacity=self.opacity)

    async def parent_element(self) -> "FakeElement | None":
        return self.parent if isinstance(self.parent, FakeElement) else None

    async def owner_form(self) -> "FakeElement | None":
        node = self.parent
        while isinstance(node, FakeElement):
            if node.tag == "form":
                return node
            node = node.parent
        return None

    async def shadow_root(self) -> FakeRoot | None:
        return self.shadow

    async def max_length(self) -> int:
        return int(self.attrs.get("maxlength", -1))

    async def value(self) -> str:
        return self.live_value

    async def set_value(self, value: str) -> None:
        self.live_value = value

    async def dispatch_event(self, event_type: str) -> None:
        self.events.append(event_type)
        for listener in list(self.listeners.get(event_type, [])):
            listener(self)


class FakePage(DomPage):
    """Page with a simple vertical layout: inputs without a rect get stacked rows."""

    def __init__(self, document: FakeRoot, viewport: Viewport | None = None) -> None:
        self.doc = document
        self._viewport = viewport or Viewport(width=1280, height=720)
        self.releases = 0
        self.layout()

    def layout(self) -> None:
        row = 0
        for node in self.doc.composed_descendants():
            if node.tag == "input" and node.rect is None:
                node.rect = Rect(x=10, y=10 + 40 * row, width=200, height=24)
                row += 1

    async def document(self) -> FakeRoot:
        return self.doc

    async def viewport(self) -> Viewport:
        return self._viewport

    async def release(self) -> None:
        self.releases += 1

    async def element_from_point(self, x: float, y: float) -> FakeElement | None:
        topmost: FakeElement | None = None
        for node in self.doc.composed_descendants():
            rect = node.rect
            if node.tag != "input" or rect is None:
                continue
            if rect.x <= x <= rect.x + rect.width and rect.y <= y <= rect.y + rect.height:
                topmost = node
        return topmost


def el(tag: str, *children: FakeElement, **kwargs) -> FakeElement:
    element = FakeElement(tag, **kwargs)
    element.append(*children)
    return element


def inp(**kwargs) -> FakeElement:
    return FakeElement("input", **kwargs)


def document(*children: FakeElement) -> FakeRoot:
    root = FakeRoot()
    root.append(*children)
    return root
