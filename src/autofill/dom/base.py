from __future__ import annotations

import abc
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Rect:
    """Bounding box in viewport coordinates."""

    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.width / 2.0, self.y + self.height / 2.0)

    def outside(self, viewport: "Viewport") -> bool:
        return (
            self.x + self.width < 0
            or self.y + self.height < 0
            or self.x > viewport.width
            or self.y > viewport.height
        )


@dataclass(frozen=True, slots=True)
class Viewport:
    width: float
    height: float


@dataclass(frozen=True, slots=True)
class ComputedStyle:
    visibility: str = "visible"
    opacity: float | None = None


class DomNode(abc.ABC):
    """A node that can be walked and queried: an element, a document or a fragment."""

    @abc.abstractmethod
    async def children(self) -> list["DomElement"]:
        """Return child elements in tree order."""

    @abc.abstractmethod
    async def query_inputs(self) -> list["DomElement"]:
        """Return descendant ``<input>`` elements in tree order.

        The query never crosses into isolated fragments hosted below this node,
        the same way ``querySelectorAll`` behaves in a browser.
        """


class DomRoot(DomNode):
    """A document or an isolated fragment (shadow root)."""

    @property
    @abc.abstractmethod
    def is_fragment(self) -> bool:
        """True for isolated fragments, False for the main document."""


class DomElement(DomNode):
    """Live reference to an element of the page."""

    @abc.abstractmethod
    async def is_same(self, other: "DomElement") -> bool:
        """Identity comparison against another reference."""

    @abc.abstractmethod
    async def tag_name(self) -> str:
        """Lower-cased tag name."""

    async def is_input(self) -> bool:
        return await self.tag_name() == "input"

    @abc.abstractmethod
    async def attributes(self) -> dict[str, str]:
        """All attributes, keyed by lower-cased name."""

    @abc.abstractmethod
    async def get_attribute(self, name: str) -> str | None:
        ...

    @abc.abstractmethod
    async def set_attribute(self, name: str, value: str) -> None:
        ...

    @abc.abstractmethod
    async def input_type(self) -> str:
        """Effective lower-cased ``type`` property (``text`` when unset or unknown)."""

    @abc.abstractmethod
    async def is_disabled(self) -> bool:
        ...

    @abc.abstractmethod
    async def offset_size(self) -> tuple[float, float]:
        """Rendered layout width and height (zero when not rendered)."""

    @abc.abstractmethod
    async def bounding_rect(self) -> Rect:
        ...

    @abc.abstractmethod
    async def computed_style(self) -> ComputedStyle:
        ...

    @abc.abstractmethod
    async def parent_element(self) -> "DomElement | None":
        ...

    @abc.abstractmethod
    async def owner_form(self) -> "DomElement | None":
        """The form element owning this input, if any."""

    @abc.abstractmethod
    async def shadow_root(self) -> DomRoot | None:
        """The hosted isolated fragment, open or reachable through an elevated capability."""

    @abc.abstractmethod
    async def max_length(self) -> int:
        """Declared maximum length, or -1 when none is declared."""

    @abc.abstractmethod
    async def value(self) -> str:
        """Live ``value`` property."""

    @abc.abstractmethod
    async def set_value(self, value: str) -> None:
        ...

    @abc.abstractmethod
    async def dispatch_event(self, event_type: str) -> None:
        """Dispatch a bubbling event of ``event_type`` on the element."""

    async def describe(self) -> str:
        """Short human readable label used in log records."""

        tag = await self.tag_name()
        parts = [tag]
        for name in ("id", "name", "type"):
            value = await self.get_attribute(name)
            if value:
                parts.append(f"{name}={value!r}")
        return " ".join(parts)


class DomPage(abc.ABC):
    """The rendering context a fill request runs against."""

    @abc.abstractmethod
    async def document(self) -> DomRoot:
        ...

    @abc.abstractmethod
    async def viewport(self) -> Viewport:
        ...

    @abc.abstractmethod
    async def element_from_point(self, x: float, y: float) -> DomElement | None:
        """Topmost element at the given viewport coordinates."""

    async def release(self) -> None:
        """Drop the element references created while serving a request."""
