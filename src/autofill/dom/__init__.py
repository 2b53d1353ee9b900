from __future__ import annotations

from .base import ComputedStyle, DomElement, DomNode, DomPage, DomRoot, Rect, Viewport

__all__ = [
    "ComputedStyle",
    "DomElement",
    "DomNode",
    "DomPage",
    "DomRoot",
    "Rect",
    "Viewport",
]
