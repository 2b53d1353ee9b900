from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Mapping

MatchMode = Literal["exact", "contains"]


@dataclass(frozen=True, slots=True)
class AttributeRule:
    """Case-insensitive comparison of one ``<input>`` attribute.

    When ``input_type`` is given, ``type`` rules compare against that effective
    type instead of the declared attribute, so an untyped ``<input>`` counts as
    ``text``.
    """

    attribute: str
    value: str
    mode: MatchMode = "exact"

    def matches(self, attributes: Mapping[str, str], input_type: str | None = None) -> bool:
        if self.attribute == "type" and input_type is not None:
            candidate: str | None = input_type
        else:
            candidate = attributes.get(self.attribute)
        if candidate is None:
            return False
        candidate = candidate.lower()
        wanted = self.value.lower()
        if self.mode == "exact":
            return candidate == wanted
        return wanted in candidate

    def __str__(self) -> str:
        operator = "=" if self.mode == "exact" else "*="
        return f"[{self.attribute}{operator}{self.value} i]"


@dataclass(frozen=True, slots=True)
class FieldSelector:
    """An ``<input>`` matched when every rule holds."""

    rules: tuple[AttributeRule, ...]

    def matches(self, attributes: Mapping[str, str], input_type: str | None = None) -> bool:
        return all(rule.matches(attributes, input_type) for rule in self.rules)

    def __str__(self) -> str:
        return "input" + "".join(str(rule) for rule in self.rules)


def _select(*rules: tuple[str, str] | tuple[str, str, MatchMode]) -> FieldSelector:
    return FieldSelector(tuple(AttributeRule(*rule) for rule in rules))


_USER_NAMES = ("login", "user", "username", "email", "alias")
_USER_SUBSTRINGS = ("login", "user", "email", "alias")
_USER_ATTRIBUTES = ("name", "id", "class")

USERNAME_SELECTORS: tuple[FieldSelector, ...] = (
    _select(("autocomplete", "username")),
    *(_select((attribute, name)) for attribute in _USER_ATTRIBUTES for name in _USER_NAMES),
    *(_select((attribute, name, "contains")) for attribute in _USER_ATTRIBUTES for name in _USER_SUBSTRINGS),
    _select(("type", "email")),
    _select(("autocomplete", "email")),
    _select(("type", "text")),
    _select(("type", "tel")),
)

PASSWORD_SELECTORS: tuple[FieldSelector, ...] = (
    _select(("type", "password"), ("autocomplete", "current-password")),
    _select(("type", "password")),
)

USERNAME_INPUT_TYPES: tuple[str, ...] = ("text", "tel", "email")

FORM_MARKER_ATTRIBUTES: tuple[str, ...] = ("id", "name", "class", "action")
FORM_MARKERS: frozenset[str] = frozenset({"login", "log-in", "log_in", "signin", "sign-in", "sign_in"})
