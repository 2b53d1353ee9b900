from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Literal, Sequence

from ..dom.base import DomElement, DomNode, DomRoot
from .selectors import (
    FORM_MARKER_ATTRIBUTES,
    FORM_MARKERS,
    PASSWORD_SELECTORS,
    USERNAME_INPUT_TYPES,
    USERNAME_SELECTORS,
)
from .visibility import VisibilityFilter

logger = logging.getLogger(__name__)

Role = Literal["user", "password"]

# (has_owner_form, owner_form_has_marker, has_password)
BucketKey = tuple[bool, bool, bool]


@dataclass(slots=True)
class CandidateForm:
    owner_form: DomElement | None
    searched_role: Role
    username_field: DomElement | None = None
    password_field: DomElement | None = None
    has_marker: bool = False

    @property
    def has_owner_form(self) -> bool:
        return self.owner_form is not None

    @property
    def bucket_key(self) -> BucketKey:
        return (self.has_owner_form, self.has_marker, self.password_field is not None)


@dataclass(slots=True)
class Classification:
    """Outcome of one classification pass.

    ``selected`` is set when a marked form with a password field short-circuited
    the search; otherwise ``buckets`` feeds the form selector.
    """

    buckets: dict[BucketKey, list[CandidateForm]] = field(default_factory=dict)
    selected: CandidateForm | None = None
    forms_visited: int = 0


class _SeenForms:
    """Identity set of owner forms, with ``None`` standing for the shared no-form scope."""

    def __init__(self) -> None:
        self._forms: list[DomElement] = []
        self._no_form = False

    async def add(self, form: DomElement | None) -> bool:
        if form is None:
            if self._no_form:
                return False
            self._no_form = True
            return True
        for seen in self._forms:
            if await seen.is_same(form):
                return False
        self._forms.append(form)
        return True


async def form_has_marker(form: DomElement | None) -> bool:
    if form is None:
        return False
    for attribute in FORM_MARKER_ATTRIBUTES:
        value = await form.get_attribute(attribute)
        if value and value.lower() in FORM_MARKERS:
            return True
    return False


def search_scopes(form: DomElement | None, roots: Sequence[DomRoot]) -> list[DomNode]:
    if form is not None:
        return [form]
    return list(roots)


async def find_password_field(
    anchor: DomElement,
    form: DomElement | None,
    roots: Sequence[DomRoot],
    visibility: VisibilityFilter,
) -> DomElement | None:
    if await anchor.input_type() == "password":
        return anchor
    for found in await visibility.query(search_scopes(form, roots), PASSWORD_SELECTORS):
        # A formless anchor must not borrow a password field that belongs to some form.
        if ((await found.owner_form()) is None) != (form is None):
            continue
        return found
    return None


async def collect_anchors(
    roots: Sequence[DomRoot], visibility: VisibilityFilter
) -> list[tuple[Role, DomElement]]:
    """Password matches first: password markup is less ambiguous than username markup."""

    anchors: list[tuple[Role, DomElement]] = [
        ("password", element) for element in await visibility.query(roots, PASSWORD_SELECTORS)
    ]
    anchors.extend(
        ("user", element)
        for element in await visibility.query(roots, USERNAME_SELECTORS, USERNAME_INPUT_TYPES)
    )
    return anchors


async def classify_candidates(roots: Sequence[DomRoot], visibility: VisibilityFilter) -> Classification:
    classification = Classification()
    seen = _SeenForms()
    for role, anchor in await collect_anchors(roots, visibility):
        form = await anchor.owner_form()
        if not await seen.add(form):
            continue
        classification.forms_visited += 1

        has_marker = await form_has_marker(form)
        password = await find_password_field(anchor, form, roots, visibility)
        candidate = CandidateForm(
            owner_form=form,
            searched_role=role,
            username_field=anchor if role == "user" else None,
            password_field=password,
            has_marker=has_marker,
        )

        if has_marker and password is not None:
            # A marked form that already shows a password field is as good as it gets.
            logger.debug("Short-circuit on marked form via %s anchor", role)
            classification.selected = candidate
            return classification

        classification.buckets.setdefault(candidate.bucket_key, []).append(candidate)

    return classification
