from __future__ import annotations

from typing import Sequence

from ..dom.base import DomElement, DomRoot
from .classifier import CandidateForm, search_scopes
from .selectors import USERNAME_INPUT_TYPES, USERNAME_SELECTORS
from .visibility import VisibilityFilter


async def find_username_field(
    selected: CandidateForm,
    roots: Sequence[DomRoot],
    visibility: VisibilityFilter,
) -> DomElement | None:
    """Resolve the username field of a form discovered through its password field.

    Returns ``None`` when nothing qualifies; username and password may live on
    separate pages of a multi-step login.
    """

    if selected.username_field is not None:
        return selected.username_field

    form = selected.owner_form
    password = selected.password_field
    # Inside a scope already anchored by a password field, an untyped input is a username candidate.
    matches = await visibility.query(
        search_scopes(form, roots), USERNAME_SELECTORS, USERNAME_INPUT_TYPES, implicit_type=True
    )
    for found in matches:
        if ((await found.owner_form()) is None) != (form is None):
            continue
        if password is not None and await found.is_same(password):
            continue
        return found
    return None
