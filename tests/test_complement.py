from __future__ import annotations

import pytest

from autofill.dom.base import Viewport
from autofill.fill.classifier import CandidateForm
from autofill.fill.complement import find_username_field
from autofill.fill.visibility import VisibilityFilter

from dom_fakes import FakePage, document, el, inp

VISIBILITY = VisibilityFilter(Viewport(1280, 720))


@pytest.mark.asyncio
async def test_existing_username_is_reused() -> None:
    user = inp(type="text")
    selected = CandidateForm(owner_form=None, searched_role="user", username_field=user)

    assert await find_username_field(selected, [], VISIBILITY) is user


@pytest.mark.asyncio
async def test_searches_owner_form_only() -> None:
    outside = inp(type="text", name="username")
    inside = inp(type="email")
    password = inp(type="password")
    form = el("form", inside, password)
    doc = document(outside, form)
    FakePage(doc)
    selected = CandidateForm(owner_form=form, searched_role="password", password_field=password)

    assert await find_username_field(selected, [doc], VISIBILITY) is inside


@pytest.mark.asyncio
async def test_formless_scope_skips_fields_owned_by_forms() -> None:
    in_form = inp(type="text", name="login")
    formless = inp(type="tel")
    password = inp(type="password")
    doc = document(el("form", in_form), formless, password)
    FakePage(doc)
    selected = CandidateForm(owner_form=None, searched_role="password", password_field=password)

    assert await find_username_field(selected, [doc], VISIBILITY) is formless


@pytest.mark.asyncio
async def test_password_field_is_never_the_username() -> None:
    password = inp(type="password", name="user_password")
    form = el("form", password)
    doc = document(form)
    FakePage(doc)
    selected = CandidateForm(owner_form=form, searched_role="password", password_field=password)

    assert await find_username_field(selected, [doc], VISIBILITY) is None


@pytest.mark.asyncio
async def test_missing_username_is_not_an_error() -> None:
    password = inp(type="password")
    hidden_user = inp(type="text", name="username", visibility="hidden")
    form = el("form", hidden_user, password)
    doc = document(form)
    FakePage(doc)
    selected = CandidateForm(owner_form=form, searched_role="password", password_field=password)

    assert await find_username_field(selected, [doc], VISIBILITY) is None
