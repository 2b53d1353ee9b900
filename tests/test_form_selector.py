from __future__ import annotations

import itertools

import pytest

from autofill.errors import NoLoginFormFound
from autofill.fill.classifier import CandidateForm
from autofill.fill.form_selector import BUCKET_PRIORITY, select_form

from dom_fakes import el, inp


def _candidate(has_form: bool, marker: bool, password: bool) -> CandidateForm:
    return CandidateForm(
        owner_form=el("form") if has_form else None,
        searched_role="user",
        username_field=inp(type="text"),
        password_field=inp(type="password") if password else None,
        has_marker=marker,
    )


def test_priority_order_covers_all_keys_outer_to_inner() -> None:
    assert BUCKET_PRIORITY[:3] == ((True, True, True), (True, True, False), (True, False, True))
    assert BUCKET_PRIORITY[-1] == (False, False, False)
    assert len(set(BUCKET_PRIORITY)) == 8


@pytest.mark.parametrize("order", list(itertools.permutations(range(3))))
def test_priority_law_ignores_discovery_order(order: tuple[int, ...]) -> None:
    keys = [(True, True, True), (True, True, False), (True, False, True)]
    candidates = {key: _candidate(*key) for key in keys}
    buckets: dict[tuple[bool, bool, bool], list[CandidateForm]] = {}
    for index in order:
        key = keys[index]
        buckets.setdefault(key, []).append(candidates[key])

    assert select_form(buckets) is candidates[(True, True, True)]
    del buckets[(True, True, True)]
    assert select_form(buckets) is candidates[(True, True, False)]
    del buckets[(True, True, False)]
    assert select_form(buckets) is candidates[(True, False, True)]


def test_form_outranks_marker_and_password_of_formless_scope() -> None:
    unmarked_form = _candidate(True, False, False)
    formless = _candidate(False, False, True)
    buckets = {(False, False, True): [formless], (True, False, False): [unmarked_form]}

    assert select_form(buckets) is unmarked_form


def test_ties_resolved_by_discovery_order() -> None:
    first = _candidate(True, False, True)
    second = _candidate(True, False, True)

    assert select_form({(True, False, True): [first, second]}) is first


def test_empty_buckets_fail() -> None:
    with pytest.raises(NoLoginFormFound):
        select_form({})
    with pytest.raises(NoLoginFormFound):
        select_form({(True, True, True): []})
