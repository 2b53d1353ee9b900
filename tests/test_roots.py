from __future__ import annotations

import pytest

from autofill.fill.roots import enumerate_search_roots

from dom_fakes import FakeElement, document, el, inp


@pytest.mark.asyncio
async def test_document_is_always_first_root() -> None:
    doc = document(el("div"))
    assert await enumerate_search_roots(doc) == [doc]


@pytest.mark.asyncio
async def test_fragment_with_input_becomes_root() -> None:
    host = el("login-widget")
    shadow = host.attach_shadow(el("form", inp(type="password")))
    doc = document(el("main", host))

    assert await enumerate_search_roots(doc) == [doc, shadow]


@pytest.mark.asyncio
async def test_fragment_without_input_is_skipped() -> None:
    host = el("fancy-button")
    host.attach_shadow(el("span"))
    doc = document(host, inp(type="text"))

    assert await enumerate_search_roots(doc) == [doc]


@pytest.mark.asyncio
async def test_inputs_count_toward_innermost_fragment_only() -> None:
    inner_host = el("inner-widget")
    inner = inner_host.attach_shadow(inp(type="text"))
    outer_host = el("outer-widget")
    outer = outer_host.attach_shadow(el("div", inner_host))
    doc = document(outer_host)

    roots = await enumerate_search_roots(doc)

    assert doc in roots and inner in roots
    assert outer not in roots


@pytest.mark.asyncio
async def test_light_children_of_host_are_still_walked() -> None:
    inner_host = el("slot-widget")
    inner = inner_host.attach_shadow(inp(type="email"))
    outer_host = el("card", inner_host)
    outer_host.attach_shadow(el("slot"))
    doc = document(outer_host)

    assert await enumerate_search_roots(doc) == [doc, inner]


@pytest.mark.asyncio
async def test_deep_tree_does_not_exhaust_recursion() -> None:
    doc = document()
    node: FakeElement = el("div")
    doc.append(node)
    for _ in range(5000):
        child = el("div")
        node.append(child)
        node = child
    host = el("deep-widget")
    node.append(host)
    shadow = host.attach_shadow(inp(type="text"))

    assert await enumerate_search_roots(doc) == [doc, shadow]


@pytest.mark.asyncio
async def test_sibling_fragments_follow_tree_order() -> None:
    first_host = el("first-widget")
    first = first_host.attach_shadow(inp(type="text"))
    second_host = el("second-widget")
    second = second_host.attach_shadow(inp(type="password"))
    doc = document(first_host, el("div", second_host))

    assert await enumerate_search_roots(doc) == [doc, first, second]
