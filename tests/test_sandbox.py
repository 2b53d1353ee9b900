from __future__ import annotations

import pytest

from autofill.browser import SandboxPolicy, expand_allowlist, normalize_host
from autofill.errors import SandboxViolation


def test_normalize_host_strips_scheme_port_and_path() -> None:
    assert normalize_host("https://Accounts.Example.com:8443/login?next=/") == "accounts.example.com"
    assert normalize_host("example.com") == "example.com"


def test_expand_allowlist_adds_www_variants() -> None:
    assert expand_allowlist(["example.com", " www.test.org ", ""]) == {
        "example.com",
        "www.example.com",
        "test.org",
        "www.test.org",
    }


def test_empty_allowlist_permits_any_host() -> None:
    SandboxPolicy().validate_navigation("https://anywhere.invalid/")


def test_allowlist_blocks_other_hosts() -> None:
    policy = SandboxPolicy.from_hosts(("example.com",), step_timeout_s=5)
    policy.validate_navigation("https://www.example.com/login")
    assert policy.step_timeout_ms == 5000
    with pytest.raises(SandboxViolation, match="evil.test"):
        policy.validate_navigation("https://evil.test/login")
