from __future__ import annotations

import re
from typing import Iterable

_HOST_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://([^/:?#]+)")


def normalize_host(url: str) -> str:
    match = _HOST_PATTERN.match(url)
    if not match:
        return url.lower()
    return match.group(1).lower()


def expand_allowlist(hosts: Iterable[str]) -> set[str]:
    normalised = {host.strip().lower() for host in hosts if host.strip()}
    expanded = set(normalised)
    expanded.update(host.removeprefix("www.") for host in normalised)
    expanded.update(f"www.{host}" for host in normalised if not host.startswith("www."))
    return expanded
