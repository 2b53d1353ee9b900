from __future__ import annotations

from dataclasses import dataclass, field

from ..errors import SandboxViolation
from .tools import expand_allowlist, normalize_host


@dataclass(slots=True)
class SandboxPolicy:
    """Navigation guardrails for the browser session.

    An empty allow-list permits every host.
    """

    allowed_hosts: set[str] = field(default_factory=set)
    step_timeout_s: int = 30

    @classmethod
    def from_hosts(cls, hosts: tuple[str, ...], step_timeout_s: int = 30) -> "SandboxPolicy":
        return cls(allowed_hosts=expand_allowlist(hosts), step_timeout_s=step_timeout_s)

    @property
    def step_timeout_ms(self) -> int:
        return self.step_timeout_s * 1000

    def validate_navigation(self, url: str) -> None:
        if not self.allowed_hosts:
            return
        host = normalize_host(url)
        if host not in self.allowed_hosts:
            raise SandboxViolation(f"Navigation to {host} is not allowed")
