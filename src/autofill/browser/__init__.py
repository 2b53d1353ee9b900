from __future__ import annotations

from .sandbox import SandboxPolicy
from .session import AutofillSession
from .tools import expand_allowlist, normalize_host

__all__ = [
	"AutofillSession",
	"SandboxPolicy",
	"normalize_host",
	"expand_allowlist",
]
