from __future__ import annotations

from .classifier import CandidateForm, Classification, classify_candidates
from .complement import find_username_field
from .dispatcher import FillDispatcher, FocusTracker, LoginFields, resolve_login_fields
from .form_selector import BUCKET_PRIORITY, select_form
from .injector import inject_value
from .roots import enumerate_search_roots
from .visibility import VisibilityFilter, VisibilityThresholds

__all__ = [
    "BUCKET_PRIORITY",
    "CandidateForm",
    "Classification",
    "FillDispatcher",
    "FocusTracker",
    "LoginFields",
    "VisibilityFilter",
    "VisibilityThresholds",
    "classify_candidates",
    "enumerate_search_roots",
    "find_username_field",
    "inject_value",
    "resolve_login_fields",
    "select_form",
]
