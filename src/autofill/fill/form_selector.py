from __future__ import annotations

import itertools
from typing import Mapping, Sequence

from ..errors import NoLoginFormFound
from .classifier import BucketKey, CandidateForm

# Real form over none, marked over unmarked, with password over without.
BUCKET_PRIORITY: tuple[BucketKey, ...] = tuple(itertools.product((True, False), repeat=3))


def select_form(buckets: Mapping[BucketKey, Sequence[CandidateForm]]) -> CandidateForm:
    for key in BUCKET_PRIORITY:
        candidates = buckets.get(key)
        if candidates:
            return candidates[0]
    raise NoLoginFormFound()
