from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Mapping

from ..dom.base import DomElement, DomPage
from ..errors import AutofillError, NoFocusedField
from ..logging import bind_request_context, reset_request_context, set_request_context
from ..types import FillField, FillResponse, FillUserPassword, parse_request
from .classifier import classify_candidates
from .complement import find_username_field
from .form_selector import select_form
from .injector import inject_value
from .roots import enumerate_search_roots
from .visibility import VisibilityFilter, VisibilityThresholds

logger = logging.getLogger(__name__)


class FocusTracker:
    """Remembers the input a user last focused or blurred.

    Lives as long as the page context it observes; updates are last-write-wins.
    """

    def __init__(self) -> None:
        self._last: DomElement | None = None

    @property
    def last_focused(self) -> DomElement | None:
        return self._last

    def record(self, element: DomElement | None) -> None:
        """Remember ``element``, which the caller has already checked to be an input.

        Synchronous so the update lands before any request queued behind it.
        """

        if element is not None:
            self._last = element

    def clear(self) -> None:
        self._last = None


@dataclass(slots=True)
class LoginFields:
    username: DomElement | None
    password: DomElement | None
    short_circuit: bool = False


async def resolve_login_fields(page: DomPage, thresholds: VisibilityThresholds | None = None) -> LoginFields:
    """Locate the username and password inputs of the most likely login form.

    Raises ``NoLoginFormFound`` when no candidate exists. Discovery state is
    rebuilt on every call.
    """

    roots = await enumerate_search_roots(await page.document())
    visibility = VisibilityFilter(await page.viewport(), thresholds)

    classification = await classify_candidates(roots, visibility)
    short_circuit = classification.selected is not None
    if classification.selected is not None:
        selected = classification.selected
    else:
        selected = select_form(classification.buckets)
    logger.debug(
        "Selected form candidate",
        extra={
            "forms_visited": classification.forms_visited,
            "bucket": list(selected.bucket_key),
            "anchor_role": selected.searched_role,
            "short_circuit": short_circuit,
        },
    )

    username = await find_username_field(selected, roots, visibility)
    return LoginFields(username=username, password=selected.password_field, short_circuit=short_circuit)


class FillDispatcher:
    """Run fill requests against a page, one at a time, answering each exactly once."""

    def __init__(
        self,
        page: DomPage,
        focus: FocusTracker | None = None,
        thresholds: VisibilityThresholds | None = None,
    ) -> None:
        self._page = page
        self._focus = focus or FocusTracker()
        self._thresholds = thresholds
        self._lock = asyncio.Lock()

    @property
    def focus(self) -> FocusTracker:
        return self._focus

    async def handle(self, message: Mapping[str, Any] | str | bytes) -> FillResponse:
        async with self._lock:
            token = set_request_context(request_id=str(uuid.uuid4()))
            try:
                request = parse_request(message)
                bind_request_context(request_type=request.type)
                logger.info("Handling %s request", request.type)
                if isinstance(request, FillUserPassword):
                    await self._fill_user_password(request)
                else:
                    await self._fill_field(request)
            except AutofillError as exc:
                logger.info("Fill request failed: %s", exc)
                return str(exc)
            except Exception as exc:
                logger.exception("Unexpected failure while filling")
                return f"Unexpected error: {exc}"
            finally:
                await self._page.release()
                reset_request_context(token)
            return None

    async def _fill_user_password(self, request: FillUserPassword) -> None:
        fields = await resolve_login_fields(self._page, self._thresholds)
        if fields.username is not None:
            await inject_value(self._page, fields.username, request.user)
            logger.info("Set value on user field %s", await fields.username.describe())
        else:
            logger.info("No user field found")
        if fields.password is not None:
            await inject_value(self._page, fields.password, request.password)
            logger.info("Set value on password field %s", await fields.password.describe())
        else:
            logger.info("No password field found")

    async def _fill_field(self, request: FillField) -> None:
        target = self._focus.last_focused
        if target is None:
            raise NoFocusedField()
        await inject_value(self._page, target, request.text)
        logger.info("Set value on focused field %s", await target.describe())
