from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Optional

import typer

from .browser.sandbox import SandboxPolicy
from .browser.session import AutofillSession
from .config import Settings
from .errors import AutofillError
from .logging import setup_logging
from .types import FillField, FillResponse, FillUserPassword

app = typer.Typer(no_args_is_help=True)


def main() -> None:
    app()


def _prepare_settings(headful: bool, allowlist: Optional[str]) -> tuple[Settings, bool]:
    settings = Settings.from_env()
    if allowlist:
        settings.update_allowlist(allowlist.split(","))
    settings.ensure_directories()
    setup_logging(settings.log_level, settings.log_dir / "autofill.log")
    headless = settings.headless_default and not headful
    return settings, headless


def _report(response: FillResponse) -> None:
    if response is None:
        typer.echo("ok")
        return
    typer.echo(f"Error: {response}", err=True)
    raise typer.Exit(code=1)


@app.command()
def login(
    url: str = typer.Argument(..., help="Page holding the login form"),
    user: str = typer.Option(..., help="Username to fill"),
    password: str = typer.Option(..., prompt=True, hide_input=True, help="Password to fill"),
    headful: bool = typer.Option(False, help="Run browser in headed mode"),
    allowlist: Optional[str] = typer.Option(None, help="Comma separated host allowlist"),
    browser_profile_dir: Optional[Path] = typer.Option(
        None,
        help="Directory to store a persistent browser profile (reuse cookies and sessions)",
    ),
) -> None:
    """Fill the username and password fields of the login form on URL."""

    settings, headless = _prepare_settings(headful, allowlist)
    request = FillUserPassword(user=user, password=password)
    response = asyncio.run(_run(url, request.model_dump(), settings, headless, browser_profile_dir))
    _report(response)


@app.command()
def field(
    url: str = typer.Argument(..., help="Page holding the field"),
    selector: str = typer.Option(..., help="Selector of the input to focus before filling"),
    text: str = typer.Option(..., help="Text to fill"),
    headful: bool = typer.Option(False, help="Run browser in headed mode"),
    allowlist: Optional[str] = typer.Option(None, help="Comma separated host allowlist"),
) -> None:
    """Focus SELECTOR on URL, then fill the last focused field with TEXT."""

    settings, headless = _prepare_settings(headful, allowlist)
    request = FillField(text=text)
    response = asyncio.run(_run(url, request.model_dump(), settings, headless, None, focus_selector=selector))
    _report(response)


async def _run(
    url: str,
    message: dict[str, Any],
    settings: Settings,
    headless: bool,
    user_data_dir: Optional[Path],
    focus_selector: Optional[str] = None,
) -> FillResponse:
    sandbox = SandboxPolicy.from_hosts(settings.allowlist_hosts, step_timeout_s=settings.step_timeout_s)
    async with AutofillSession(
        sandbox,
        headless=headless,
        thresholds=settings.thresholds(),
        user_data_dir=user_data_dir,
    ) as session:
        try:
            await session.open_url(url)
            if focus_selector:
                await session.focus(focus_selector)
        except AutofillError as exc:
            return str(exc)
        return await session.send(message)
