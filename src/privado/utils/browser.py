"""Open result URLs printed by the engine in the user's browser."""

from __future__ import annotations

import logging
import re

import click

from privado.utils.console import console

logger = logging.getLogger(__name__)

_URL_RE = re.compile(r"(?:https?://|www\.)[^\s\"'<>\x1b]+")
_TRAILING_PUNCTUATION = ".,;:!?)]}"


def extract_url(text: str) -> str:
    """Return the first URL in *text*, or ``""``."""
    match = _URL_RE.search(text)
    if match is None:
        return ""
    return match.group(0).rstrip(_TRAILING_PUNCTUATION)


def open_url_in_browser(url: str) -> bool:
    """Open *url* with the platform opener; print it when that fails.

    Returns ``True`` when a browser was launched.
    """
    try:
        launched = click.launch(url) == 0
    except OSError as exc:
        logger.debug("Browser launch failed for %s: %s", url, exc)
        launched = False

    if not launched:
        console.print("\n> Unable to open browser")
        console.print(f"> Kindly open the following URL to continue: {url}", markup=False)
    return launched
