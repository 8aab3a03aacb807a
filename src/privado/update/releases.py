"""Latest-release lookup on GitHub and version comparison."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone

import httpx
from pydantic import BaseModel

logger = logging.getLogger(__name__)

GITHUB_API_HOST = "https://api.github.com"
RELEASE_DOWNLOAD_URL = "https://github.com/{repo}/releases/download/{tag}/{filename}"

_VERSION_RE = re.compile(r"^v?(\d+(?:\.\d+)*)")


class ReleaseInfo(BaseModel):
    tag_name: str = ""
    published_at: str = ""


def fetch_latest_release(
    repository_name: str,
    *,
    client: httpx.Client | None = None,
    timeout: float = 10.0,
) -> ReleaseInfo:
    """Return the latest published release of *repository_name*.

    Raises :class:`httpx.HTTPError` when the API cannot be reached or
    answers with a non-200 status.
    """
    url = f"{GITHUB_API_HOST}/repos/{repository_name}/releases/latest"
    owns_client = client is None
    http = client or httpx.Client(timeout=timeout)
    try:
        response = http.get(url, headers={"Accept": "application/vnd.github.v3+json"})
        response.raise_for_status()
    finally:
        if owns_client:
            http.close()
    return ReleaseInfo.model_validate(response.json())


def release_download_url(repository_name: str, tag: str, filename: str) -> str:
    return RELEASE_DOWNLOAD_URL.format(repo=repository_name, tag=tag, filename=filename)


def parse_version(version: str) -> tuple[int, ...] | None:
    """``"v1.2.3"`` → ``(1, 2, 3)``; ``None`` for anything that is not a release version."""
    match = _VERSION_RE.match(version.strip())
    if match is None:
        return None
    return tuple(int(part) for part in match.group(1).split("."))


def is_newer(candidate: str, current: str) -> bool:
    new, old = parse_version(candidate), parse_version(current)
    if new is None or old is None:
        return False
    width = max(len(new), len(old))
    return new + (0,) * (width - len(new)) > old + (0,) * (width - len(old))


def days_since(timestamp: str, *, now: datetime | None = None) -> int:
    """Whole days elapsed since an RFC 3339 *timestamp*, rounded to the nearest day."""
    published = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    if published.tzinfo is None:
        published = published.replace(tzinfo=timezone.utc)
    elapsed = (now or datetime.now(timezone.utc)) - published
    return round(elapsed.total_seconds() / 86400)


def describe_release(release: ReleaseInfo, *, now: datetime | None = None) -> str:
    try:
        days = days_since(release.published_at, now=now)
    except ValueError:
        return f"New release found: {release.tag_name}"

    if days < 1:
        since = "Released today"
    elif days == 1:
        since = "Released yesterday"
    else:
        since = f"Released {days} days ago"
    return f"New release found: {release.tag_name} ({since})"


def check_for_update(
    current_version: str,
    repository_name: str,
    *,
    is_dev_build: bool = False,
    client: httpx.Client | None = None,
) -> tuple[bool, str, ReleaseInfo | None]:
    """Compare *current_version* against the latest release.

    Returns ``(has_update, message, release)``. Dev builds never report an
    update. Network failures propagate as :class:`httpx.HTTPError`.
    """
    if is_dev_build:
        return False, "", None

    release = fetch_latest_release(repository_name, client=client)
    if not release.tag_name or not release.published_at:
        logger.debug("Latest release is missing tag or publish date: %s", release)
        return False, "", release

    if not is_newer(release.tag_name, current_version):
        return False, "", release
    return True, describe_release(release), release
