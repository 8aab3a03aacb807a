"""Self-update of a frozen privado executable.

Download the release archive, extract it, then swap the running binary
for the new one. The previous binary is kept as a backup until the swap
succeeds and is restored when it fails.
"""

from __future__ import annotations

import contextlib
import logging
import os
import shutil
import sys
import tarfile
from collections.abc import Iterator
from pathlib import Path

import httpx
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TextColumn,
    TransferSpeedColumn,
)

from privado.utils.console import console
from privado.runtime.errors import UpdateError

logger = logging.getLogger(__name__)

EXECUTABLE_NAME = "privado.exe" if sys.platform == "win32" else "privado"


def is_frozen_build() -> bool:
    """True when running as a standalone executable rather than a Python install."""
    return bool(getattr(sys, "frozen", False))


def current_executable() -> Path:
    try:
        return Path(sys.executable).resolve(strict=True)
    except OSError as exc:
        raise UpdateError(f"Could not evaluate path to current binary: {exc}") from exc


def has_write_permission(path: Path) -> bool:
    return os.access(path, os.W_OK) and os.access(path.parent, os.W_OK)


def download_to_file(
    url: str,
    destination: Path,
    *,
    client: httpx.Client | None = None,
    show_progress: bool = True,
) -> None:
    """Stream *url* into *destination* with a progress bar."""
    owns_client = client is None
    http = client or httpx.Client(follow_redirects=True, timeout=60.0)
    progress = Progress(
        TextColumn("Downloading.."),
        BarColumn(),
        DownloadColumn(),
        TransferSpeedColumn(),
        console=console,
        disable=not show_progress,
    )
    try:
        with http.stream("GET", url) as response, progress:
            response.raise_for_status()
            total = int(response.headers.get("Content-Length", 0)) or None
            task = progress.add_task("download", total=total)
            with destination.open("wb") as fh:
                for chunk in response.iter_bytes():
                    fh.write(chunk)
                    progress.advance(task, len(chunk))
    except (httpx.HTTPError, OSError) as exc:
        raise UpdateError(f"Could not download release asset: {url}") from exc
    finally:
        if owns_client:
            http.close()


def extract_tar_gz(archive: Path, target: Path) -> None:
    try:
        with tarfile.open(archive, "r:gz") as tar:
            for member in tar.getmembers():
                resolved = (target / member.name).resolve()
                if not resolved.is_relative_to(target.resolve()):
                    raise UpdateError(f"Refusing to extract {member.name} outside {target}")
            tar.extractall(target)
    except (tarfile.TarError, OSError) as exc:
        raise UpdateError(f"Could not extract release asset: {archive}: {exc}") from exc


@contextlib.contextmanager
def backup_of(target: Path, backup: Path) -> Iterator[Path]:
    """Keep a copy of *target* at *backup*; restore it if the block fails."""
    console.print(f"> Creating backup of existing file ({backup})", markup=False)
    shutil.copy2(target, backup)
    try:
        yield backup
    except BaseException:
        console.print("> Restoring from backup")
        try:
            shutil.copy2(backup, target)
        except OSError as restore_exc:
            console.print(f"\nUnable to restore original file:\n {restore_exc}", markup=False)
            console.print(f"Kindly restore it manually from {backup}", markup=False)
            raise
        backup.unlink(missing_ok=True)
        raise
    console.print("> Removing backup file")
    backup.unlink(missing_ok=True)


def safe_move_file(source: Path, target: Path) -> None:
    """Replace *target* with *source* by copy, restoring *target* on failure.

    A plain rename fails across devices, so the file is copied instead.
    """
    source = source.resolve()
    try:
        if not target.exists():
            _copy_executable(source, target)
            return

        target = target.resolve()
        backup = source.with_name(f"{source.name}-backup")
        with backup_of(target, backup):
            target.unlink()
            _copy_executable(source, target)
    except OSError as exc:
        raise UpdateError(f"Could not update existing installation: {exc}") from exc


def _copy_executable(source: Path, target: Path) -> None:
    shutil.copy2(source, target)
    target.chmod(target.stat().st_mode | 0o111)
