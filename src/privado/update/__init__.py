"""Release checks and self-update."""

from privado.update.installer import (
    current_executable,
    download_to_file,
    extract_tar_gz,
    has_write_permission,
    is_frozen_build,
    safe_move_file,
)
from privado.update.releases import (
    ReleaseInfo,
    check_for_update,
    describe_release,
    fetch_latest_release,
    is_newer,
    release_download_url,
)

__all__ = [
    "ReleaseInfo",
    "check_for_update",
    "current_executable",
    "describe_release",
    "download_to_file",
    "extract_tar_gz",
    "fetch_latest_release",
    "has_write_permission",
    "is_frozen_build",
    "is_newer",
    "release_download_url",
    "safe_move_file",
]
