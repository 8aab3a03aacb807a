"""Volume/mount resolution — enabled mount slots to ``docker --mount`` arguments."""

from __future__ import annotations

from collections.abc import Mapping

from privado.runtime.container.models import MountSlot, VolumeMount

# Order in which mounts are handed to docker.
SLOT_ORDER: tuple[MountSlot, ...] = (
    MountSlot.USER_KEY,
    MountSlot.DOCKER_KEY,
    MountSlot.USER_CONFIG,
    MountSlot.SOURCE_CODE,
    MountSlot.EXTERNAL_RULES,
    MountSlot.M2_CACHE,
    MountSlot.GRADLE_CACHE,
)


def resolve_mounts(volumes: Mapping[MountSlot, VolumeMount]) -> list[VolumeMount]:
    """Return the enabled mounts in slot order."""
    return [
        volumes[slot]
        for slot in SLOT_ORDER
        if slot in volumes and volumes[slot].enabled
    ]


def mount_args(mounts: list[VolumeMount]) -> list[str]:
    """Build ``--mount type=bind,...`` arguments for ``docker create``."""
    args: list[str] = []
    for mount in mounts:
        fields = [
            "type=bind",
            _csv_field(f"source={mount.host_path}"),
            _csv_field(f"target={mount.container_path}"),
        ]
        if mount.read_only:
            fields.append("readonly")
        args.extend(["--mount", ",".join(fields)])
    return args


def _csv_field(value: str) -> str:
    # docker parses --mount as a CSV record
    if any(ch in value for ch in ',"\n'):
        return '"' + value.replace('"', '""') + '"'
    return value
