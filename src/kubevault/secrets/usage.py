#!/usr/bin/env python3
"""
KUBEVAULT USAGE CORRELATOR
--------------------------
Links each secret-backed volume to the containers that mount it and to the
strings inside those containers (args, command, env values...) that point
at a file below the mount path.

Matching is textual: a value counts as a usage when it contains
`<mountPath>/`. A bare `<mountPath>` with nothing after it is not a usage.

Author: KubeVault Team
Date: 2026-10-17
"""

from typing import List, Optional, Sequence

from kubevault.core.corpus import Corpus, as_mapping, as_sequence, as_str
from kubevault.core.models import VolumeSecret, VolumeUsage


def container_identity(container: dict) -> Optional[str]:
    """Container name, falling back to the image for unnamed containers."""
    name = as_str(container.get("name"))
    return name if name is not None else as_str(container.get("image"))


def mount_paths_for(container: dict, volume_name: str) -> List[str]:
    paths = []
    for mount in as_sequence(container.get("volumeMounts")) or []:
        mount = as_mapping(mount)
        if mount is None or as_str(mount.get("name")) != volume_name:
            continue
        path = as_str(mount.get("mountPath"))
        if path is not None:
            paths.append(path)
    return paths


def path_usages(container: dict, mount_paths: Sequence[str]) -> List[str]:
    prefixes = [f"{path}/" for path in mount_paths]

    def referencing(value):
        text = as_str(value)
        if text is not None and any(prefix in text for prefix in prefixes):
            return text
        return None

    return Corpus.filter_map_values_from(container, referencing)


def volume_usages(mapping: dict, secret: VolumeSecret) -> Optional[List[VolumeUsage]]:
    """Filter-map over a mapping holding a `containers` sequence."""
    containers = as_sequence(mapping.get("containers"))
    if containers is None:
        return None

    found = []
    for container in containers:
        container = as_mapping(container)
        if container is None:
            continue
        mounted_in = container_identity(container)
        if mounted_in is None:
            continue
        mount_paths = mount_paths_for(container, secret.volume_name)
        if not mount_paths:
            continue

        found.append(VolumeUsage(
            volume_name=secret.volume_name,
            secret_name=secret.secret_name,
            mounted_in=mounted_in,
            mount_paths=tuple(mount_paths),
            usages=tuple(path_usages(container, mount_paths)),
        ))
    return found


def find_volume_usages(corpus: Corpus, secret: VolumeSecret) -> List[VolumeUsage]:
    batches = corpus.filter_map_mappings(lambda m: volume_usages(m, secret))
    return [usage for batch in batches for usage in batch]


def find_all_volume_usages(corpus: Corpus, secrets: Sequence[VolumeSecret]) -> List[VolumeUsage]:
    results: List[VolumeUsage] = []
    for secret in secrets:
        results.extend(find_volume_usages(corpus, secret))
    return results
