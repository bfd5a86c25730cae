#!/usr/bin/env python3
"""
KUBEVAULT CORE MODELS
---------------------
Defines the records produced by the secret extractors and the mapping
between Kubernetes secret names and Vault locations.
All records are immutable and live for a single command invocation.

Author: KubeVault Team
Date: 2026-10-17
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Tuple

from kubevault.core.errors import MappingFormatError


@dataclass(frozen=True)
class EnvKeyReference:
    """A single key of a named secret consumed through `secretKeyRef`."""
    secret_name: str
    key: str


@dataclass(frozen=True)
class SecretReference:
    """A whole secret consumed as an environment source (`envFrom.secretRef`)."""
    secret_name: str


@dataclass(frozen=True)
class VolumeSecret:
    """A pod volume backed by a secret."""
    volume_name: str
    secret_name: str


@dataclass(frozen=True)
class VolumeUsage:
    """
    Correlates one secret volume with one container that mounts it.

    `usages` holds every string inside the container definition that
    references a file below one of the mount paths.
    """
    volume_name: str
    secret_name: str
    mounted_in: str         # Container name, or its image when unnamed
    mount_paths: Tuple[str, ...] = ()
    usages: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["mount_paths"] = list(self.mount_paths)
        data["usages"] = list(self.usages)
        return data


@dataclass(frozen=True)
class VaultPath:
    """A location in Vault: a KV v2 mount (`engine`) plus a path inside it."""
    engine: str
    path: str

    def join(self, key: str) -> "VaultPath":
        if self.path.endswith("/"):
            return VaultPath(self.engine, f"{self.path}{key}")
        return VaultPath(self.engine, f"{self.path}/{key}")

    @classmethod
    def parse(cls, text: str) -> "VaultPath":
        """Parses `engine:/some/path`."""
        engine, sep, path = text.partition(":")
        if not sep or not engine:
            raise MappingFormatError(f"Invalid vault path (missing vault engine): {text}")
        return cls(engine, path)

    def __str__(self) -> str:
        return f"{self.engine}:{self.path}"


@dataclass(frozen=True)
class SecretMapping:
    """Maps a Kubernetes secret name to the Vault path holding its data."""
    kubernetes_name: str
    vault_path: VaultPath

    @classmethod
    def parse(cls, text: str) -> "SecretMapping":
        """
        Parses the CLI form `my-secrets=engine-name:/apps/my-app/`.
        The first `=` separates the secret name, the first `:` after it
        separates the engine from the path.
        """
        kube_part, sep, vault_part = text.partition("=")
        if not sep:
            raise MappingFormatError(f"Invalid mapping (missing =): {text}")
        if ":" not in vault_part:
            raise MappingFormatError(
                f"Invalid mapping (missing vault engine): {text}.  "
                f"Kube secret name was {kube_part}"
            )
        engine, _, path = vault_part.partition(":")
        return cls(kube_part, VaultPath(engine, path))

    @property
    def vault_engine(self) -> str:
        return self.vault_path.engine

    @property
    def path(self) -> str:
        return self.vault_path.path
