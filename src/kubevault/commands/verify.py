#!/usr/bin/env python3
"""
KUBEVAULT VERIFY
----------------
Checks that every secret referenced by the manifests has a Vault mapping and
that the mapped path holds the referenced keys. Failures are collected per
secret rather than raised, so a single run reports every problem.

Author: KubeVault Team
Date: 2026-10-17
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from kubevault.core.corpus import Corpus
from kubevault.core.errors import VaultClientError
from kubevault.core.models import SecretMapping, VaultPath
from kubevault.secrets.extractors import find_volume_secrets
from kubevault.secrets.grouping import grouped_env_secrets, secret_reference_names

logger = logging.getLogger("kubevault.verify")


@dataclass
class VerificationResult:
    verified: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def find_mapping(mappings: Sequence[SecretMapping], secret_name: str) -> Optional[SecretMapping]:
    return next((m for m in mappings if m.kubernetes_name == secret_name), None)


def verify_secrets_exist(mappings: Sequence[SecretMapping], corpus: Corpus, client) -> VerificationResult:
    """
    Env-key references are checked key by key; whole-secret and volume
    references only need the mapped path to be readable.
    """
    result = VerificationResult()
    fetched: Dict[VaultPath, Dict[str, str]] = {}

    def fetch(mapping: SecretMapping) -> Optional[Dict[str, str]]:
        path = mapping.vault_path
        if path not in fetched:
            try:
                fetched[path] = client.fetch_all(path.engine, path.path)
            except VaultClientError as e:
                logger.debug(f"Fetching {path} failed: {e}")
                result.errors.append(f"Vault client error: {e}")
                return None
        return fetched[path]

    def missing_mapping(secret_name: str):
        result.errors.append(f"Couldn't find a vault mapping for kubernetes secret {secret_name}")

    env_secrets = grouped_env_secrets(corpus)
    for secret_name, keys in env_secrets.items():
        mapping = find_mapping(mappings, secret_name)
        if mapping is None:
            missing_mapping(secret_name)
            continue
        data = fetch(mapping)
        if data is None:
            continue
        engine, path = mapping.vault_engine, mapping.path
        for key in keys:
            if key in data:
                result.verified.append(f"{secret_name}:{key} maps to {engine}:{path}/{key}")
            else:
                result.errors.append(f"Key '{key}' for secret '{secret_name}' not found in {engine}:{path}")

    whole_secrets = secret_reference_names(corpus)
    for volume in find_volume_secrets(corpus):
        if volume.secret_name not in whole_secrets:
            whole_secrets.append(volume.secret_name)

    for secret_name in whole_secrets:
        if secret_name in env_secrets:
            continue
        mapping = find_mapping(mappings, secret_name)
        if mapping is None:
            missing_mapping(secret_name)
            continue
        if fetch(mapping) is not None:
            result.verified.append(f"{secret_name} maps to {mapping.vault_path}")

    return result
