#!/usr/bin/env python3
"""
KUBEVAULT DISCOVER
------------------
Builds secret mappings from a Vault folder instead of explicit `-m` flags:
every secret stored directly below the folder maps to the Kubernetes secret
of the same name.

Author: KubeVault Team
Date: 2026-10-17
"""

import logging
from typing import List

from kubevault.core.corpus import Corpus
from kubevault.core.models import SecretMapping, VaultPath
from kubevault.secrets.grouping import referenced_secret_names

logger = logging.getLogger("kubevault.discover")


def secrets_in_path(client, vault_path: VaultPath) -> List[SecretMapping]:
    keys = client.list_children(vault_path.engine, vault_path.path)
    # Sub-folders are listed with a trailing slash
    return [SecretMapping(key, vault_path.join(key)) for key in keys if not key.endswith("/")]


def discover_mappings(client, vault_path: VaultPath, corpus: Corpus) -> List[SecretMapping]:
    """Mappings for the secrets below `vault_path` that the manifests reference."""
    wanted = referenced_secret_names(corpus)
    mappings = [m for m in secrets_in_path(client, vault_path) if m.kubernetes_name in wanted]
    missing = wanted - {m.kubernetes_name for m in mappings}
    if missing:
        logger.warning(f"No secret under {vault_path} for: {', '.join(sorted(missing))}")
    return mappings
