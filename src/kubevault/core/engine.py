#!/usr/bin/env python3
"""
KUBEVAULT ENGINE - The Orchestrator
-----------------------------------
KubeVaultEngine owns the parsed manifest corpus and drives the three
workflows built on it: listing referenced secrets, verifying them against
Vault and generating Secret manifests from Vault data.

Author: KubeVault Team
Date: 2026-10-17
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from kubevault.commands.discover import discover_mappings
from kubevault.commands.generate import create_secret_templates
from kubevault.commands.verify import VerificationResult, verify_secrets_exist
from kubevault.core.corpus import Corpus
from kubevault.core.errors import VerificationError
from kubevault.core.models import SecretMapping, VaultPath
from kubevault.secrets.grouping import (
    grouped_env_secrets,
    grouped_volume_secrets,
    referenced_secret_names,
    secret_reference_names,
)

logger = logging.getLogger("kubevault.engine")


class KubeVaultEngine:
    """
    Principal orchestrator for secret discovery over rendered manifests.
    The corpus is parsed once and only read afterwards.
    """

    def __init__(self, corpus: Corpus):
        self.corpus = corpus

    @classmethod
    def from_text(cls, text: str) -> "KubeVaultEngine":
        return cls(Corpus.from_text(text))

    def list_report(self) -> Dict[str, Any]:
        """Everything the manifests reference, as plain data for rendering."""
        volumes = grouped_volume_secrets(self.corpus)
        return {
            "env_secrets": grouped_env_secrets(self.corpus),
            "secret_refs": secret_reference_names(self.corpus),
            "volume_secrets": {
                name: [usage.to_dict() for usage in usages]
                for name, usages in volumes.items()
            },
            "referenced_secrets": sorted(referenced_secret_names(self.corpus)),
        }

    def resolve_mappings(self, mappings: Sequence[SecretMapping], client=None,
                         discover_path: Optional[VaultPath] = None) -> List[SecretMapping]:
        """
        Explicit mappings win. Without any, and given a Vault folder, the
        mappings are discovered from the folder's children.
        """
        if mappings or discover_path is None:
            return list(mappings)
        discovered = discover_mappings(client, discover_path, self.corpus)
        logger.info(f"Discovered {len(discovered)} secret mapping(s) under {discover_path}")
        return discovered

    def verify(self, mappings: Sequence[SecretMapping], client) -> VerificationResult:
        return verify_secrets_exist(mappings, self.corpus, client)

    def render_secrets(self, mappings: Sequence[SecretMapping], namespace: str, client) -> str:
        return create_secret_templates(mappings, namespace, client)

    def generate(self, mappings: Sequence[SecretMapping], namespace: str, client,
                 report: Optional[Callable[[VerificationResult], None]] = None) -> str:
        """
        Verifies first; refuses to render anything when a secret is missing.
        `report` receives the verification result before either outcome.
        """
        result = self.verify(mappings, client)
        if report is not None:
            report(result)
        if not result.ok:
            raise VerificationError(result.errors)
        return self.render_secrets(mappings, namespace, client)
