#!/usr/bin/env python3
"""
KUBEVAULT GROUPING
------------------
Folds extractor output into lookups keyed by secret name, which is what the
list report, the verifier and the discovery mode consume.

Author: KubeVault Team
Date: 2026-10-17
"""

from typing import Dict, List, Set

from kubevault.core.corpus import Corpus
from kubevault.core.models import VolumeUsage
from kubevault.secrets.extractors import (
    find_env_key_references,
    find_secret_references,
    find_volume_secrets,
)
from kubevault.secrets.usage import find_all_volume_usages


def grouped_env_secrets(corpus: Corpus) -> Dict[str, List[str]]:
    """Secret name -> every key referenced through secretKeyRef, in encounter order."""
    grouped: Dict[str, List[str]] = {}
    for ref in find_env_key_references(corpus):
        grouped.setdefault(ref.secret_name, []).append(ref.key)
    return grouped


def secret_reference_names(corpus: Corpus) -> List[str]:
    """Distinct names of secrets consumed whole through envFrom."""
    names: List[str] = []
    for ref in find_secret_references(corpus):
        if ref.secret_name not in names:
            names.append(ref.secret_name)
    return names


def grouped_volume_secrets(corpus: Corpus) -> Dict[str, List[VolumeUsage]]:
    grouped: Dict[str, List[VolumeUsage]] = {}
    for usage in find_all_volume_usages(corpus, find_volume_secrets(corpus)):
        grouped.setdefault(usage.secret_name, []).append(usage)
    return grouped


def referenced_secret_names(corpus: Corpus) -> Set[str]:
    """Every secret name the manifests need, whatever the mechanism."""
    names = {ref.secret_name for ref in find_env_key_references(corpus)}
    names.update(ref.secret_name for ref in find_secret_references(corpus))
    names.update(vs.secret_name for vs in find_volume_secrets(corpus))
    return names
