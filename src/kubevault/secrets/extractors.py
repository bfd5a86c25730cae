#!/usr/bin/env python3
"""
KUBEVAULT EXTRACTORS - Secret Shape Matching
--------------------------------------------
Each extractor is a filter-map predicate over a single mapping node.
Shapes are matched structurally (key names plus node kinds), never by
schema, so unknown or half-rendered resources are simply skipped.

Recognized shapes:
    env:
      - valueFrom:
          secretKeyRef: {name: db, key: password}     -> EnvKeyReference
    envFrom:
      - secretRef: {name: app-env}                    -> SecretReference
    volumes:
      - name: creds
        secret: {secretName: db-creds}                -> VolumeSecret

Author: KubeVault Team
Date: 2026-10-17
"""

from typing import List, Optional

from kubevault.core.corpus import Corpus, as_mapping, as_sequence, as_str, lookup
from kubevault.core.models import EnvKeyReference, SecretReference, VolumeSecret

SECRET_KEY_REF = "secretKeyRef"
SECRET_REF = "secretRef"


def env_key_reference(mapping: dict) -> Optional[EnvKeyReference]:
    ref = as_mapping(mapping.get(SECRET_KEY_REF))
    if ref is None:
        return None
    name = as_str(ref.get("name"))
    key = as_str(ref.get("key"))
    if name is None or key is None:
        return None
    return EnvKeyReference(secret_name=name, key=key)


def secret_reference(mapping: dict) -> Optional[SecretReference]:
    name = as_str(lookup(mapping, SECRET_REF, "name"))
    if name is None:
        return None
    return SecretReference(secret_name=name)


def volume_secrets(mapping: dict) -> Optional[List[VolumeSecret]]:
    """
    Matches a pod spec style mapping holding a `volumes` sequence.
    One record per secret-backed volume; volumes without a string name or
    secretName are skipped rather than failing the whole spec.
    """
    volumes = as_sequence(mapping.get("volumes"))
    if volumes is None:
        return None

    found = []
    for volume in volumes:
        volume = as_mapping(volume)
        if volume is None or as_mapping(volume.get("secret")) is None:
            continue
        volume_name = as_str(volume.get("name"))
        secret_name = as_str(lookup(volume, "secret", "secretName"))
        if volume_name is None or secret_name is None:
            continue
        found.append(VolumeSecret(volume_name=volume_name, secret_name=secret_name))
    return found


def find_env_key_references(corpus: Corpus) -> List[EnvKeyReference]:
    return corpus.filter_map_mappings(env_key_reference)


def find_secret_references(corpus: Corpus) -> List[SecretReference]:
    return corpus.filter_map_mappings(secret_reference)


def find_volume_secrets(corpus: Corpus) -> List[VolumeSecret]:
    return [vs for batch in corpus.filter_map_mappings(volume_secrets) for vs in batch]
