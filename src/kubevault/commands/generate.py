#!/usr/bin/env python3
"""
KUBEVAULT GENERATE
------------------
Renders `v1/Secret` manifests whose data is read from Vault.
Values are base64 encoded; annotations record where the data came from so
the generated secret can be traced back to its Vault path.

Author: KubeVault Team
Date: 2026-10-17
"""

import base64
from typing import Dict, Sequence

from jinja2 import Environment, StrictUndefined

from kubevault.core.models import SecretMapping

SECRET_TEMPLATE = """\
apiVersion: v1
kind: Secret
metadata:
  name: {{ secret_name }}
  namespace: {{ namespace }}
  annotations:
    kube-vault/vault-addr: "{{ vault_addr }}"
    kube-vault/vault-path: "{{ vault_engine }}:{{ vault_path | with_leading_slash }}"
type: Opaque
{%- if encoded_data %}
data:
{%- for key, value in encoded_data | dictsort %}
  {{ key }}: {{ value }}
{%- endfor %}
{%- else %}
data: {}
{%- endif %}
"""


def with_leading_slash(value) -> str:
    text = str(value)
    return text if text.startswith("/") else f"/{text}"


def _environment() -> Environment:
    env = Environment(undefined=StrictUndefined, keep_trailing_newline=True, autoescape=False)
    env.filters["with_leading_slash"] = with_leading_slash
    return env


_TEMPLATE = _environment().from_string(SECRET_TEMPLATE)


def encode_data(data: Dict[str, str]) -> Dict[str, str]:
    return {key: base64.b64encode(value.encode("utf-8")).decode("ascii") for key, value in data.items()}


def render_secret(vault_addr: str, secret_name: str, namespace: str,
                  vault_engine: str, vault_path: str, data: Dict[str, str]) -> str:
    return _TEMPLATE.render(
        vault_addr=vault_addr,
        secret_name=secret_name,
        namespace=namespace,
        vault_engine=vault_engine,
        vault_path=vault_path,
        encoded_data=encode_data(data),
    )


def create_secret_templates(mappings: Sequence[SecretMapping], namespace: str, client) -> str:
    """One Secret document per mapping, joined into a multi-document stream."""
    documents = []
    for mapping in mappings:
        data = client.fetch_all(mapping.vault_engine, mapping.path)
        documents.append(render_secret(
            client.vault_addr,
            mapping.kubernetes_name,
            namespace,
            mapping.vault_engine,
            mapping.path,
            data,
        ))
    return "---\n".join(documents)
