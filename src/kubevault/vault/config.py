#!/usr/bin/env python3
"""
KUBEVAULT VAULT CONFIG
----------------------
Connection and authentication settings for the Vault client, passed to it
explicitly. Only the CLI reads them from the process environment.

Environment variables:
    VAULT_ADDR            Required. Base URL of the Vault server.
    VAULT_TOKEN           Client token (never refreshed).
    VAULT_GITHUB_TOKEN    GitHub token, exchanged for a client token.
    VAULT_ROLE_TOKEN      AppRole role_id  } both required for AppRole
    VAULT_SECRET_TOKEN    AppRole secret_id}
    VAULT_CACERT          CA bundle used to verify the server certificate.
    VAULT_SKIP_VERIFY     Disable TLS verification when truthy.
    VAULT_CLIENT_TIMEOUT  Request timeout in seconds (default 30).

The first auth method found, in the order above, wins.

Author: KubeVault Team
Date: 2026-10-17
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional, Union
from urllib.parse import urlparse

from kubevault.core.errors import VaultConfigError

AUTH_TOKEN = "token"
AUTH_GITHUB = "github"
AUTH_APPROLE = "approle"

DEFAULT_TIMEOUT = 30

_TRUTHY = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class VaultConfig:
    vault_addr: str
    auth_method: str
    token: Optional[str] = None
    github_token: Optional[str] = None
    role_id: Optional[str] = None
    secret_id: Optional[str] = None
    verify: Union[bool, str] = True
    timeout: int = DEFAULT_TIMEOUT

    def __post_init__(self):
        parsed = urlparse(self.vault_addr)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise VaultConfigError(f"Invalid Url: VAULT_ADDR '{self.vault_addr}' is not an http(s) URL")
        if self.auth_method == AUTH_TOKEN and not self.token:
            raise VaultConfigError("Token authentication requires a token")
        if self.auth_method == AUTH_GITHUB and not self.github_token:
            raise VaultConfigError("GitHub authentication requires a GitHub token")
        if self.auth_method == AUTH_APPROLE and not (self.role_id and self.secret_id):
            raise VaultConfigError("AppRole authentication requires role_id and secret_id")
        if self.auth_method not in (AUTH_TOKEN, AUTH_GITHUB, AUTH_APPROLE):
            raise VaultConfigError(f"Unsupported authentication method: {self.auth_method}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "VaultConfig":
        env = os.environ if environ is None else environ

        vault_addr = env.get("VAULT_ADDR")
        if not vault_addr:
            raise VaultConfigError("VAULT_ADDR is not set")

        verify: Union[bool, str] = True
        if env.get("VAULT_SKIP_VERIFY", "").lower() in _TRUTHY:
            verify = False
        elif env.get("VAULT_CACERT"):
            verify = env["VAULT_CACERT"]

        try:
            timeout = int(env.get("VAULT_CLIENT_TIMEOUT", DEFAULT_TIMEOUT))
        except ValueError:
            raise VaultConfigError(
                f"VAULT_CLIENT_TIMEOUT must be an integer, got '{env.get('VAULT_CLIENT_TIMEOUT')}'"
            )

        # A variable that is set picks its method even when empty; the
        # constructor then rejects the blank credential.
        common = dict(vault_addr=vault_addr, verify=verify, timeout=timeout)
        if "VAULT_TOKEN" in env:
            return cls(auth_method=AUTH_TOKEN, token=env["VAULT_TOKEN"], **common)
        if "VAULT_GITHUB_TOKEN" in env:
            return cls(auth_method=AUTH_GITHUB, github_token=env["VAULT_GITHUB_TOKEN"], **common)
        if "VAULT_ROLE_TOKEN" in env and "VAULT_SECRET_TOKEN" in env:
            return cls(
                auth_method=AUTH_APPROLE,
                role_id=env["VAULT_ROLE_TOKEN"],
                secret_id=env["VAULT_SECRET_TOKEN"],
                **common,
            )
        raise VaultConfigError("Could not find a token of a known type in environment")
