#!/usr/bin/env python3
"""
KUBEVAULT AUTH BACKEND
----------------------
Tracks the client token in use and whether it must be renewed.
Client tokens are used as-is; GitHub and AppRole logins yield tokens with a
lease that expires, after which the client logs in again.

Author: KubeVault Team
Date: 2026-10-17
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from kubevault.vault.config import AUTH_APPROLE, AUTH_GITHUB, AUTH_TOKEN, VaultConfig


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Credentials:
    client_token: str
    expires: Optional[datetime] = None

    @classmethod
    def from_auth_info(cls, auth: Dict[str, Any]) -> "Credentials":
        """Builds credentials from the `auth` block of a Vault login response."""
        lease = auth.get("lease_duration") or 0
        expires = _now() + timedelta(seconds=lease) if lease > 0 else None
        return cls(client_token=auth["client_token"], expires=expires)


class AuthBackend:
    def __init__(self, method: str, token: Optional[str] = None,
                 role_id: Optional[str] = None, secret_id: Optional[str] = None):
        self.method = method
        self.token = token
        self.role_id = role_id
        self.secret_id = secret_id
        self.credentials: Optional[Credentials] = None
        if method == AUTH_TOKEN:
            self.credentials = Credentials(client_token=token)

    @classmethod
    def from_config(cls, config: VaultConfig) -> "AuthBackend":
        if config.auth_method == AUTH_GITHUB:
            return cls(AUTH_GITHUB, token=config.github_token)
        if config.auth_method == AUTH_APPROLE:
            return cls(AUTH_APPROLE, role_id=config.role_id, secret_id=config.secret_id)
        return cls(AUTH_TOKEN, token=config.token)

    @property
    def can_login(self) -> bool:
        return self.method in (AUTH_GITHUB, AUTH_APPROLE)

    @property
    def can_expire(self) -> bool:
        return self.method != AUTH_TOKEN

    @property
    def client_token(self) -> Optional[str]:
        return self.credentials.client_token if self.credentials else None

    def set_credentials(self, credentials: Credentials):
        self.credentials = credentials

    def is_expired(self) -> bool:
        if self.credentials is None:
            return True
        if not self.can_expire:
            return False
        # Logins without a lease are treated as already expired
        expires = self.credentials.expires
        return expires is None or expires < _now()
