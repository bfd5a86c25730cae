#!/usr/bin/env python3
"""
KUBEVAULT VAULT CLIENT
----------------------
A thin wrapper around `hvac` for the two KV v2 operations the commands
need: reading every key/value pair at a path and listing the children of a
folder. The wrapper owns the auth backend and logs in again whenever its
credentials have expired.

Author: KubeVault Team
Date: 2026-10-17
"""

import logging
from contextlib import contextmanager
from typing import Dict, List, Optional

import hvac
import requests
from hvac import exceptions as hvac_exceptions

from kubevault.core.errors import (
    VaultClientError,
    VaultInvalidPayloadError,
    VaultNotAuthorizedError,
    VaultNotFoundError,
    VaultUnknownError,
)
from kubevault.vault.auth import AuthBackend, Credentials
from kubevault.vault.config import AUTH_APPROLE, AUTH_GITHUB, VaultConfig

logger = logging.getLogger("kubevault.vault")


def strip_leading_slash(path: str) -> str:
    return path.lstrip("/")


class VaultClient:
    """
    Vault KV v2 client.

    Example:
        client = VaultClient(VaultConfig.from_env())
        data = client.fetch_all("secret", "/apps/my-app")
    """

    def __init__(self, config: VaultConfig, backend: Optional[AuthBackend] = None,
                 http_client: Optional[hvac.Client] = None):
        self.config = config
        self.backend = backend or AuthBackend.from_config(config)
        self._client = http_client or hvac.Client(
            url=config.vault_addr,
            verify=config.verify,
            timeout=config.timeout,
        )

    @classmethod
    def from_env(cls) -> "VaultClient":
        return cls(VaultConfig.from_env())

    @property
    def vault_addr(self) -> str:
        return self.config.vault_addr

    def _login(self) -> Credentials:
        if self.backend.method == AUTH_GITHUB:
            response = self._client.auth.github.login(token=self.backend.token, use_token=False)
        elif self.backend.method == AUTH_APPROLE:
            response = self._client.auth.approle.login(
                role_id=self.backend.role_id,
                secret_id=self.backend.secret_id,
                use_token=False,
            )
        else:
            raise VaultInvalidPayloadError("Can't log in with a client token")

        auth = (response or {}).get("auth") or {}
        if not auth.get("client_token"):
            raise VaultInvalidPayloadError(f"{self.backend.method} login did not return a client token")
        return Credentials.from_auth_info(auth)

    def refresh_credentials(self):
        """Logs in again when the current credentials are missing or expired."""
        if not self.backend.is_expired():
            return
        self.backend.set_credentials(self._login())
        logger.info(f"Authenticated to Vault at {self.vault_addr} via {self.backend.method}")

    def _prepare(self):
        with _translate_errors("login"):
            self.refresh_credentials()
        self._client.token = self.backend.client_token

    def fetch_all(self, engine: str, path: str) -> Dict[str, str]:
        """Returns every key/value pair stored at `path` in the KV v2 mount `engine`."""
        self._prepare()
        secret_path = strip_leading_slash(path)
        logger.debug(f"Reading {engine}:{secret_path}")
        with _translate_errors(f"{engine}/data/{secret_path}"):
            response = self._client.secrets.kv.v2.read_secret_version(
                path=secret_path,
                mount_point=engine,
                raise_on_deleted_version=True,
            )
        data = ((response or {}).get("data") or {}).get("data")
        if not isinstance(data, dict):
            raise VaultInvalidPayloadError(f"No data returned for {engine}:{path}")
        for key, value in data.items():
            if not isinstance(value, str):
                raise VaultInvalidPayloadError(
                    f"Value of '{key}' at {engine}:{path} is {type(value).__name__}, expected a string"
                )
        return dict(data)

    def list_children(self, engine: str, path: str) -> List[str]:
        """Lists the key names directly below `path`; folders end with `/`."""
        self._prepare()
        secret_path = strip_leading_slash(path)
        logger.debug(f"Listing {engine}:{secret_path}")
        with _translate_errors(f"{engine}/metadata/{secret_path}"):
            response = self._client.secrets.kv.v2.list_secrets(path=secret_path, mount_point=engine)
        keys = ((response or {}).get("data") or {}).get("keys")
        if not isinstance(keys, list):
            raise VaultInvalidPayloadError(f"No keys returned for {engine}:{path}")
        return [str(k) for k in keys]


@contextmanager
def _translate_errors(location: str):
    """Maps hvac and transport exceptions onto the VaultClientError hierarchy."""
    try:
        yield
    except VaultClientError:
        raise
    except hvac_exceptions.InvalidPath as e:
        raise VaultNotFoundError(location) from e
    except (hvac_exceptions.Unauthorized, hvac_exceptions.Forbidden) as e:
        raise VaultNotAuthorizedError(str(e) or location) from e
    except (hvac_exceptions.VaultError, requests.exceptions.RequestException) as e:
        raise VaultUnknownError(str(e) or e.__class__.__name__) from e
