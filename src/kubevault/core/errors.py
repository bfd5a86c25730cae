#!/usr/bin/env python3
"""
KUBEVAULT ERRORS
----------------
Exception hierarchy shared by the corpus, the Vault client and the commands.
Extractors never raise: an unrecognized manifest shape is a non-match, not
an error. Everything listed here is fatal for the current invocation.

Author: KubeVault Team
Date: 2026-10-17
"""

from typing import List, Optional


class KubeVaultError(Exception):
    """Base class for every error surfaced by KubeVault."""


class ManifestParseError(KubeVaultError):
    """
    A manifest segment could not be parsed as a YAML document.

    `segment` is the 1-based position of the offending segment among all
    `---`-delimited segments of the input, blank ones included.
    """

    def __init__(self, segment: int, problem: str):
        self.segment = segment
        self.problem = problem
        super().__init__(f"Invalid YAML in document segment {segment}: {problem}")


class MappingFormatError(KubeVaultError, ValueError):
    """A `name=engine:/path` secret mapping is malformed."""


class VaultConfigError(KubeVaultError):
    """The Vault address or authentication settings are missing or invalid."""


class VaultClientError(KubeVaultError):
    """Base class for errors talking to Vault."""


class VaultNotFoundError(VaultClientError):
    def __init__(self, location: str):
        self.location = location
        super().__init__(f"Not Found: {location}")


class VaultNotAuthorizedError(VaultClientError):
    def __init__(self, reason: str):
        super().__init__(f"Not Authorized: {reason}")


class VaultInvalidPayloadError(VaultClientError):
    def __init__(self, reason: str):
        super().__init__(f"Invalid Payload: {reason}")


class VaultUnknownError(VaultClientError):
    def __init__(self, reason: str):
        super().__init__(f"Unknown Client error: {reason}")


class VerificationError(KubeVaultError):
    """Raised when secrets required by the manifests are missing in Vault."""

    def __init__(self, errors: List[str], message: Optional[str] = None):
        self.errors = list(errors)
        super().__init__(message or "Missing secrets in vault")
