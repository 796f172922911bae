"""Secure credential storage helpers for the Voicedesk CLI.

Responsibilities:
- Persist the client-held Google API key in an OS-backed secure store.
- Persist the preferred execution mode next to it.
- Avoid logging or exposing secret values in diagnostics.

Key types:
- `CredentialStore`: interface for credential and mode persistence.
- `KeyringCredentialStore`: keyring-backed implementation.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import ModuleType

import keyring
from keyring.backends.fail import Keyring as FailKeyring

from .models.datatypes import ExecutionMode
from .parsing import normalize_optional_string


_DEFAULT_SERVICE_NAME = "voicedesk"
_DEFAULT_ACCOUNT_NAME = "google_api_key"
_MODE_ACCOUNT_NAME = "execution_mode"


class CredentialStore:
    """Interface for secure credential operations."""

    def is_available(self) -> bool:
        """Return whether secure credential operations are available."""

        raise NotImplementedError

    def get_api_key(self) -> str | None:
        """Load the stored API key, when available."""

        raise NotImplementedError

    def set_api_key(self, api_key: str) -> None:
        """Persist an API key."""

        raise NotImplementedError

    def clear_api_key(self) -> bool:
        """Delete a stored API key and return whether one existed."""

        raise NotImplementedError

    def get_execution_mode(self) -> ExecutionMode | None:
        """Load the persisted execution mode, when set."""

        raise NotImplementedError

    def set_execution_mode(self, mode: ExecutionMode) -> None:
        """Persist the execution mode."""

        raise NotImplementedError


@dataclass(slots=True)
class KeyringCredentialStore(CredentialStore):
    """Secure credential store backed by the `keyring` package."""

    service_name: str = _DEFAULT_SERVICE_NAME
    account_name: str = _DEFAULT_ACCOUNT_NAME
    mode_account_name: str = _MODE_ACCOUNT_NAME

    def _load_keyring_module(self) -> ModuleType:
        """Return the `keyring` module used for storage calls."""

        return keyring

    def is_available(self) -> bool:
        """Return `True` unless keyring resolved to its fail-only backend."""

        backend = self._load_keyring_module().get_keyring()
        return not isinstance(backend, FailKeyring)

    def _get(self, account_name: str) -> str | None:
        if not self.is_available():
            return None
        value = self._load_keyring_module().get_password(self.service_name, account_name)
        return normalize_optional_string(value)

    def _set(self, account_name: str, value: str) -> None:
        if not self.is_available():
            raise RuntimeError(
                "Secure credential storage is unavailable because no keyring backend "
                "is configured. Install a keyring backend to persist settings securely."
            )
        self._load_keyring_module().set_password(self.service_name, account_name, value)

    def get_api_key(self) -> str | None:
        """Get a normalized API key from keyring, returning `None` when missing."""

        return self._get(self.account_name)

    def set_api_key(self, api_key: str) -> None:
        """Persist a normalized API key in keyring or raise when unavailable."""

        normalized = normalize_optional_string(api_key)
        if normalized is None:
            raise ValueError("API key must be a non-empty string.")
        self._set(self.account_name, normalized)

    def clear_api_key(self) -> bool:
        """Remove the stored API key from keyring and report if one was present."""

        if self.get_api_key() is None:
            return False
        self._load_keyring_module().delete_password(self.service_name, self.account_name)
        return True

    def get_execution_mode(self) -> ExecutionMode | None:
        """Return the persisted mode; unreadable values count as unset."""

        value = self._get(self.mode_account_name)
        if value is None:
            return None
        try:
            return ExecutionMode.parse(value)
        except ValueError:
            return None

    def set_execution_mode(self, mode: ExecutionMode) -> None:
        """Persist the execution mode token."""

        self._set(self.mode_account_name, ExecutionMode.parse(mode).value)


def create_credential_store() -> CredentialStore:
    """Create the default secure credential store implementation."""

    return KeyringCredentialStore()
