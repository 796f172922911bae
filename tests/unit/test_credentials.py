"""Unit tests for secure credential store helpers."""

from __future__ import annotations

from keyring.backends.fail import Keyring as FailKeyring

from voicedesk.credentials import KeyringCredentialStore
from voicedesk.models.datatypes import ExecutionMode


class FakeKeyringModule:
    """In-memory keyring stub for deterministic credential store tests."""

    def __init__(self, backend: object | None = None) -> None:
        """Initialize fake storage dictionary and reported backend."""

        self._storage: dict[tuple[str, str], str] = {}
        self._backend = backend if backend is not None else object()

    def get_keyring(self) -> object:
        """Return the configured backend object."""

        return self._backend

    def get_password(self, service_name: str, account_name: str) -> str | None:
        """Return previously stored password if present."""

        return self._storage.get((service_name, account_name))

    def set_password(self, service_name: str, account_name: str, value: str) -> None:
        """Store password value for the service/account key."""

        self._storage[(service_name, account_name)] = value

    def delete_password(self, service_name: str, account_name: str) -> None:
        """Delete password value for the service/account key."""

        self._storage.pop((service_name, account_name), None)


def test_keyring_store_roundtrip_set_get_clear(monkeypatch) -> None:  # type: ignore[no-untyped-def]
    """Keyring store should set/get/clear API key values via keyring backend."""

    fake_keyring = FakeKeyringModule()
    store = KeyringCredentialStore()
    monkeypatch.setattr(store, "_load_keyring_module", lambda: fake_keyring)

    assert store.is_available() is True
    assert store.get_api_key() is None

    store.set_api_key("  abc123  ")
    assert store.get_api_key() == "abc123"

    assert store.clear_api_key() is True
    assert store.get_api_key() is None
    assert store.clear_api_key() is False


def test_keyring_store_persists_execution_mode(monkeypatch) -> None:  # type: ignore[no-untyped-def]
    """Execution mode should be stored under its own account and parsed back."""

    fake_keyring = FakeKeyringModule()
    store = KeyringCredentialStore()
    monkeypatch.setattr(store, "_load_keyring_module", lambda: fake_keyring)

    assert store.get_execution_mode() is None
    store.set_execution_mode(ExecutionMode.BACKEND_PROXY)

    assert store.get_execution_mode() is ExecutionMode.BACKEND_PROXY
    assert fake_keyring.get_password("voicedesk", "execution_mode") == "proxy"

    fake_keyring.set_password("voicedesk", "execution_mode", "garbage")
    assert store.get_execution_mode() is None


def test_keyring_store_degrades_with_fail_backend(monkeypatch) -> None:  # type: ignore[no-untyped-def]
    """Keyring store should report unavailability when only the fail backend exists."""

    fake_keyring = FakeKeyringModule(backend=FailKeyring())
    store = KeyringCredentialStore()
    monkeypatch.setattr(store, "_load_keyring_module", lambda: fake_keyring)

    assert store.is_available() is False
    assert store.get_api_key() is None
    assert store.clear_api_key() is False
    try:
        store.set_api_key("abc")
    except RuntimeError as exc:
        assert "keyring backend" in str(exc)
    else:
        raise AssertionError("Expected RuntimeError for unavailable keyring backend.")
