"""Configuration model and loaders for Voicedesk.

Responsibilities:
- Define client and proxy configuration as typed dataclasses.
- Provide deterministic precedence resolution for the API key and execution mode.
- Provide loader entry points for file- and environment-based configuration.

Key types:
- `VoiceDeskConfig`: normalized settings for client sessions and the proxy.
- `ClientRuntimeConfig`: resolved execution mode and API key for one command.
- `RuntimeConfigSources`: optional value sources for precedence resolution.
- `ProxyServerSettings`: settings consumed by the local proxy app.
- `ConfigLoader`: static construction helpers for `VoiceDeskConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .models.datatypes import (
    DEFAULT_PITCH,
    DEFAULT_SPEED,
    MAX_PITCH,
    MAX_SPEED,
    MIN_PITCH,
    MIN_SPEED,
    ExecutionMode,
)
from .parsing import (
    normalize_optional_string,
    parse_bounded_float,
    parse_permissive_boolean,
    parse_positive_int,
)
from .provider.google_client import DEFAULT_PROVIDER_BASE_URL, DEFAULT_PROXY_BASE_URL


API_KEY_ENV = "GOOGLE_API_KEY"
EXECUTION_MODE_ENV = "VOICEDESK_EXECUTION_MODE"


@dataclass(frozen=True, slots=True)
class RuntimeConfigSources:
    """Source mappings used for deterministic runtime value precedence.

    Attributes:
        cli: Values explicitly provided by CLI arguments.
        secure: Values loaded from secure local credential storage.
        env: Values loaded from environment variables.
    """

    cli: Mapping[str, str] = field(default_factory=dict)
    secure: Mapping[str, str] = field(default_factory=dict)
    env: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ClientRuntimeConfig:
    """Resolved execution mode and credential for one command.

    Attributes:
        execution_mode: DirectClient or BackendProxy.
        api_key: Client-held key; never persisted in outputs.
    """

    execution_mode: ExecutionMode
    api_key: str | None = None


@dataclass(slots=True)
class VoiceDeskConfig:
    """Settings shared by client sessions and the local proxy.

    Attributes:
        provider_base_url: Google Text-to-Speech REST base URL.
        proxy_base_url: Local proxy base URL used in BackendProxy mode.
        execution_mode: Default execution mode.
        language_code: Default language selection.
        voice_name: Optional preferred voice.
        speed: Default speaking rate.
        pitch: Default pitch.
        timeout_seconds: Transport timeout for each HTTP call.
        output_dir: Directory for downloaded MP3 files.
        proxy_host: Bind host for `voicedesk serve`.
        proxy_port: Bind port for `voicedesk serve`.
        validate_proxy_requests: Whether the proxy rejects out-of-range input.
        api_key: Optional API key (client key, or server key for the proxy).
    """

    provider_base_url: str = DEFAULT_PROVIDER_BASE_URL
    proxy_base_url: str = DEFAULT_PROXY_BASE_URL
    execution_mode: ExecutionMode = ExecutionMode.DIRECT_CLIENT
    language_code: str = "en-US"
    voice_name: str | None = None
    speed: float = DEFAULT_SPEED
    pitch: float = DEFAULT_PITCH
    timeout_seconds: float = 60.0
    output_dir: Path = Path("out")
    proxy_host: str = "127.0.0.1"
    proxy_port: int = 3000
    validate_proxy_requests: bool = True
    api_key: str | None = None

    def validate(self) -> None:
        """Validate configuration values before use."""

        self._require_non_empty(self.provider_base_url, "provider_base_url")
        self._require_non_empty(self.proxy_base_url, "proxy_base_url")
        self._require_non_empty(self.language_code, "language_code")
        parse_bounded_float(self.speed, "speed", MIN_SPEED, MAX_SPEED)
        parse_bounded_float(self.pitch, "pitch", MIN_PITCH, MAX_PITCH)
        if self.timeout_seconds <= 0:
            raise ValueError("`timeout_seconds` must be positive.")
        if not 0 < self.proxy_port < 65536:
            raise ValueError("`proxy_port` must be between 1 and 65535.")

    def resolved_client_runtime(
        self, sources: RuntimeConfigSources | None = None
    ) -> ClientRuntimeConfig:
        """Resolve mode and key with precedence `cli` > `secure` > `env` > field default."""

        resolved_sources = sources if sources is not None else RuntimeConfigSources()
        mode_value = self._resolve_optional_runtime_value(
            key="execution_mode",
            env_key=EXECUTION_MODE_ENV,
            default_value=self.execution_mode.value,
            sources=resolved_sources,
        )
        api_key = self._resolve_optional_runtime_value(
            key="api_key",
            env_key=API_KEY_ENV,
            default_value=self.api_key,
            sources=resolved_sources,
        )
        return ClientRuntimeConfig(
            execution_mode=ExecutionMode.parse(mode_value or ExecutionMode.DIRECT_CLIENT),
            api_key=api_key,
        )

    def _resolve_optional_runtime_value(
        self,
        key: str,
        env_key: str,
        default_value: str | None,
        sources: RuntimeConfigSources,
    ) -> str | None:
        """Resolve an optional runtime value from sources in deterministic order."""

        cli_value = self._normalized_lookup(sources.cli, key)
        if cli_value is not None:
            return cli_value

        secure_value = self._normalized_lookup(sources.secure, key)
        if secure_value is not None:
            return secure_value

        env_value = self._normalized_lookup(sources.env, env_key)
        if env_value is not None:
            return env_value

        return normalize_optional_string(default_value)

    @staticmethod
    def _normalized_lookup(mapping: Mapping[str, str], key: str) -> str | None:
        """Return a stripped mapping value for a key or `None` when missing/blank."""

        if key not in mapping:
            return None
        return normalize_optional_string(mapping.get(key))

    @staticmethod
    def _require_non_empty(value: str, field_name: str) -> None:
        """Validate that string fields are not empty."""

        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"`{field_name}` must be a non-empty string.")


@dataclass(frozen=True, slots=True)
class ProxyServerSettings:
    """Settings for the local proxy app.

    Attributes:
        api_key: Server-held provider key; `None` makes endpoints answer 500.
        provider_base_url: Provider REST base URL.
        timeout_seconds: Upstream transport timeout.
        validate_requests: Reject over-long text and out-of-range speed/pitch.
    """

    api_key: str | None = None
    provider_base_url: str = DEFAULT_PROVIDER_BASE_URL
    timeout_seconds: float = 60.0
    validate_requests: bool = True

    @classmethod
    def from_config(
        cls,
        config: VoiceDeskConfig,
        env: Mapping[str, str] | None = None,
    ) -> ProxyServerSettings:
        """Build proxy settings, reading the server key from `GOOGLE_API_KEY` first."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        api_key = normalize_optional_string(env_map.get(API_KEY_ENV)) or config.api_key
        return cls(
            api_key=api_key,
            provider_base_url=config.provider_base_url,
            timeout_seconds=config.timeout_seconds,
            validate_requests=config.validate_proxy_requests,
        )


class ConfigLoader:
    """Factory methods for creating `VoiceDeskConfig` from external sources."""

    _SUPPORTED_YAML_KEYS = frozenset(
        {
            "provider_base_url",
            "proxy_base_url",
            "execution_mode",
            "language_code",
            "voice_name",
            "speed",
            "pitch",
            "timeout_seconds",
            "output_dir",
            "proxy_host",
            "proxy_port",
            "validate_proxy_requests",
            "api_key",
        }
    )

    @staticmethod
    def from_yaml(path: Path) -> VoiceDeskConfig:
        """Create a validated config from a YAML file."""

        path_text = path.read_text(encoding="utf-8")
        payload = yaml.safe_load(path_text)
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")
        return ConfigLoader.from_mapping(payload, source_label=f"YAML `{path}`")

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> VoiceDeskConfig:
        """Create a validated config from `VOICEDESK_*`, `GOOGLE_API_KEY`, and `PORT`."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        payload: dict[str, Any] = {}
        for key in ConfigLoader._SUPPORTED_YAML_KEYS:
            value = normalize_optional_string(env_map.get(f"VOICEDESK_{key.upper()}"))
            if value is not None:
                payload[key] = value
        port = normalize_optional_string(env_map.get("PORT"))
        if port is not None and "proxy_port" not in payload:
            payload["proxy_port"] = port
        api_key = normalize_optional_string(env_map.get(API_KEY_ENV))
        if api_key is not None:
            payload["api_key"] = api_key
        return ConfigLoader.from_mapping(payload, source_label="Environment")

    @staticmethod
    def from_mapping(payload: Mapping[str, Any], source_label: str) -> VoiceDeskConfig:
        """Build a validated config from a normalized mapping payload."""

        unknown = sorted(set(payload).difference(ConfigLoader._SUPPORTED_YAML_KEYS))
        if unknown:
            key_list = ", ".join(unknown)
            raise ValueError(f"{source_label} includes unsupported key(s): {key_list}.")

        defaults = VoiceDeskConfig()
        try:
            config = VoiceDeskConfig(
                provider_base_url=ConfigLoader._string(
                    payload, "provider_base_url", defaults.provider_base_url
                ),
                proxy_base_url=ConfigLoader._string(
                    payload, "proxy_base_url", defaults.proxy_base_url
                ),
                execution_mode=ExecutionMode.parse(
                    ConfigLoader._string(payload, "execution_mode", defaults.execution_mode.value)
                ),
                language_code=ConfigLoader._string(
                    payload, "language_code", defaults.language_code
                ),
                voice_name=normalize_optional_string(payload.get("voice_name")),
                speed=ConfigLoader._float(payload, "speed", defaults.speed, MIN_SPEED, MAX_SPEED),
                pitch=ConfigLoader._float(payload, "pitch", defaults.pitch, MIN_PITCH, MAX_PITCH),
                timeout_seconds=ConfigLoader._float(
                    payload, "timeout_seconds", defaults.timeout_seconds, 0.001, 3600.0
                ),
                output_dir=Path(ConfigLoader._string(payload, "output_dir", str(defaults.output_dir))),
                proxy_host=ConfigLoader._string(payload, "proxy_host", defaults.proxy_host),
                proxy_port=(
                    parse_positive_int(payload["proxy_port"], "proxy_port")
                    if normalize_optional_string(payload.get("proxy_port")) is not None
                    else defaults.proxy_port
                ),
                validate_proxy_requests=ConfigLoader._boolean(
                    payload, "validate_proxy_requests", defaults.validate_proxy_requests
                ),
                api_key=normalize_optional_string(payload.get("api_key")),
            )
            config.validate()
        except ValueError as exc:
            raise ValueError(f"{source_label}: {exc}") from exc
        return config

    @staticmethod
    def _string(payload: Mapping[str, Any], key: str, default: str) -> str:
        """Read an optional string field, falling back to `default` when blank."""

        value = normalize_optional_string(payload.get(key))
        return value if value is not None else default

    @staticmethod
    def _float(
        payload: Mapping[str, Any],
        key: str,
        default: float,
        minimum: float,
        maximum: float,
    ) -> float:
        """Read an optional bounded float field."""

        if normalize_optional_string(payload.get(key)) is None:
            return default
        return parse_bounded_float(payload[key], key, minimum, maximum)

    @staticmethod
    def _boolean(payload: Mapping[str, Any], key: str, default: bool) -> bool:
        """Read an optional boolean field."""

        if key not in payload:
            return default
        parsed = parse_permissive_boolean(payload[key])
        if parsed is None:
            raise ValueError(
                f"field `{key}` must be a boolean value "
                "(`true`/`false`, `1`/`0`, `yes`/`no`)."
            )
        return parsed
