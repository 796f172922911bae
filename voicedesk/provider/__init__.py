"""HTTP transports for the speech provider and the local proxy."""

from .google_client import (
    DEFAULT_PROVIDER_BASE_URL,
    DEFAULT_PROXY_BASE_URL,
    GoogleTTSClient,
    ProxyClient,
)

__all__ = [
    "DEFAULT_PROVIDER_BASE_URL",
    "DEFAULT_PROXY_BASE_URL",
    "GoogleTTSClient",
    "ProxyClient",
]
