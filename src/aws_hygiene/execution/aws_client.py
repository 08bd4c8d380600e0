"""AWS client factory."""

from __future__ import annotations

import threading
from collections.abc import Callable

import boto3
from botocore.config import Config

from aws_hygiene.config import Settings, load_settings

ClientCacheKey = tuple[str, ...]

_CLIENT_CACHE: dict[ClientCacheKey, object] = {}
_CLIENT_CACHE_LOCK = threading.Lock()


def _get_cached_client(
    key: ClientCacheKey,
    build_client: Callable[[], object],
) -> object:
    with _CLIENT_CACHE_LOCK:
        client = _CLIENT_CACHE.get(key)
        if client is None:
            client = build_client()
            _CLIENT_CACHE[key] = client
        return client


def _client_cache_key(service: str, settings: Settings) -> ClientCacheKey:
    return (
        service,
        settings.aws.default_region or "",
        settings.aws.default_profile or "",
    )


def get_client(service: str):
    """Return a cached client for ``service`` in the configured region and profile."""
    settings = load_settings()
    return _get_cached_client(
        _client_cache_key(service, settings),
        lambda: _create_client(service, settings),
    )


def _create_client(service: str, settings: Settings):
    session = boto3.Session(
        profile_name=settings.aws.default_profile,
        region_name=settings.aws.default_region,
    )
    return session.client(service, config=_get_service_config(settings))


def _get_service_config(settings: Settings) -> Config:
    return Config(
        read_timeout=settings.execution.sdk_timeout_seconds,
        connect_timeout=settings.execution.sdk_timeout_seconds,
        retries={"max_attempts": settings.execution.max_retries + 1, "mode": "standard"},
    )
