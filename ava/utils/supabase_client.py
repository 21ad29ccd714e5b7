"""Supabase service-role client used by the remote store."""

import httpx
from supabase.lib.client_options import SyncClientOptions

from ava.config import Settings
from ava.utils.errors import PersistenceUnavailableError
from supabase import Client, create_client


def _build_sync_options(config: Settings) -> SyncClientOptions:
    max_connections = max(10, config.supabase_http_max_connections)
    max_keepalive_connections = max(
        5,
        min(max_connections, config.supabase_http_max_keepalive_connections),
    )
    timeout_seconds = max(1, config.supabase_postgrest_timeout_seconds)

    httpx_client = httpx.Client(
        timeout=httpx.Timeout(timeout_seconds),
        limits=httpx.Limits(
            max_connections=max_connections,
            max_keepalive_connections=max_keepalive_connections,
        ),
    )

    return SyncClientOptions(
        auto_refresh_token=False,
        persist_session=False,
        postgrest_client_timeout=timeout_seconds,
        storage_client_timeout=timeout_seconds,
        function_client_timeout=min(timeout_seconds, 30),
        httpx_client=httpx_client,
    )


def create_service_client(config: Settings) -> Client:
    """Build a service-role Supabase client from explicit settings."""
    if not config.remote_configured:
        raise PersistenceUnavailableError("Supabase URL and service key are not configured")
    return create_client(
        config.supabase_url,
        config.supabase_service_key,
        options=_build_sync_options(config),
    )
