"""Boot-time selection of the election store."""

from __future__ import annotations

import logging

from ava.config import Settings
from ava.persistence.base import PersistenceAdapter
from ava.persistence.local import LocalAdapter
from ava.persistence.remote import SupabaseAdapter
from ava.services.notifier import ChangeNotifier
from ava.utils.supabase_client import create_service_client

logger = logging.getLogger(__name__)


def use_remote_store(config: Settings) -> bool:
    """Return True when settings select the Supabase store."""
    if config.persistence_backend == "remote":
        return True
    if config.persistence_backend == "local":
        return False
    return config.remote_configured


def build_adapter(config: Settings, notifier: ChangeNotifier) -> PersistenceAdapter:
    """Build the one store used for the rest of the process lifetime.

    The local store publishes to ``notifier`` itself; the remote store is
    observed through the change feed job instead.
    """
    adapter: PersistenceAdapter
    if use_remote_store(config):
        adapter = SupabaseAdapter(
            create_service_client(config),
            max_attempts=config.transaction_max_attempts,
            backoff_seconds=config.transaction_backoff_seconds,
        )
    else:
        adapter = LocalAdapter(
            notifier=notifier,
            path=config.local_store_path,
            max_attempts=config.transaction_max_attempts,
            lock_timeout_seconds=config.local_lock_timeout_seconds,
        )
    logger.info("Election store selected: %s", adapter.name)
    return adapter
