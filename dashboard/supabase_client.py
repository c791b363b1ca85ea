"""Supabase client factory for the auth and history layers.

Reads connection info from the dashboard config:
    SUPABASE_URL  – project URL (e.g. https://xxx.supabase.co)
    SUPABASE_KEY  – anon/public key; row-level security scopes rows per user

A Supabase client carries the signed-in user's session, so the dashboard
creates one per browser session instead of sharing a process-wide instance.
"""

from __future__ import annotations

import logging

from supabase import Client, create_client

from dashboard.config import config

logger = logging.getLogger(__name__)


def is_configured() -> bool:
    """Check if Supabase credentials are present."""
    return bool(config.SUPABASE_URL and config.SUPABASE_KEY)


def new_client() -> Client | None:
    """Create a session-scoped Supabase client. Returns None if config is missing."""
    if not is_configured():
        logger.warning(
            "Supabase not configured (SUPABASE_URL / SUPABASE_KEY missing). "
            "Sign-in and history are unavailable."
        )
        return None

    client = create_client(config.SUPABASE_URL, config.SUPABASE_KEY)
    logger.info("Supabase client created for %s", config.SUPABASE_URL)
    return client
