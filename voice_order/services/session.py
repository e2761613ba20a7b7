"""
Dialogue Session Store for Voice Order
======================================

This module keeps the per-conversation DialogueContext between voice turns.
Contexts belong to the client's conversation and are not persisted: once a
session expires or is evicted, the next utterance simply starts a new
conversation.

Cache Eviction Strategy:
------------------------
1. **TTL-based**: Sessions not accessed within SESSION_TTL_SECONDS are dropped.
   Checked probabilistically (~1% of writes) to avoid overhead.

2. **LRU-based**: When the cache reaches SESSION_MAX_CACHE_SIZE, the oldest 10%
   of sessions (by last access time) are evicted to make room.

Thread Safety:
--------------
All cache operations are protected by a threading.Lock, since FastAPI runs
sync endpoints in a thread pool.

Session keys combine the user id with the client's session id, so one user
can never read another user's context.

Usage:
------
    from voice_order.services.session import get_context, save_context

    context = get_context(user_id, session_id)
    context = merge(context, command)
    save_context(user_id, session_id, context)
"""

import logging
import random
import threading
import time
from typing import Any, Dict

from .. import config
from ..schemas.commands import DialogueContext


logger = logging.getLogger(__name__)


# =============================================================================
# Session Cache
# =============================================================================
# {key: {"context": DialogueContext, "last_access": timestamp}}

SESSION_CACHE: Dict[str, Dict[str, Any]] = {}
_cache_lock = threading.Lock()


def _key(user_id: str, session_id: str) -> str:
    return f"{user_id}:{session_id}"


# =============================================================================
# Cache Maintenance Functions
# =============================================================================

def _cleanup_expired_sessions() -> int:
    """Remove sessions not accessed within SESSION_TTL_SECONDS."""
    now = time.time()
    with _cache_lock:
        expired = [
            key for key, entry in SESSION_CACHE.items()
            if now - entry.get("last_access", 0) > config.SESSION_TTL_SECONDS
        ]
        for key in expired:
            del SESSION_CACHE[key]

    if expired:
        logger.debug("Cleaned up %d expired dialogue sessions", len(expired))
    return len(expired)


def _evict_oldest_sessions(count: int) -> None:
    """Evict the least recently used sessions. Caller must hold the lock."""
    oldest = sorted(SESSION_CACHE.items(), key=lambda x: x[1].get("last_access", 0))
    for key, _ in oldest[:count]:
        del SESSION_CACHE[key]
    logger.debug("Evicted %d oldest dialogue sessions", min(count, len(oldest)))


# =============================================================================
# Public Session Functions
# =============================================================================

def get_context(user_id: str, session_id: str) -> DialogueContext:
    """
    Return the session's context, or an empty one.

    Expired entries are treated as missing.
    """
    key = _key(user_id, session_id)
    now = time.time()
    with _cache_lock:
        entry = SESSION_CACHE.get(key)
        if entry is None:
            return DialogueContext()
        if now - entry["last_access"] > config.SESSION_TTL_SECONDS:
            del SESSION_CACHE[key]
            return DialogueContext()
        entry["last_access"] = now
        return entry["context"]


def save_context(user_id: str, session_id: str, context: DialogueContext) -> None:
    key = _key(user_id, session_id)
    with _cache_lock:
        if key not in SESSION_CACHE and len(SESSION_CACHE) >= config.SESSION_MAX_CACHE_SIZE:
            _evict_oldest_sessions(max(1, config.SESSION_MAX_CACHE_SIZE // 10))
        SESSION_CACHE[key] = {"context": context, "last_access": time.time()}

    if random.random() < 0.01:
        _cleanup_expired_sessions()


def clear_context(user_id: str, session_id: str) -> None:
    with _cache_lock:
        SESSION_CACHE.pop(_key(user_id, session_id), None)


def clear_cache() -> int:
    """Remove all sessions. Returns the number removed."""
    with _cache_lock:
        count = len(SESSION_CACHE)
        SESSION_CACHE.clear()
    return count
