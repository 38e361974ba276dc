"""Rendered HTML fragment cache with tag based invalidation.

Fragments are stored through Flask-Caching. Every tag keeps the list of keys
that were stored with it so all fragments showing e.g. one product can be
dropped when that product changes.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable

from flask import current_app

from storefront.app.extensions import cache

logger = logging.getLogger(__name__)

TAG_PREFIX = "tag:"


class FragmentCache:
    def __init__(self, backend=cache):
        self.backend = backend

    @property
    def enabled(self) -> bool:
        return bool(current_app.config.get("HTML_CACHE_ENABLE", True))

    def get(self, key: str) -> str | None:
        if not self.enabled:
            return None
        return self.backend.get(key)

    def set(self, key: str, value: str, tags: Iterable[str] = (), expire: datetime | None = None) -> bool:
        if not self.enabled:
            return False

        if expire is not None:
            timeout = int((expire - datetime.utcnow()).total_seconds())
            if timeout <= 0:
                logger.debug("Not caching %s, already expired at %s", key, expire)
                return False
        else:
            timeout = current_app.config.get("HTML_CACHE_DEFAULT_TIMEOUT", 0)

        if not self.backend.set(key, value, timeout=timeout):
            logger.warning("Storing fragment %s in cache failed", key)
            return False

        for tag in set(tags):
            tag_key = TAG_PREFIX + tag
            # expired or evicted fragments leave the index here
            keys = [k for k in self.backend.get(tag_key) or [] if k != key and self.backend.has(k)]
            keys.append(key)
            # 0: the index must outlive every fragment it points to
            self.backend.set(tag_key, keys, timeout=0)
        return True

    def invalidate(self, tags: Iterable[str]) -> int:
        """Drop all fragments stored with any of `tags`; returns the number of keys."""
        removed = 0
        for tag in set(tags):
            tag_key = TAG_PREFIX + tag
            keys = self.backend.get(tag_key) or []
            if keys:
                self.backend.delete_many(*keys)
                removed += len(keys)
            self.backend.delete(tag_key)
        if removed:
            logger.info("Invalidated %d cached fragments for tags %s", removed, sorted(set(tags)))
        return removed

    def clear(self) -> None:
        self.backend.clear()


fragments = FragmentCache()
