"""
SENTIMENT PULSE — TTL Series Cache
One JSON envelope per key on disk, fronted by an in-process TLRU cache.
Validity depends on the key's category; expired entries are ignored, never purged.
"""
import json
import os
import re
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Tuple

from cachetools import TLRUCache

from sentiment_pulse.config.settings import CacheSettings, get_settings
from sentiment_pulse.utils.logger import get_logger
from sentiment_pulse.utils.helpers import to_json

logger = get_logger("series_cache")

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class SeriesCache:
    """File-backed TTL cache for normalized indicator payloads."""

    def __init__(
        self,
        settings: Optional[CacheSettings] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.settings = settings or get_settings().cache
        self.directory = self.settings.directory
        self._clock = clock
        # value: (written_at_epoch, payload)
        self._memory: TLRUCache = TLRUCache(
            maxsize=self.settings.memory_entries,
            ttu=self._expires_at,
            timer=clock,
        )
        self.hits = 0
        self.misses = 0
        os.makedirs(self.directory, exist_ok=True)

    def validity_seconds(self, key: str) -> float:
        """Validity window for a key, by category."""
        if "fear-greed" in key:
            minutes = self.settings.fear_greed_minutes
        elif "options" in key:
            minutes = self.settings.options_minutes
        elif any(ticker in key for ticker in self.settings.major_index_tickers):
            minutes = self.settings.major_index_minutes
        else:
            minutes = self.settings.default_minutes
        return minutes * 60.0

    def _expires_at(self, key: str, value: Tuple[float, Any], now: float) -> float:
        return value[0] + self.validity_seconds(key)

    def path_for(self, key: str) -> str:
        return os.path.join(self.directory, f"{_UNSAFE_CHARS.sub('_', key)}.json")

    def _read_envelope(self, key: str) -> Optional[Tuple[float, Any]]:
        path = self.path_for(key)
        if not os.path.exists(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as fh:
                envelope = json.load(fh)
            written = datetime.fromisoformat(envelope["timestamp"])
            if written.tzinfo is None:
                written = written.replace(tzinfo=timezone.utc)
            return written.timestamp(), envelope["data"]
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning("cache_read_failed", key=key, error=str(e))
            return None

    def get(self, key: str) -> Optional[Any]:
        """Return the payload if a valid entry exists, else None (missing and expired look the same)."""
        entry = self._memory.get(key)
        if entry is None:
            entry = self._read_envelope(key)
            if entry is not None:
                age = self._clock() - entry[0]
                if age < self.validity_seconds(key):
                    self._memory[key] = entry
                else:
                    entry = None
        if entry is None:
            self.misses += 1
            return None
        self.hits += 1
        logger.debug("cache_hit", key=key)
        return entry[1]

    def set(self, key: str, payload: Any) -> None:
        """Overwrite the entry for key. Write failures are logged, not raised."""
        now = self._clock()
        envelope = {
            "timestamp": datetime.fromtimestamp(now, tz=timezone.utc).isoformat(),
            "data": payload,
        }
        self._memory[key] = (now, payload)
        try:
            with open(self.path_for(key), "w", encoding="utf-8") as fh:
                fh.write(to_json(envelope))
        except OSError as e:
            logger.warning("cache_write_failed", key=key, error=str(e))

    @property
    def stats(self) -> Dict[str, Any]:
        """Return cache statistics."""
        return {
            "directory": self.directory,
            "memory_entries": len(self._memory),
            "hits": self.hits,
            "misses": self.misses,
        }
