"""On-disk cache for market data: quotes as JSON, price histories as parquet.

Entries live under ``Paths.DATA_CACHE / <category>``, one file per key.  An
entry older than the category TTL (``cache.ttl_hours`` in settings.yaml,
24h when unset) is deleted on read.  Unreadable entries are treated the
same way, so a truncated write only costs one refetch.
"""

import hashlib
import json
import time
from pathlib import Path
from typing import Callable

import pandas as pd

from portfolio_analytics.config import Paths, SETTINGS
from portfolio_analytics.utils.logger import setup_logger

logger = setup_logger("cache")

DEFAULT_TTL_HOURS = 24
_EXTENSIONS = ("json", "parquet")


class DataCache:
    """TTL file cache for one category of market data (e.g. ``quotes``)."""

    def __init__(self, category: str = "general", cache_dir: Path | None = None):
        self.category = category
        self.cache_dir = Path(cache_dir or Paths.DATA_CACHE) / category
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        ttl_hours = SETTINGS.get("cache", {}).get("ttl_hours", {}).get(category, DEFAULT_TTL_HOURS)
        self.ttl_seconds = ttl_hours * 3600

    def _key_path(self, key: str, ext: str = "json") -> Path:
        digest = hashlib.md5(key.encode()).hexdigest()
        return self.cache_dir / f"{digest}.{ext}"

    def _load(self, key: str, ext: str, reader: Callable[[Path], object]):
        path = self._key_path(key, ext)
        if not path.exists():
            return None
        age = time.time() - path.stat().st_mtime
        if age > self.ttl_seconds:
            logger.debug("%s/%s expired (%.0fs old)", self.category, key, age)
            path.unlink(missing_ok=True)
            return None
        try:
            return reader(path)
        except (OSError, ValueError) as e:
            logger.warning("Dropping unreadable cache entry %s/%s: %s", self.category, key, e)
            path.unlink(missing_ok=True)
            return None

    def invalidate(self, key: str) -> bool:
        """Delete every entry stored under *key*; True if anything was removed."""
        removed = False
        for ext in _EXTENSIONS:
            path = self._key_path(key, ext)
            if path.exists():
                path.unlink()
                removed = True
        return removed

    # ----- quotes -------------------------------------------------------------

    def get(self, key: str) -> dict | None:
        return self._load(key, "json", lambda p: json.loads(p.read_text()))

    def set(self, key: str, data: dict) -> None:
        self._key_path(key, "json").write_text(json.dumps(data))

    # ----- price histories ----------------------------------------------------

    def get_df(self, key: str) -> pd.DataFrame | None:
        return self._load(key, "parquet", pd.read_parquet)

    def set_df(self, key: str, df: pd.DataFrame) -> None:
        df.to_parquet(self._key_path(key, "parquet"))
