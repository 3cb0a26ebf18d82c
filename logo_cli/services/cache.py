"""Two-tier result cache: an in-process dict shadowing one JSON file per key.

The files under ``cache_dir`` are the durable copy. The in-memory map only
speeds up repeated lookups within one process and is never trusted beyond
the file copy's expiry.
"""

import asyncio
import hashlib
import logging
import os
import random
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional, Set, Tuple

from ..schemas import CacheEntry, CacheStats, GenerationResult

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 3600
DEFAULT_MAX_SIZE_MB = 500.0
# Fraction of writes that schedule a cleanup pass.
CLEANUP_PROBABILITY = 0.1
# Size-based eviction stops once the cache is back under this share of the limit.
EVICTION_HEADROOM = 0.8


def derive_key(
    company: str,
    prompt: str,
    style: Optional[str] = None,
    colors: Optional[List[str]] = None,
) -> str:
    """Return a 16-character hex key for a generation request.

    Colour order does not affect the key.
    """
    palette = ",".join(sorted(set(colors or [])))
    canonical = f"{company}:{prompt}:{style or 'default'}:{palette}"
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


class CacheStore:
    def __init__(
        self,
        cache_dir: Path | str = "./cache",
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        max_size_mb: float = DEFAULT_MAX_SIZE_MB,
        cleanup_probability: float = CLEANUP_PROBABILITY,
        rng: Callable[[], float] = random.random,
        clock: Callable[[], float] = time.time,
    ):
        self.cache_dir = Path(cache_dir)
        self.ttl_ms = int(ttl_seconds * 1000)
        self.max_size_bytes = int(max_size_mb * 1024 * 1024)
        self.cleanup_probability = cleanup_probability
        self._rng = rng
        self._clock = clock
        self._memory: Dict[str, CacheEntry] = {}
        self._maintenance: Set[asyncio.Task] = set()

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _is_expired(self, entry: CacheEntry) -> bool:
        return self._now_ms() > entry.expires_at

    def _path_for(self, key: str) -> Path:
        return self.cache_dir / f"{key}.json"

    async def get(self, key: str) -> Optional[CacheEntry]:
        cached = self._memory.get(key)
        if cached is not None and not self._is_expired(cached):
            return cached.model_copy(update={"hit": True})

        try:
            stored = await asyncio.to_thread(self._read_file, key)
        except (OSError, ValueError) as exc:
            logger.warning("Failed to read cache file for %s: %s", key, exc)
            return None

        if stored is None or self._is_expired(stored):
            return None
        self._memory[key] = stored
        return stored.model_copy(update={"hit": True})

    async def set(self, key: str, result: GenerationResult) -> CacheEntry:
        entry = CacheEntry(
            **result.model_dump(),
            expires_at=self._now_ms() + self.ttl_ms,
            hit=False,
        )
        self._memory[key] = entry
        try:
            await asyncio.to_thread(self._write_file, key, entry)
        except OSError as exc:
            logger.warning("Failed to save cache file for %s: %s", key, exc)

        if self._rng() < self.cleanup_probability:
            self._schedule_cleanup()
        return entry

    async def clear(self) -> None:
        self._memory.clear()
        try:
            await asyncio.to_thread(self._remove_files)
        except OSError as exc:
            logger.warning("Failed to clear file cache: %s", exc)

    async def stats(self) -> CacheStats:
        file_entries, total_size = 0, 0
        try:
            file_entries, total_size = await asyncio.to_thread(self._scan_size)
        except OSError as exc:
            logger.warning("Failed to get cache stats: %s", exc)
        return CacheStats(
            memory_entries=len(self._memory),
            file_entries=file_entries,
            total_size_bytes=total_size,
        )

    async def cleanup(self) -> None:
        """Drop expired or unreadable files, then evict oldest files over the size limit."""
        try:
            await asyncio.to_thread(self._cleanup_files)
        except OSError as exc:
            logger.warning("Cache cleanup failed: %s", exc)

        for key, entry in list(self._memory.items()):
            if self._is_expired(entry):
                del self._memory[key]

    async def join(self) -> None:
        """Wait for any scheduled cleanup passes to finish."""
        if self._maintenance:
            await asyncio.gather(*self._maintenance)

    def _schedule_cleanup(self) -> None:
        task = asyncio.create_task(self.cleanup())
        self._maintenance.add(task)
        task.add_done_callback(self._maintenance.discard)

    # Blocking helpers, run in a worker thread.

    def _cache_files(self) -> List[Path]:
        if not self.cache_dir.exists():
            return []
        return [path for path in self.cache_dir.glob("*.json") if path.is_file()]

    def _read_file(self, key: str) -> Optional[CacheEntry]:
        path = self._path_for(key)
        if not path.exists():
            return None
        # pydantic's ValidationError is a ValueError; callers treat both as a miss.
        return CacheEntry.model_validate_json(path.read_text(encoding="utf-8"))

    def _write_file(self, key: str, entry: CacheEntry) -> None:
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        path = self._path_for(key)
        # Readers only ever see a complete file.
        tmp_path = path.with_name(path.name + ".tmp")
        tmp_path.write_text(entry.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
        os.replace(tmp_path, path)

    def _remove_files(self) -> None:
        for path in self._cache_files():
            path.unlink(missing_ok=True)

    def _scan_size(self) -> Tuple[int, int]:
        files = self._cache_files()
        return len(files), sum(path.stat().st_size for path in files)

    def _cleanup_files(self) -> None:
        survivors: List[Tuple[Path, float, int]] = []
        for path in self._cache_files():
            try:
                stat = path.stat()
                content = path.read_text(encoding="utf-8")
            except OSError as exc:
                logger.warning("Skipping cache file %s: %s", path.name, exc)
                continue
            try:
                expired = self._is_expired(CacheEntry.model_validate_json(content))
            except ValueError:
                expired = True
            if expired:
                path.unlink(missing_ok=True)
            else:
                survivors.append((path, stat.st_mtime, stat.st_size))

        total = sum(size for _, _, size in survivors)
        if total <= self.max_size_bytes:
            return

        survivors.sort(key=lambda item: item[1])
        target = self.max_size_bytes * EVICTION_HEADROOM
        for path, _, size in survivors:
            if total <= target:
                break
            path.unlink(missing_ok=True)
            total -= size
