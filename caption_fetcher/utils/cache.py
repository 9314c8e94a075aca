import hashlib
import json
import os
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Dict, NamedTuple, Optional, Tuple
from pydantic import TypeAdapter
from caption_fetcher.config import Settings, settings as default_settings
from caption_fetcher.core.store import CacheStore
from caption_fetcher.errors import CacheUnavailable
from caption_fetcher.models.lookup import Lookup
from caption_fetcher.models.transcript import CacheStatus
from caption_fetcher.utils.logger import logger

def languages_key(video_id: str) -> str:
    return f"languages:{video_id}"

def transcript_key(video_id: str, language_code: str, kind: str) -> str:
    return f"transcript:{video_id}:{language_code}:{kind}"


class FileCacheStore(CacheStore):
    """One JSON file per key, named by the key's hash, with the expiry stored alongside the value."""

    def __init__(self, cache_dir: str, clock: Callable[[], float] = time.time):
        self.cache_dir = os.path.join(cache_dir, "captions")
        self.clock = clock
        os.makedirs(self.cache_dir, exist_ok=True)

    def _get_path(self, key: str) -> str:
        key_hash = hashlib.sha256(key.encode()).hexdigest()
        return os.path.join(self.cache_dir, f"{key_hash}.json")

    def get(self, key: str) -> Optional[str]:
        path = self._get_path(key)
        if not os.path.exists(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise CacheUnavailable(f"Failed to read cache entry {key}: {e}") from e
        if data.get("key") != key or data.get("expires_at", 0) <= self.clock():
            return None
        return data.get("value")

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        path = self._get_path(key)
        tmp_path = f"{path}.{threading.get_ident()}.tmp"
        entry = {"key": key, "expires_at": self.clock() + ttl_seconds, "value": value}
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(entry, f, ensure_ascii=False)
            os.replace(tmp_path, path)
        except OSError as e:
            raise CacheUnavailable(f"Failed to write cache entry {key}: {e}") from e


class MemoryCacheStore(CacheStore):
    """In-process store with TTL, for tests and single-process use."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._entries: Dict[str, Tuple[str, float]] = {}
        self._lock = threading.Lock()
        self.clock = clock

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            if key not in self._entries:
                return None
            value, expires_at = self._entries[key]
            if expires_at <= self.clock():
                del self._entries[key]
                return None
            return value

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        with self._lock:
            self._entries[key] = (value, self.clock() + ttl_seconds)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def build_store(settings: Settings = default_settings) -> CacheStore:
    if settings.CACHE_BACKEND == "memory":
        return MemoryCacheStore()
    return FileCacheStore(settings.CACHE_DIR)


class Cached(NamedTuple):
    lookup: Lookup
    status: CacheStatus
    # Pending background write on a stored miss; nothing in the pipeline waits on it.
    write: Optional[Future] = None


class CacheAside:
    """
    Cache-aside around lookups.

    Hits are served from the store without calling ``compute``. On a miss the
    lookup is computed and returned right away while the store write runs on a
    background thread. Store failures of any kind are logged and never reach
    the caller. Only ``found`` lookups are stored.
    """

    def __init__(self, store: CacheStore, ttl: Optional[int] = None, executor: Optional[ThreadPoolExecutor] = None, settings: Settings = default_settings):
        self.store = store
        self.ttl = ttl if ttl is not None else settings.CACHE_TTL
        self.executor = executor or ThreadPoolExecutor(
            max_workers=settings.CACHE_WRITE_WORKERS,
            thread_name_prefix="cache-write",
        )
        self._pending = set()
        self._pending_lock = threading.Lock()

    def cached(self, key: str, compute: Callable[[], Lookup], adapter: TypeAdapter) -> Cached:
        hit = self._read(key, adapter)
        if hit is not None:
            logger.info(f"Cache hit for key: {key}")
            return Cached(Lookup.found(hit), "hit")

        logger.info(f"Cache miss for key: {key}")
        lookup = compute()
        write = None
        if lookup.is_found:
            write = self._submit(key, lookup.value, adapter)
        return Cached(lookup, "miss", write)

    def _submit(self, key: str, value: Any, adapter: TypeAdapter) -> Optional[Future]:
        try:
            write = self.executor.submit(self._write, key, value, adapter)
        except RuntimeError as e:
            # Executor already shut down.
            logger.error(f"Cache put error for key {key}: {e}")
            return None
        with self._pending_lock:
            self._pending.add(write)
        write.add_done_callback(self._forget)
        return write

    def _forget(self, write: Future) -> None:
        with self._pending_lock:
            self._pending.discard(write)

    def flush(self, timeout: Optional[float] = None) -> None:
        """Block until the writes submitted so far have finished."""
        with self._pending_lock:
            pending = list(self._pending)
        wait(pending, timeout=timeout)

    def peek(self, key: str, adapter: TypeAdapter) -> Optional[Any]:
        """Return the decoded cached value without computing anything on a miss."""
        return self._read(key, adapter)

    def _read(self, key: str, adapter: TypeAdapter) -> Optional[Any]:
        try:
            raw = self.store.get(key)
            if raw is None:
                return None
            return adapter.validate_json(raw)
        except Exception as e:
            logger.warning(f"Cache read failed for key {key}, bypassing cache: {e}")
            return None

    def _write(self, key: str, value: Any, adapter: TypeAdapter) -> bool:
        try:
            text = adapter.dump_json(value, by_alias=True).decode("utf-8")
            self.store.put(key, text, self.ttl)
        except Exception as e:
            logger.error(f"Cache put error for key {key}: {e}")
            return False
        logger.info(f"Cached data for key: {key}")
        return True

    def close(self, wait: bool = True) -> None:
        self.executor.shutdown(wait=wait)
