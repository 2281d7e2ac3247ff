import hashlib
import json
import time
from collections import OrderedDict
from threading import RLock

DEFAULT_TTL = 5 * 60  # 5 minutos
DEFAULT_MAX_ENTRIES = 50


def stable_cache_key(endpoint: str, body: dict) -> str:
    """Clave determinística: sha256 del body serializado con claves ordenadas."""
    raw = json.dumps(body, sort_keys=True, separators=(",", ":"), default=str)
    digest = hashlib.sha256(raw.encode("utf-8")).hexdigest()[:32]
    return f"{endpoint}:{digest}"


class ResponseCache:
    """
    Cache en memoria de respuestas crudas de InnerTube, con TTL y desalojo LRU.
    Se construye explícitamente y se pasa a quien la use (nada de global).
    La usan varios threads a la vez (to_thread + rutas sync), todo va bajo lock.
    """

    def __init__(self, ttl: int = DEFAULT_TTL, max_entries: int = DEFAULT_MAX_ENTRIES, clock=time.time):
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        # clave -> (data, expira_en); el orden es el de uso (el más viejo primero)
        self._cache: OrderedDict[str, tuple[object, float]] = OrderedDict()
        self._lock = RLock()

    def __len__(self):
        with self._lock:
            return len(self._cache)

    def get(self, key: str):
        """Devuelve valor cacheado si no expiró"""
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None
            data, expires_at = entry
            if expires_at <= self._clock():
                self._cache.pop(key, None)
                return None
            self._cache.move_to_end(key)
            return data

    def set(self, key: str, data, ttl: int | None = None):
        """Guarda valor en cache, desalojando vencidos y después el menos usado"""
        ttl = self.ttl if ttl is None else ttl
        with self._lock:
            self._evict_expired()
            self._cache[key] = (data, self._clock() + ttl)
            self._cache.move_to_end(key)
            while len(self._cache) > self.max_entries:
                self._cache.popitem(last=False)

    def delete(self, key: str):
        with self._lock:
            self._cache.pop(key, None)

    def clear(self):
        """Vacía todo el cache"""
        with self._lock:
            self._cache.clear()

    def _evict_expired(self):
        now = self._clock()
        for k in [k for k, (_, expires_at) in self._cache.items() if expires_at <= now]:
            self._cache.pop(k, None)
