"""Shared GET-with-cache plumbing for the two upstream providers."""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Mapping, Optional
from urllib.parse import urlencode

import requests

from nfl_hub.errors import UpstreamError

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "nfl-hub/1.0 (+https://example.local)"
MAX_ERROR_SNIPPET = 300
RETRYABLE_STATUSES = {429, 500, 502, 503, 504}
DEFAULT_MAX_CACHE_ENTRIES = 1_000


def _truncate(value: str, limit: int = MAX_ERROR_SNIPPET) -> str:
    if len(value) <= limit:
        return value
    return value[:limit] + "...<truncated>"


class ResponseCache:
    """Thread-safe in-memory cache of decoded JSON bodies with a TTL.

    Expired entries are purged on every write; when the cache is still full
    the oldest entry is dropped.
    """

    def __init__(
        self,
        ttl_seconds: int = 60,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int = DEFAULT_MAX_CACHE_ENTRIES,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max(1, max_entries)
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            now = self._clock()
            self._evict_expired_locked(now)
            if key not in self._entries and len(self._entries) >= self.max_entries:
                oldest_key = next(iter(self._entries))
                del self._entries[oldest_key]
            self._entries[key] = (now + self.ttl_seconds, value)

    def _evict_expired_locked(self, now: float) -> None:
        expired = [key for key, (expires_at, _) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def build_url(base_url: str, endpoint: str, params: Mapping[str, Any] | None = None) -> str:
    """Join ``endpoint`` onto ``base_url``; absolute endpoints are kept as-is."""

    if endpoint.startswith(("http://", "https://")):
        url = endpoint
    else:
        url = f"{base_url.rstrip('/')}/{endpoint.lstrip('/')}"
    if params:
        cleaned = {key: value for key, value in params.items() if value is not None and value != ""}
        if cleaned:
            return f"{url}?{urlencode(sorted(cleaned.items()))}"
    return url


class UpstreamClient:
    """GET JSON from one provider with timeout, bounded retry and a TTL cache."""

    provider = "upstream"

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float = 10.0,
        max_attempts: int = 2,
        backoff_seconds: float = 0.5,
        cache: ResponseCache | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.max_attempts = max(1, max_attempts)
        self.backoff_seconds = backoff_seconds
        self.cache = cache if cache is not None else ResponseCache()

    def _headers(self) -> dict[str, str]:
        return {
            "User-Agent": DEFAULT_USER_AGENT,
            "Accept": "application/json",
        }

    def fetch(self, endpoint: str, params: Mapping[str, Any] | None = None) -> Any:
        headers = self._headers()
        url = build_url(self.base_url, endpoint, params)

        cached = self.cache.get(url)
        if cached is not None:
            return cached

        payload = self._get(url, headers)
        self.cache.set(url, payload)
        return payload

    def _get(self, url: str, headers: Mapping[str, str]) -> Any:
        response = None
        last_exception: requests.RequestException | None = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                response = requests.get(url, headers=headers, timeout=self.timeout_seconds)
            except (requests.Timeout, requests.ConnectionError) as exc:
                last_exception = exc
                response = None
                logger.warning(
                    "%s request failed attempt=%s url=%s error=%s",
                    self.provider,
                    attempt,
                    url,
                    exc,
                )
            except requests.RequestException as exc:
                raise UpstreamError(f"{self.provider} request failed: {exc}", url=url) from exc
            else:
                if response.status_code not in RETRYABLE_STATUSES:
                    break
                logger.warning(
                    "%s retryable status=%s attempt=%s url=%s",
                    self.provider,
                    response.status_code,
                    attempt,
                    url,
                )
            if attempt < self.max_attempts:
                time.sleep(self.backoff_seconds * (2 ** (attempt - 1)))

        if response is None:
            raise UpstreamError(
                f"{self.provider} request failed after {self.max_attempts} attempts: {last_exception}",
                url=url,
            ) from last_exception

        if not 200 <= response.status_code < 300:
            body_snippet = _truncate(response.text or "")
            logger.error(
                "%s non-2xx status=%s url=%s body=%s",
                self.provider,
                response.status_code,
                url,
                body_snippet,
            )
            raise UpstreamError(
                f"{self.provider} returned an error response",
                status=response.status_code,
                url=url,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamError(
                f"{self.provider} returned non-JSON response: {_truncate(response.text or '')}",
                status=response.status_code,
                url=url,
            ) from exc
