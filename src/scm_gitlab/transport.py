"""Retrying, circuit-broken HTTP transport for the GitLab REST API."""

from __future__ import annotations

import asyncio
import logging
import random
import time
from dataclasses import dataclass
from typing import Any

import httpx

from .config import FuseboxConfig
from .exceptions import CircuitOpenError
from .models.base import ScmModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Request:
    """One outbound call, relative to the API base URL."""

    method: str
    path: str
    token: str
    params: dict[str, Any] | None = None
    json: Any = None


class RequestStats(ScmModel):
    total: int = 0
    timeouts: int = 0
    success: int = 0
    failure: int = 0
    concurrent: int = 0
    average_time: float = 0


class BreakerStats(ScmModel):
    is_closed: bool = True


class TransportStats(ScmModel):
    requests: RequestStats
    breaker: BreakerStats


class Transport:
    """Issues requests with retry/backoff and a consecutive-failure breaker.

    Only transport errors (connection failures, timeouts) count as failures.
    Any HTTP response, whatever its status, is a successful call; the caller
    decides what the status means.
    """

    def __init__(self, api_url: str, fusebox: FuseboxConfig | None = None) -> None:
        self.fusebox = fusebox or FuseboxConfig()
        self._client = httpx.AsyncClient(
            base_url=api_url,
            headers={"Accept": "application/json"},
            timeout=self.fusebox.timeout,
        )
        self._total = 0
        self._timeouts = 0
        self._success = 0
        self._failure = 0
        self._concurrent = 0
        self._total_time = 0.0
        self._consecutive_failures = 0
        self._opened_at: float | None = None
        self._trial_in_flight = False

    async def close(self) -> None:
        await self._client.aclose()

    # ── Breaker ───────────────────────────────────────────────────

    @property
    def is_closed(self) -> bool:
        return self._opened_at is None

    def _check_breaker(self) -> bool:
        """Raise if the breaker rejects a call; return True if this call is the half-open trial."""
        if self._opened_at is None:
            return False
        if time.monotonic() - self._opened_at < self.fusebox.reset_timeout:
            raise CircuitOpenError
        # Half-open: one trial call at a time; its outcome closes or re-opens.
        if self._trial_in_flight:
            raise CircuitOpenError
        self._trial_in_flight = True
        logger.warning("GitLab breaker half-open, allowing a trial call")
        return True

    def _record(self, ok: bool, elapsed: float) -> None:
        self._total += 1
        self._total_time += elapsed
        if ok:
            self._success += 1
            self._consecutive_failures = 0
            if self._opened_at is not None:
                logger.warning("GitLab breaker closed")
            self._opened_at = None
            return

        self._failure += 1
        self._consecutive_failures += 1
        if self._consecutive_failures >= self.fusebox.max_failures:
            if self._opened_at is None:
                logger.warning(
                    "GitLab breaker opened after %d consecutive failures",
                    self._consecutive_failures,
                )
            self._opened_at = time.monotonic()

    # ── Requests ──────────────────────────────────────────────────

    def _backoff(self, attempt: int) -> float:
        delay = self.fusebox.min_timeout * (self.fusebox.factor**attempt)
        if self.fusebox.randomize:
            delay *= random.uniform(1, 2)
        return min(delay, self.fusebox.max_timeout)

    async def send(self, request: Request) -> httpx.Response:
        """Send *request*, retrying transport errors; re-raise the last one if all fail."""
        trial = self._check_breaker()

        kwargs: dict[str, Any] = {
            "params": request.params,
            "headers": {"Authorization": f"Bearer {request.token}"},
        }
        if request.json is not None:
            kwargs["json"] = request.json

        self._concurrent += 1
        start = time.monotonic()
        try:
            attempt = 0
            while True:
                try:
                    resp = await self._client.request(request.method, request.path, **kwargs)
                except httpx.TransportError as e:
                    if isinstance(e, httpx.TimeoutException):
                        self._timeouts += 1
                    if attempt >= self.fusebox.retries:
                        self._record(False, time.monotonic() - start)
                        raise
                    wait = self._backoff(attempt)
                    attempt += 1
                    logger.warning(
                        "GitLab %s %s failed (attempt %d/%d): %s; retrying in %.2fs",
                        request.method,
                        request.path,
                        attempt,
                        self.fusebox.retries + 1,
                        e,
                        wait,
                    )
                    await asyncio.sleep(wait)
                    continue

                elapsed = time.monotonic() - start
                self._record(True, elapsed)
                logger.debug(
                    "GitLab %s %s -> %d (%.1f ms)",
                    request.method,
                    request.path,
                    resp.status_code,
                    elapsed * 1000,
                )
                return resp
        finally:
            self._concurrent -= 1
            if trial:
                self._trial_in_flight = False

    def stats(self) -> TransportStats:
        average = self._total_time * 1000 / self._total if self._total else 0
        return TransportStats(
            requests=RequestStats(
                total=self._total,
                timeouts=self._timeouts,
                success=self._success,
                failure=self._failure,
                concurrent=self._concurrent,
                average_time=average,
            ),
            breaker=BreakerStats(is_closed=self.is_closed),
        )
