"""
Async content client for the scenario server, with retry and backoff.
Fetches the same documents the local loader reads from disk.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Optional

import httpx

from ..config import (
    REGISTRY_ENDPOINT,
    RULES_ENDPOINT,
    SCENARIOS_ENDPOINT,
    MAX_RETRIES,
    INITIAL_BACKOFF_SECONDS,
    MAX_BACKOFF_SECONDS,
    BACKOFF_MULTIPLIER,
    DEFAULT_TIMEOUT_SECONDS,
)
from ..scenarios.models import Scenario
from ..scenarios.registry import ControlsRegistry
from ..scoring.rules import ScoringRules

logger = logging.getLogger("triage_planner.content")


class ContentError(Exception):
    """Raised when content cannot be fetched."""
    def __init__(self, status_code: int, message: str, url: str):
        self.status_code = status_code
        self.url = url
        super().__init__(f"Content error {status_code} for {url}: {message}")


class ContentNotFound(ContentError):
    """Raised when a requested scenario does not exist."""


class ContentClient:
    """
    Async client for the scenario server.
    Features:
      - Exponential backoff on 429/503/504, timeouts and connection errors
      - 404 surfaced as ContentNotFound
      - Parsed rule and scenario models
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        self._request_count = 0
        self._throttle_count = 0
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout_seconds),
            headers={"Accept": "application/json"},
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args):
        if self._client:
            await self._client.aclose()
            self._client = None

    # --- Documents ---

    async def get_scoring_rules(self) -> ScoringRules:
        data = await self.get_json(RULES_ENDPOINT)
        return ScoringRules.from_dict(data)

    async def list_scenarios(self) -> list[dict]:
        """Scenario summaries: ``{id, title, environment}``."""
        return await self.get_json(SCENARIOS_ENDPOINT)

    async def get_scenario(self, scenario_id: str) -> Scenario:
        data = await self.get_json(f"{SCENARIOS_ENDPOINT}/{scenario_id}")
        return Scenario.from_dict(data)

    async def get_controls_registry(self) -> Optional[ControlsRegistry]:
        """The server's controls registry, or None when it does not publish one."""
        try:
            data = await self.get_json(REGISTRY_ENDPOINT)
        except ContentNotFound:
            logger.debug(f"No controls registry at {self.base_url}{REGISTRY_ENDPOINT}")
            return None
        return ControlsRegistry.from_dict(data)

    async def get_scenarios(self) -> list[Scenario]:
        summaries = await self.list_scenarios()
        return [await self.get_scenario(s["id"]) for s in summaries]

    # --- Transport ---

    async def get_json(self, path: str) -> Any:
        """GET a JSON document with retry/throttle handling."""
        if not self._client:
            raise RuntimeError("ContentClient not initialized. Use 'async with' context.")

        url = f"{self.base_url}{path}"
        backoff = INITIAL_BACKOFF_SECONDS

        for attempt in range(MAX_RETRIES + 1):
            try:
                response = await self._client.get(path)
                self._request_count += 1

                if response.status_code == 200:
                    return response.json()

                if response.status_code == 404:
                    raise ContentNotFound(404, "Not found", url)

                if response.status_code in (429, 503, 504) and attempt < MAX_RETRIES:
                    self._throttle_count += 1
                    retry_after = _retry_after_seconds(response.headers.get("Retry-After"), backoff)
                    wait_time = min(max(retry_after, backoff), MAX_BACKOFF_SECONDS)
                    logger.warning(
                        f"Throttled ({response.status_code}) on {url}. "
                        f"Retry {attempt + 1}/{MAX_RETRIES} in {wait_time:.1f}s"
                    )
                    await asyncio.sleep(wait_time)
                    backoff = min(backoff * BACKOFF_MULTIPLIER, MAX_BACKOFF_SECONDS)
                    continue

                raise ContentError(response.status_code, _error_message(response), url)

            except (httpx.TimeoutException, httpx.ConnectError) as e:
                logger.warning(f"{type(e).__name__} on {url}, attempt {attempt + 1}/{MAX_RETRIES + 1}")
                if attempt == MAX_RETRIES:
                    raise ContentError(0, f"{type(e).__name__}: {e}", url) from e
                await asyncio.sleep(backoff)
                backoff = min(backoff * BACKOFF_MULTIPLIER, MAX_BACKOFF_SECONDS)

        raise ContentError(0, "Max retries exceeded", url)

    def get_stats(self) -> dict:
        return {
            "total_requests": self._request_count,
            "throttle_events": self._throttle_count,
        }


def _error_message(response: httpx.Response) -> str:
    """The server reports failures as ``{"error": "..."}``."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return response.text[:200]


def _retry_after_seconds(header: Optional[str], default: float) -> float:
    """``Retry-After`` as seconds; accepts delta-seconds or an HTTP-date."""
    if header is None:
        return default
    try:
        return float(header)
    except ValueError:
        pass
    try:
        when = parsedate_to_datetime(header)
    except (TypeError, ValueError):
        logger.debug(f"Ignoring unparseable Retry-After header: {header!r}")
        return default
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return (when - datetime.now(timezone.utc)).total_seconds()
