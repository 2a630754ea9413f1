"""Outbound HTTP calls: the status probe and the GitHub workflow dispatch.

Both calls are bounded by their own timeout and cancelled when it elapses.
Probes go through a separate, unauthenticated client so the dispatch token is
never sent to monitored URLs.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from types import TracebackType

import httpx

from workflow_trigger.trigger.errors import ErrorKind, TriggerError
from workflow_trigger.trigger.tasks import DispatchTarget

logger = logging.getLogger(__name__)

PROBE_USER_AGENT = "workflow-trigger-monitor"
DISPATCH_USER_AGENT = "workflow-trigger"


class WorkflowClient:
    """Small async wrapper around httpx for the two calls a task needs."""

    def __init__(
        self,
        *,
        token: str,
        base_url: str = "https://api.github.com",
        probe_timeout: float = 10.0,
        dispatch_timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not token:
            raise ValueError("GitHub token is required")

        self._rest_base_url = base_url.rstrip("/")
        self._probe_timeout = probe_timeout
        self._dispatch_timeout = dispatch_timeout

        self._probe_client = httpx.AsyncClient(
            headers={"User-Agent": PROBE_USER_AGENT},
            timeout=probe_timeout,
            follow_redirects=True,
            transport=transport,
        )
        self._api_client = httpx.AsyncClient(
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": DISPATCH_USER_AGENT,
            },
            timeout=dispatch_timeout,
            transport=transport,
        )

    def _dispatch_url(self, target: DispatchTarget) -> str:
        return (
            f"{self._rest_base_url}/repos/{target.owner}/{target.repo}"
            f"/actions/workflows/{target.workflow_id}/dispatches"
        )

    async def probe(self, url: str) -> int:
        """GET `url` and return the final response status code."""

        try:
            async with asyncio.timeout(self._probe_timeout):
                resp = await self._probe_client.get(url)
        except (TimeoutError, httpx.TimeoutException) as e:
            raise TriggerError(
                f"probe timed out after {self._probe_timeout:g}s: {url}",
                kind=ErrorKind.TIMEOUT,
            ) from e
        except httpx.TransportError as e:
            raise TriggerError(
                f"probe failed for {url}: {e!r}", kind=ErrorKind.NETWORK_ERROR
            ) from e

        logger.debug("Probe completed", extra={"url": url, "status_code": resp.status_code})
        return resp.status_code

    async def dispatch(
        self, target: DispatchTarget, inputs: Mapping[str, str] | None = None
    ) -> None:
        """Start `target.workflow_id` on `target.ref`.

        Raises:
            TriggerError: on timeout, transport failure, or a non-2xx response.
        """

        url = self._dispatch_url(target)
        payload = {"ref": target.ref, "inputs": dict(inputs or {})}
        try:
            async with asyncio.timeout(self._dispatch_timeout):
                resp = await self._api_client.post(url, json=payload)
        except (TimeoutError, httpx.TimeoutException) as e:
            raise TriggerError(
                f"workflow dispatch timed out after {self._dispatch_timeout:g}s: {target.label}",
                kind=ErrorKind.TIMEOUT,
            ) from e
        except httpx.TransportError as e:
            raise TriggerError(
                f"workflow dispatch failed for {target.label}: {e!r}",
                kind=ErrorKind.NETWORK_ERROR,
            ) from e

        if not resp.is_success:
            raise TriggerError.from_response(resp.status_code, resp.text)

        logger.debug(
            "Workflow dispatched", extra={"workflow": target.label, "ref": target.ref}
        )

    async def aclose(self) -> None:
        await self._probe_client.aclose()
        await self._api_client.aclose()

    async def __aenter__(self) -> WorkflowClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
