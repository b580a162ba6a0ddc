"""Browserbase REST client: allocate, release and list remote browsers."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from ..config import BROWSERBASE_API_URL, BROWSERBASE_REGION, PROVIDER_TIMEOUT
from ..constants import RELEASE_STATUS, SESSIONS_ENDPOINT
from ..models.fixtures import Geolocation
from ..models.session import RemoteSession

logger = logging.getLogger(__name__)


class ProviderError(RuntimeError):
    """The session provider could not be reached or rejected a request."""


class BrowserbaseClient:
    """Thin async wrapper over the Browserbase sessions API."""

    def __init__(
        self,
        api_key: str,
        project_id: str,
        region: str = BROWSERBASE_REGION,
        base_url: str = BROWSERBASE_API_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._api_key = api_key
        self._project_id = project_id
        self._region = region
        self._base_url = base_url
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={
                "X-BB-API-Key": self._api_key,
                "Content-Type": "application/json",
            },
            timeout=PROVIDER_TIMEOUT,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args):
        await self.aclose()

    async def aclose(self):
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        if self._client is None:
            raise ProviderError("Provider client is not open.")
        try:
            response = await self._client.request(method, path, **kwargs)
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as e:
            raise ProviderError(
                f"{method} {path} failed with HTTP {e.response.status_code}: {e.response.text[:200]}"
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(f"{method} {path} failed: {e}") from e

    async def verify(self) -> None:
        """List sessions once to prove the credentials and project work."""
        await self._request("GET", SESSIONS_ENDPOINT)
        logger.info("Successfully connected to Browserbase")

    async def create_session(self, geolocation: Optional[Geolocation] = None) -> RemoteSession:
        body: dict = {"projectId": self._project_id, "region": self._region}
        if geolocation is not None:
            body["proxies"] = [geolocation.to_proxy()]

        response = await self._request("POST", SESSIONS_ENDPOINT, json=body)
        session = RemoteSession.model_validate(response.json())
        if geolocation is not None and session.proxy is None:
            session.proxy = geolocation.to_proxy()
        logger.info(f"Allocated remote session {session.id} ({session.region or self._region})")
        return session

    async def release_session(self, session_id: str) -> None:
        await self._request(
            "POST",
            f"{SESSIONS_ENDPOINT}/{session_id}",
            json={"projectId": self._project_id, "status": RELEASE_STATUS},
        )
        logger.info(f"Requested release of remote session {session_id}")
