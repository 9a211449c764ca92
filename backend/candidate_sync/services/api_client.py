"""
Candidate API Client

Thin async wrapper over the remote candidate API. Every collection exposes
POST /{collection}/, PATCH /{collection}/{id}/ and DELETE /{collection}/{id}/;
profiles add a full read, a parse trigger and a parse status endpoint.
"""
import logging
from typing import Any, Dict, Optional

import httpx

from ..config import get_settings
from ..exceptions import ApiError, RemoteUnavailableError, SessionExpiredError

logger = logging.getLogger(__name__)


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool) or isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, list):
        return ", ".join(filter(None, (_stringify(item) for item in value)))
    return ""


def extract_error_message(data: Any, fallback: str) -> str:
    """
    Best human-readable message from an error body: `detail`, `error` or
    `message` when present, else "field: problem" pairs joined together.
    """
    if not data:
        return fallback
    if isinstance(data, str):
        return data
    if not isinstance(data, dict):
        return fallback

    for key in ("detail", "error", "message"):
        if isinstance(data.get(key), str) and data[key]:
            return data[key]

    parts = []
    for field_name, value in data.items():
        text = _stringify(value)
        if text:
            parts.append(f"{field_name}: {text}")
    return ". ".join(parts) if parts else fallback


class CandidateApiClient:
    """
    One client per editing session. The bearer token is the caller's own
    credential, forwarded as-is.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.get_api_root()).rstrip("/")
        self.token = token or settings.api_token or None

        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout or settings.request_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self):
        await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = "/" + path.lstrip("/")
        try:
            response = await self._client.request(method, url, json=json, params=params)
        except httpx.TimeoutException as e:
            raise RemoteUnavailableError(f"{method} {url} timed out") from e
        except httpx.RequestError as e:
            raise RemoteUnavailableError(f"{method} {url} failed: {e}") from e

        if response.status_code == 204 or not response.content:
            data = None
        else:
            try:
                data = response.json()
            except ValueError:
                data = response.text

        if response.status_code == 401:
            logger.warning(f"[API] {method} {url} -> 401, session expired")
            raise SessionExpiredError(data=data)

        if response.status_code >= 400:
            message = extract_error_message(data, f"Request failed with status {response.status_code}")
            raise ApiError(message, status_code=response.status_code, data=data)

        return data

    # ========================================================================
    # Collections
    # ========================================================================

    async def create(self, collection_path: str, payload: Dict[str, Any]) -> Any:
        return await self.request("POST", f"{collection_path}/", json=payload)

    async def update(self, collection_path: str, record_id: Any, payload: Dict[str, Any]) -> Any:
        return await self.request("PATCH", f"{collection_path}/{record_id}/", json=payload)

    async def delete(self, collection_path: str, record_id: Any) -> Any:
        return await self.request("DELETE", f"{collection_path}/{record_id}/")

    # ========================================================================
    # Profiles
    # ========================================================================

    async def fetch_full_profile(self, slug: str) -> Any:
        return await self.request("GET", f"profiles/{slug}/full/")

    async def update_profile(self, slug: str, payload: Dict[str, Any]) -> Any:
        return await self.request("PATCH", f"profiles/{slug}/", json=payload)

    async def trigger_parse(self, slug: str) -> Any:
        return await self.request("POST", f"profiles/{slug}/parse-resume/")

    async def get_parsing_status(self, slug: str) -> Any:
        return await self.request(
            "GET", f"profiles/{slug}/parsing-status/", params={"include_resume": "true"}
        )
