"""
Mixpost API Client
==================
Async client for the Mixpost workspace API.

Every endpoint call is routed through a ResilientExecutor, so callers
receive either the decoded JSON body or a single EnhancedError.

Usage:
    from mixpost_mcp.config import MixpostConfig
    from mixpost_mcp.http import MixpostClient

    async with MixpostClient(MixpostConfig.from_env()) as client:
        accounts = await client.list_accounts()
"""

from typing import Any, Dict, List, Mapping, Optional, Union

import httpx
import structlog

from ..config import MixpostConfig
from ..errors import RequestContext
from ..executor import ResilientExecutor
from .models import (
    CreatePostRequest,
    MediaUpdateRequest,
    TagRequest,
    TagUpdateRequest,
    UpdatePostRequest,
)

logger = structlog.get_logger(__name__)

QueryParams = Mapping[str, Union[str, int, float, bool, None]]


def _dump(payload: Any) -> Any:
    if hasattr(payload, "model_dump"):
        return payload.model_dump(exclude_none=True)
    return payload


def _clean_params(params: Optional[QueryParams]) -> Optional[Dict[str, Any]]:
    if not params:
        return None
    return {key: value for key, value in params.items() if value is not None}


class MixpostClient:
    """
    Resilient async client for one Mixpost workspace.

    Features:
    - Retries with exponential backoff and jitter on transient failures.
    - Circuit breaker shared by all calls of this client.
    - Pydantic request payloads.
    - Uniform EnhancedError failures.
    """

    def __init__(
        self,
        config: MixpostConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        executor: Optional[ResilientExecutor] = None,
    ):
        self.config = config
        self.executor = executor or ResilientExecutor(
            policy=config.retry_policy(),
            breaker_config=config.circuit_breaker_config(),
            enabled=config.enable_retry,
        )
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        await self._get_client()
        return self

    async def __aexit__(self, *args):
        await self.aclose()

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.api_base_url,
                timeout=self.config.timeout,
                headers=self._get_headers(),
                transport=self._transport,
            )
        return self._client

    def _get_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Accept": "application/json",
            "User-Agent": "mixpost-mcp",
        }

    async def aclose(self):
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def get_circuit_breaker_state(self) -> Dict[str, Any]:
        return self.executor.get_circuit_breaker_state()

    async def _send(self, method: str, path: str, **kwargs) -> Any:
        """Perform one HTTP attempt; raises on transport errors and status >= 400."""
        client = await self._get_client()
        logger.debug("mixpost_request", method=method, path=path)
        response = await client.request(method, path, **kwargs)
        response.raise_for_status()

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        return await self.executor.execute(
            lambda: self._send(method, path, **kwargs),
            RequestContext(endpoint=path, method=method),
        )

    # Accounts

    async def list_accounts(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/accounts")

    async def get_account(self, account_uuid: str) -> Dict[str, Any]:
        return await self._request("GET", f"/accounts/{account_uuid}")

    # Posts

    async def list_posts(self, params: Optional[QueryParams] = None) -> Dict[str, Any]:
        """List posts; ``params`` supports page, limit and status filters."""
        return await self._request("GET", "/posts", params=_clean_params(params))

    async def get_post(self, post_uuid: str) -> Dict[str, Any]:
        return await self._request("GET", f"/posts/{post_uuid}")

    async def create_post(self, post: Union[CreatePostRequest, Dict[str, Any]]) -> Dict[str, Any]:
        return await self._request("POST", "/posts", json=_dump(post))

    async def update_post(
        self,
        post_uuid: str,
        post: Union[UpdatePostRequest, Dict[str, Any]],
    ) -> Dict[str, Any]:
        return await self._request("PUT", f"/posts/{post_uuid}", json=_dump(post))

    async def delete_post(self, post_uuid: str) -> Optional[Dict[str, Any]]:
        return await self._request("DELETE", f"/posts/{post_uuid}")

    async def delete_multiple_posts(self, post_uuids: List[str]) -> Optional[Dict[str, Any]]:
        return await self._request(
            "POST",
            "/posts/delete-multiple",
            json={"uuids": list(post_uuids)},
        )

    async def schedule_post(self, post_uuid: str) -> Dict[str, Any]:
        return await self._request("POST", f"/posts/{post_uuid}/schedule")

    async def add_post_to_queue(self, post_uuid: str) -> Dict[str, Any]:
        return await self._request("POST", f"/posts/{post_uuid}/queue")

    async def approve_post(self, post_uuid: str) -> Dict[str, Any]:
        return await self._request("POST", f"/posts/{post_uuid}/approve")

    # Media

    async def list_media(self, params: Optional[QueryParams] = None) -> Dict[str, Any]:
        """List media; ``params`` supports page, limit and type filters."""
        return await self._request("GET", "/media", params=_clean_params(params))

    async def get_media(self, media_uuid: str) -> Dict[str, Any]:
        return await self._request("GET", f"/media/{media_uuid}")

    async def update_media(
        self,
        media_uuid: str,
        data: Union[MediaUpdateRequest, Dict[str, Any]],
    ) -> Dict[str, Any]:
        return await self._request("PUT", f"/media/{media_uuid}", json=_dump(data))

    async def upload_media(
        self,
        content: bytes,
        filename: str,
        content_type: Optional[str] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Upload a media file as multipart form data.

        Args:
            content: Raw file bytes; kept in memory so retries can resend them
            filename: Name reported to Mixpost
            content_type: MIME type of the file
            metadata: Extra form fields, stringified
        """
        if content_type:
            file_field = (filename, content, content_type)
        else:
            file_field = (filename, content)
        form = {key: str(value) for key, value in (metadata or {}).items() if value is not None}
        return await self._request(
            "POST",
            "/media",
            files={"file": file_field},
            data=form or None,
        )

    async def delete_media(self, media_uuid: str) -> Optional[Dict[str, Any]]:
        return await self._request("DELETE", f"/media/{media_uuid}")

    # Tags

    async def list_tags(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/tags")

    async def get_tag(self, tag_uuid: str) -> Dict[str, Any]:
        return await self._request("GET", f"/tags/{tag_uuid}")

    async def create_tag(self, tag: Union[TagRequest, Dict[str, Any]]) -> Dict[str, Any]:
        return await self._request("POST", "/tags", json=_dump(tag))

    async def update_tag(
        self,
        tag_uuid: str,
        tag: Union[TagUpdateRequest, Dict[str, Any]],
    ) -> Dict[str, Any]:
        return await self._request("PUT", f"/tags/{tag_uuid}", json=_dump(tag))

    async def delete_tag(self, tag_uuid: str) -> Optional[Dict[str, Any]]:
        return await self._request("DELETE", f"/tags/{tag_uuid}")
