"""
Mixpost MCP Server
==================
Exposes the Mixpost API as MCP tools over stdio.

Usage:
    MIXPOST_BASE_URL=https://mixpost.example.com \\
    MIXPOST_WORKSPACE_UUID=... \\
    MIXPOST_API_KEY=... \\
    mixpost-mcp
"""

import json
import os
from contextlib import asynccontextmanager
from typing import Any, Awaitable, Callable, Dict, List, Optional

import structlog
from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import ValidationError

from .config import ConfigurationError, MixpostConfig
from .errors import EnhancedError
from .http import (
    CreatePostRequest,
    MediaUpdateRequest,
    MixpostClient,
    PostVersion,
    TagRequest,
    TagUpdateRequest,
    UpdatePostRequest,
)
from .log_config import setup_logging

logger = structlog.get_logger(__name__)

SERVER_NAME = "mixpost-mcp-server"


def format_tool_error(error: EnhancedError) -> str:
    """Render an EnhancedError as the text of a tool error."""
    lines = [
        f"Mixpost API error ({error.status}): {error.message}",
        f"Suggestion: {error.suggestion}",
    ]
    for field_name, messages in (error.validation_errors or {}).items():
        for message in messages:
            lines.append(f"{field_name}: {message}")
    return "\n".join(lines)


def _require_id(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ToolError(f"Invalid params: {field_name} must be a non-empty string")
    return value


def _validation_message(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error["loc"]) or "request"
        parts.append(f"{location}: {error['msg']}")
    return "Invalid params: " + "; ".join(parts)


class MixpostTools:
    """
    Tool handlers backed by a MixpostClient.

    The client is built from the environment on first use, so tools can
    be listed before credentials are configured.
    """

    def __init__(self, client: Optional[MixpostClient] = None):
        self._client = client

    def _get_client(self) -> MixpostClient:
        if self._client is None:
            try:
                config = MixpostConfig.from_env()
            except ConfigurationError as exc:
                raise ToolError(str(exc)) from exc
            self._client = MixpostClient(config)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()

    async def _call(self, call: Callable[[MixpostClient], Awaitable[Any]]) -> str:
        client = self._get_client()
        try:
            result = await call(client)
        except EnhancedError as exc:
            logger.warning(
                "tool_failed",
                code=exc.code.value,
                status=exc.status,
                endpoint=exc.context.endpoint,
            )
            raise ToolError(format_tool_error(exc)) from exc
        return json.dumps(result, indent=2)

    def handlers(self) -> Dict[str, Callable[..., Awaitable[str]]]:
        """Tool name to handler, in registration order."""
        return {
            "mixpost_list_accounts": self.list_accounts,
            "mixpost_get_account": self.get_account,
            "mixpost_create_post": self.create_post,
            "mixpost_update_post": self.update_post,
            "mixpost_approve_post": self.approve_post,
            "mixpost_get_post": self.get_post,
            "mixpost_list_posts": self.list_posts,
            "mixpost_delete_post": self.delete_post,
            "mixpost_delete_multiple_posts": self.delete_multiple_posts,
            "mixpost_schedule_post": self.schedule_post,
            "mixpost_add_post_to_queue": self.add_post_to_queue,
            "mixpost_list_media": self.list_media,
            "mixpost_get_media": self.get_media,
            "mixpost_update_media": self.update_media,
            "mixpost_delete_media": self.delete_media,
            "mixpost_list_tags": self.list_tags,
            "mixpost_get_tag": self.get_tag,
            "mixpost_create_tag": self.create_tag,
            "mixpost_update_tag": self.update_tag,
            "mixpost_delete_tag": self.delete_tag,
        }

    # Accounts

    async def list_accounts(self) -> str:
        """List all social media accounts in the workspace."""
        return await self._call(lambda client: client.list_accounts())

    async def get_account(self, account_uuid: str) -> str:
        """Get details of a specific social media account."""
        account_uuid = _require_id(account_uuid, "account_uuid")
        return await self._call(lambda client: client.get_account(account_uuid))

    # Posts

    async def create_post(
        self,
        date: str,
        time: str,
        timezone: str,
        accounts: List[str],
        versions: List[PostVersion],
        tags: Optional[List[str]] = None,
        schedule: Optional[bool] = None,
        schedule_now: Optional[bool] = None,
        queue: Optional[bool] = None,
    ) -> str:
        """
        Create a new social media post.

        Args:
            date: Post date in YYYY-MM-DD format
            time: Post time in HH:MM format
            timezone: Timezone for the post (e.g. "America/New_York")
            accounts: Account UUIDs to post to
            versions: Post versions for the different accounts
            tags: Tag UUIDs to associate with the post
            schedule: Schedule the post for the given date and time
            schedule_now: Schedule the post immediately
            queue: Add the post to the queue
        """
        try:
            post = CreatePostRequest(
                date=date,
                time=time,
                timezone=timezone,
                accounts=accounts,
                versions=versions,
                tags=tags,
                schedule=schedule,
                schedule_now=schedule_now,
                queue=queue,
            )
        except ValidationError as exc:
            raise ToolError(_validation_message(exc)) from exc
        return await self._call(lambda client: client.create_post(post))

    async def update_post(
        self,
        post_uuid: str,
        date: str,
        time: str,
        timezone: str,
        accounts: List[str],
        versions: List[PostVersion],
        tags: Optional[List[str]] = None,
        schedule: Optional[bool] = None,
        schedule_now: Optional[bool] = None,
        queue: Optional[bool] = None,
    ) -> str:
        """Update an existing social media post; takes the same fields as create."""
        post_uuid = _require_id(post_uuid, "post_uuid")
        try:
            post = UpdatePostRequest(
                date=date,
                time=time,
                timezone=timezone,
                accounts=accounts,
                versions=versions,
                tags=tags,
                schedule=schedule,
                schedule_now=schedule_now,
                queue=queue,
            )
        except ValidationError as exc:
            raise ToolError(_validation_message(exc)) from exc
        return await self._call(lambda client: client.update_post(post_uuid, post))

    async def approve_post(self, post_uuid: str) -> str:
        """Approve a post awaiting approval."""
        post_uuid = _require_id(post_uuid, "post_uuid")
        return await self._call(lambda client: client.approve_post(post_uuid))

    async def get_post(self, post_uuid: str) -> str:
        """Get details of a specific post."""
        post_uuid = _require_id(post_uuid, "post_uuid")
        return await self._call(lambda client: client.get_post(post_uuid))

    async def list_posts(
        self,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        status: Optional[str] = None,
    ) -> str:
        """List posts in the workspace, optionally filtered by status."""
        params = {"page": page, "limit": limit, "status": status}
        return await self._call(lambda client: client.list_posts(params))

    async def delete_post(self, post_uuid: str) -> str:
        """Delete a post."""
        post_uuid = _require_id(post_uuid, "post_uuid")
        return await self._call(lambda client: client.delete_post(post_uuid))

    async def delete_multiple_posts(self, post_uuids: List[str]) -> str:
        """Delete several posts at once."""
        if not isinstance(post_uuids, list):
            raise ToolError("Invalid params: post_uuids must be an array")
        uuids = [_require_id(uuid, "post_uuids") for uuid in post_uuids]
        return await self._call(lambda client: client.delete_multiple_posts(uuids))

    async def schedule_post(self, post_uuid: str) -> str:
        """Schedule a post for publishing."""
        post_uuid = _require_id(post_uuid, "post_uuid")
        return await self._call(lambda client: client.schedule_post(post_uuid))

    async def add_post_to_queue(self, post_uuid: str) -> str:
        """Add a post to the publishing queue."""
        post_uuid = _require_id(post_uuid, "post_uuid")
        return await self._call(lambda client: client.add_post_to_queue(post_uuid))

    # Media

    async def list_media(
        self,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        media_type: Optional[str] = None,
    ) -> str:
        """List media files in the workspace, optionally filtered by type (image, video)."""
        params = {"page": page, "limit": limit, "type": media_type}
        return await self._call(lambda client: client.list_media(params))

    async def get_media(self, media_uuid: str) -> str:
        """Get details of a specific media file."""
        media_uuid = _require_id(media_uuid, "media_uuid")
        return await self._call(lambda client: client.get_media(media_uuid))

    async def update_media(
        self,
        media_uuid: str,
        name: Optional[str] = None,
        alt_text: Optional[str] = None,
    ) -> str:
        """Update media file metadata (name, alt text)."""
        media_uuid = _require_id(media_uuid, "media_uuid")
        data = MediaUpdateRequest(name=name, alt_text=alt_text)
        return await self._call(lambda client: client.update_media(media_uuid, data))

    async def delete_media(self, media_uuid: str) -> str:
        """Delete a media file."""
        media_uuid = _require_id(media_uuid, "media_uuid")
        return await self._call(lambda client: client.delete_media(media_uuid))

    # Tags

    async def list_tags(self) -> str:
        """List all tags in the workspace."""
        return await self._call(lambda client: client.list_tags())

    async def get_tag(self, tag_uuid: str) -> str:
        """Get details of a specific tag."""
        tag_uuid = _require_id(tag_uuid, "tag_uuid")
        return await self._call(lambda client: client.get_tag(tag_uuid))

    async def create_tag(self, name: str, hex_color: Optional[str] = None) -> str:
        """Create a new tag."""
        try:
            tag = TagRequest(name=name, hex_color=hex_color)
        except ValidationError as exc:
            raise ToolError(_validation_message(exc)) from exc
        return await self._call(lambda client: client.create_tag(tag))

    async def update_tag(
        self,
        tag_uuid: str,
        name: Optional[str] = None,
        hex_color: Optional[str] = None,
    ) -> str:
        """Update an existing tag."""
        tag_uuid = _require_id(tag_uuid, "tag_uuid")
        try:
            tag = TagUpdateRequest(name=name, hex_color=hex_color)
        except ValidationError as exc:
            raise ToolError(_validation_message(exc)) from exc
        return await self._call(lambda client: client.update_tag(tag_uuid, tag))

    async def delete_tag(self, tag_uuid: str) -> str:
        """Delete a tag."""
        tag_uuid = _require_id(tag_uuid, "tag_uuid")
        return await self._call(lambda client: client.delete_tag(tag_uuid))


def create_server(tools: Optional[MixpostTools] = None) -> FastMCP:
    """
    Build the FastMCP server with every Mixpost tool registered.

    Args:
        tools: Handlers to register; built lazily from the environment if omitted
    """
    tools = tools or MixpostTools()

    @asynccontextmanager
    async def lifespan(server: FastMCP):
        try:
            yield {}
        finally:
            await tools.aclose()

    mcp = FastMCP(SERVER_NAME, lifespan=lifespan)
    for name, handler in tools.handlers().items():
        mcp.tool(name=name)(handler)
    return mcp


def main() -> None:
    """Console entry point: run the server over stdio."""
    setup_logging(
        level=os.environ.get("MIXPOST_LOG_LEVEL", "INFO"),
        json_output=os.environ.get("MIXPOST_LOG_JSON", "").lower() in ("1", "true", "yes"),
    )
    server = create_server()
    logger.info("mcp_server_starting", server=SERVER_NAME, transport="stdio")
    server.run()


if __name__ == "__main__":
    main()
