"""Composio REST client.

Thin aiohttp wrapper around the Composio v3 API covering what tool execution
and connected-account syncing need: executing a tool by slug and reading a
connected account's remote status.
"""

import asyncio
import json
import os
import time
from typing import Any, Literal, Optional

import aiohttp
from pydantic import BaseModel

from ..errors import ComposioAPIError
from ..utils import get_logger

logger = get_logger(__name__)

DEFAULT_BASE_URL = "https://backend.composio.dev/api/v3"

RemoteAccountStatus = Literal["INITIALIZING", "INITIATED", "ACTIVE", "FAILED", "EXPIRED", "INACTIVE"]


class ComposioErrorDetail(BaseModel):
    """Error block of a Composio error envelope."""

    message: str = ""
    error_code: Optional[int] = None
    suggested_fix: Optional[str] = None
    errors: Optional[list[str]] = None

    def describe(self) -> str:
        """Format the error the way it is reported to callers.

        Returns:
            "(code: N): message: suggested fix: errors"
        """
        errors = ", ".join(self.errors) if self.errors else None
        return f"(code: {self.error_code}): {self.message}: {self.suggested_fix}: {errors}"


class ToolkitRef(BaseModel):
    slug: str


class RemoteConnectedAccount(BaseModel):
    """Connected account as reported by Composio.

    Attributes:
        id: Connected account ID
        toolkit: Owning toolkit
        status: Remote connection status
    """

    id: str
    toolkit: ToolkitRef
    status: RemoteAccountStatus


class ToolExecutionResponse(BaseModel):
    """Response of a tool execution."""

    data: Any = None
    successful: bool = True
    error: Optional[str] = None
    log_id: Optional[str] = None


class ComposioClient:
    """Client for the Composio v3 REST API.

    Every request carries the ``x-api-key`` header. Responses holding an
    ``error`` member are raised as ``ComposioAPIError``.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: int = 300,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: API key (defaults to the COMPOSIO_API_KEY environment variable)
            base_url: API base URL
            timeout: Request timeout in seconds
        """
        self.api_key = api_key if api_key is not None else os.environ.get("COMPOSIO_API_KEY", "")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def execute_tool(
        self,
        tool_slug: str,
        user_id: str,
        arguments: dict[str, Any],
        connected_account_id: Optional[str] = None,
    ) -> Any:
        """Execute a toolkit tool.

        Args:
            tool_slug: Tool slug
            user_id: User the call is made on behalf of
            arguments: Tool arguments
            connected_account_id: Connected account credential (None for no-auth tools)

        Returns:
            The ``data`` member of the execution response

        Raises:
            ComposioAPIError: If the API or the tool reports a failure
        """
        body: dict[str, Any] = {"user_id": user_id, "arguments": arguments}
        if connected_account_id:
            body["connected_account_id"] = connected_account_id

        data = await self._call("POST", f"/tools/execute/{tool_slug}", body)
        response = ToolExecutionResponse.model_validate(data)
        if not response.successful:
            raise ComposioAPIError(response.error or f"tool {tool_slug} failed")
        return response.data

    async def get_connected_account(self, connected_account_id: str) -> RemoteConnectedAccount:
        """Fetch a connected account.

        Args:
            connected_account_id: Connected account ID

        Returns:
            Remote account record
        """
        data = await self._call("GET", f"/connected_accounts/{connected_account_id}")
        return RemoteConnectedAccount.model_validate(data)

    async def _call(self, method: str, path: str, body: Optional[dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}{path}"
        headers = {"x-api-key": self.api_key}
        if method == "POST":
            headers["Content-Type"] = "application/json"

        logger.debug(f"[{method}] {url}")
        started = time.monotonic()

        try:
            async with aiohttp.ClientSession() as session:
                async with session.request(
                    method,
                    url,
                    data=json.dumps(body) if body is not None else None,
                    headers=headers,
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as response:
                    text = await response.text()
        except asyncio.TimeoutError as e:
            raise ComposioAPIError(f"[{method}] {url} timed out after {self.timeout} seconds") from e
        except aiohttp.ClientError as e:
            raise ComposioAPIError(f"[{method}] {url} failed: {e}") from e

        logger.debug(f"Took: {(time.monotonic() - started) * 1000:.0f}ms")

        try:
            data = json.loads(text) if text else {}
        except json.JSONDecodeError as e:
            raise ComposioAPIError(f"Invalid JSON from {url}: {text[:200]}") from e

        if isinstance(data, dict) and isinstance(data.get("error"), dict):
            detail = ComposioErrorDetail.model_validate(data["error"])
            raise ComposioAPIError(detail.describe(), error_code=detail.error_code)
        return data
