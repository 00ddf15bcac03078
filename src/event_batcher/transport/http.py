"""
HTTP transport for the batch ingestion endpoint.

Posts batch request bodies as JSON, authorized with the workspace write key.
"""

from typing import Optional

import httpx
import structlog

from event_batcher.config import BATCH_ENDPOINT, SdkConfig, get_config
from event_batcher.events.types import BatchAppData
from event_batcher.transport.interface import Transport, TransportError

logger = structlog.get_logger(__name__)


class HttpTransport(Transport):
    """
    HTTP batch transport.

    Implements the Transport interface with an ``httpx.AsyncClient``.
    """

    def __init__(
        self,
        config: Optional[SdkConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the HTTP transport.

        Args:
            config: SDK configuration. Uses global config if not provided.
            client: Preconfigured client (created on connect if not provided).
                The auth headers are added to it.

        Raises:
            ValueError: If no write key is configured
        """
        self.config = config or get_config()
        if not self.config.write_key:
            raise ValueError("Write key not configured")

        self.base_url = self.config.host.rstrip("/")
        self.write_key = self.config.write_key
        self._client = client
        self._owns_client = client is None

        if client is not None:
            client.headers.update(self.headers)

    @property
    def headers(self) -> dict:
        """Get request headers with the write key."""
        return {
            "authorization": self.write_key,
            "Content-Type": "application/json",
        }

    async def connect(self) -> None:
        """Create the HTTP client."""
        if self._client is not None:
            return

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=self.headers,
            timeout=self.config.request_timeout_seconds,
        )
        self._owns_client = True
        logger.info("http_transport_connected", base_url=self.base_url)

    async def disconnect(self) -> None:
        """Close the HTTP client if this transport created it."""
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None
            logger.info("http_transport_disconnected")

    async def issue_request(self, data: BatchAppData) -> None:
        """POST a batch to the ingestion endpoint."""
        if not self._client:
            await self.connect()

        try:
            response = await self._client.post(BATCH_ENDPOINT, json=data.to_dict())
        except httpx.RequestError as e:
            logger.error("batch_request_error", size=data.size, error=str(e))
            raise TransportError(f"Batch request failed: {e}")

        if not response.is_success:
            logger.error(
                "batch_request_failed",
                size=data.size,
                status=response.status_code,
                error=response.text,
            )
            raise TransportError(
                f"Batch endpoint returned {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        logger.debug("batch_request_sent", size=data.size, status=response.status_code)
