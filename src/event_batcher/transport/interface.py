"""
Abstract interface for batch transports.

Defines the contract the SDK uses to deliver a batch request body.
"""

from abc import ABC, abstractmethod
from typing import Optional

from event_batcher.events.types import BatchAppData


class Transport(ABC):
    """
    Abstract interface for delivering batches.

    A transport is handed one ``BatchAppData`` per queue chunk. Raising from
    ``issue_request`` marks the attempt as failed so the queue retries it.
    """

    async def connect(self) -> None:
        """Open any underlying connection. Optional for stateless transports."""

    async def disconnect(self) -> None:
        """Release any underlying connection."""

    @abstractmethod
    async def issue_request(self, data: BatchAppData) -> None:
        """
        Deliver a batch.

        Args:
            data: Batch request body

        Raises:
            TransportError: If the batch could not be delivered
        """
        pass


class TransportError(Exception):
    """Raised when a batch could not be delivered."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
