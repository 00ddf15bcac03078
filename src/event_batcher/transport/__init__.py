"""
Transports for delivering batches.

Provides the abstract transport interface and the HTTP implementation.
"""

from event_batcher.transport.interface import Transport, TransportError
from event_batcher.transport.http import HttpTransport

__all__ = [
    "Transport",
    "TransportError",
    "HttpTransport",
]
