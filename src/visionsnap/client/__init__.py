"""Client side of the analyze request.

Public API:
    AnalyzeClient -- Streaming HTTP client for the relay
    AnalyzeError -- Request failure
    CancellationToken, RequestSlot -- Cancel-and-replace bookkeeping
"""

from visionsnap.client.analyzer import AnalyzeClient, AnalyzeError
from visionsnap.client.cancellation import CancellationToken, RequestSlot

__all__ = ["AnalyzeClient", "AnalyzeError", "CancellationToken", "RequestSlot"]
