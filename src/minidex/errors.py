"""Error taxonomy for the sync engine.

Everything below is caught at the Poller / MutationController boundary and
turned into the single message held in the snapshot store's error slot:

  ValidationError        local pre-flight rejection, never reaches the network
  TransportError         network failure or non-2xx response
  ServiceRejection       non-2xx carrying a service-supplied message
  DataShapeError         response does not parse into Order / Trade
"""

from __future__ import annotations


class MiniDexError(Exception):
    """Base error. ``message`` is the user-visible text."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(MiniDexError):
    """Order input rejected before (or by) the service."""


class TransportError(MiniDexError):
    """Network failure or non-success HTTP status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class ServiceRejection(TransportError):
    """Non-2xx response; message comes from the body when the service sent one."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message, status_code=status_code)


class OrderRejectedError(ServiceRejection, ValidationError):
    """Service refused the create-order payload (4xx)."""


class NotFoundOrConflictError(ServiceRejection):
    """Service refused to cancel the order (4xx): unknown id or already terminal."""


class DataShapeError(MiniDexError):
    """Response body could not be read as the expected entities."""
