"""Remote order service: HTTP client and response normalization."""

from minidex.service.client import OrderServiceClient

__all__ = ["OrderServiceClient"]
