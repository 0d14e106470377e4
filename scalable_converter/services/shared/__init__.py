"""Shared utilities for external API clients."""

from scalable_converter.services.shared.http_client import HTTPClient, HTTPClientError

__all__ = ["HTTPClient", "HTTPClientError"]
