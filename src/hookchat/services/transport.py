"""Synchronous httpx client for the chat webhook."""

from __future__ import annotations

import logging
from typing import Protocol
from urllib.parse import urlsplit

import httpx

from .. import __version__
from ..config import WebhookConfig, validate_url
from ..models import TurnRequest

logger = logging.getLogger(__name__)

_MAX_ERROR_BODY = 200


class TransportError(Exception):
    """Raised when the webhook could not produce a reply.

    Network failures, non-success status codes and undecodable bodies all
    collapse into this one error; ``str(err)`` is safe to show the user.
    """


class Transport(Protocol):
    def send_turn(self, request: TurnRequest) -> str: ...


def redact_url(url: str) -> str:
    """Strip query string and credentials so tokens never reach the logs."""
    parts = urlsplit(url)
    # netloc minus any userinfo; .port would raise on an out-of-range value
    host = parts.netloc.rpartition("@")[2]
    return f"{parts.scheme}://{host}{parts.path}"


class WebhookTransport:
    def __init__(
        self,
        url: str,
        *,
        timeout: float = 120.0,
        verify_ssl: bool = True,
        headers: dict[str, str] | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.url = url
        request_headers = {"User-Agent": f"hookchat/{__version__}"}
        request_headers.update(headers or {})
        # SECURITY-REVIEW: verify=False only when verify_ssl: false is set explicitly
        self._client = client or httpx.Client(
            verify=verify_ssl,
            timeout=httpx.Timeout(timeout, connect=min(timeout, 10.0)),
            headers=request_headers,
        )
        self._owns_client = client is None

    @classmethod
    def from_config(cls, config: WebhookConfig) -> "WebhookTransport":
        return cls(
            config.url,
            timeout=config.timeout,
            verify_ssl=config.verify_ssl,
            headers=config.headers,
        )

    def send_turn(self, request: TurnRequest) -> str:
        """POST the turn payload and return the raw response body."""
        payload = request.to_payload()
        logger.debug(
            "POST %s (context=%d entries, model=%s)",
            redact_url(self.url),
            len(payload["context"]),
            request.model or "-",
        )
        try:
            response = self._client.post(validate_url(self.url), json=payload)
        except httpx.TimeoutException as e:
            logger.warning("Webhook request timed out: %s", e)
            raise TransportError(f"Request timed out: {e}") from e
        except httpx.HTTPError as e:
            logger.warning("Webhook request failed: %s", e)
            raise TransportError(f"Request failed: {e}") from e
        except (httpx.InvalidURL, ValueError) as e:
            # Malformed URLs are rejected before any request is sent.
            logger.warning("Webhook url rejected: %s", e)
            raise TransportError(f"Invalid webhook url: {e}") from e

        if response.is_error:
            body = response.text.strip()
            if len(body) > _MAX_ERROR_BODY:
                body = body[:_MAX_ERROR_BODY] + "..."
            logger.warning("Webhook returned HTTP %d", response.status_code)
            detail = f": {body}" if body else ""
            raise TransportError(f"HTTP {response.status_code} {response.reason_phrase}{detail}")

        try:
            text = response.text
        except (UnicodeDecodeError, LookupError) as e:
            raise TransportError(f"Could not decode response body: {e}") from e
        logger.debug("Webhook replied with %d chars", len(text))
        return text

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "WebhookTransport":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
