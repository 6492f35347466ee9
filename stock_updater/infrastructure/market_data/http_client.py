"""
Infrastructure helper: thin JSON-over-HTTP client on top of httpx.
All transport failures, error statuses and non-object bodies surface as
FetchFailure so provider adapters only deal with payload shape.
"""

import logging
from typing import Any, Optional

import httpx

from stock_updater.domain.errors import FetchFailure

logger = logging.getLogger(__name__)


class JsonHttpClient:
    """GETs JSON objects from one provider base URL."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._client = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)

    def get_json(self, path: str, params: Optional[dict[str, Any]] = None) -> dict:
        """GET *path* with URL-encoded *params* and return the decoded JSON object.

        Raises:
            FetchFailure: on timeouts, connection errors, 4xx/5xx responses,
                          undecodable bodies, or a JSON value that is not an object.
        """
        try:
            response = self._client.get(path, params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise FetchFailure(
                f"GET {path} returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise FetchFailure(f"GET {path} failed: {exc}") from exc
        except ValueError as exc:
            raise FetchFailure(f"GET {path} returned a body that is not JSON") from exc

        if not isinstance(payload, dict):
            raise FetchFailure(
                f"GET {path} returned {type(payload).__name__}, expected a JSON object"
            )
        logger.debug("GET %s -> %d top-level keys", path, len(payload))
        return payload

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "JsonHttpClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
