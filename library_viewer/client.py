"""HTTP client for the remote game-library service."""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from .models import DashboardSummary, GameRecord
from .normalizer import InvalidInputError, normalize_dashboard, normalize_many
from .stats import SORT_KEYS

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8080/api/games"
DEFAULT_TIMEOUT = 30.0
CONNECTION_TEST_TIMEOUT = 5.0
INFO_TIMEOUT = 10.0

ERROR_MESSAGES: Dict[int, str] = {
    400: "Invalid request. Check the Steam ID you entered.",
    404: "Steam ID not found or profile does not exist.",
    500: "Internal server error. Please try again later.",
    503: "Service temporarily unavailable.",
}


class LibraryApiError(RuntimeError):
    """Raised when the library service cannot answer a request."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        timeout: bool = False,
        network: bool = False,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.timeout = timeout
        self.network = network or timeout


class LibraryClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    @classmethod
    def from_env(cls) -> "LibraryClient":
        base_url = os.getenv("LIBRARY_API_BASE_URL") or DEFAULT_BASE_URL
        timeout = DEFAULT_TIMEOUT
        raw_timeout = os.getenv("LIBRARY_API_TIMEOUT")
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError:
                logger.warning(
                    "Ignoring invalid LIBRARY_API_TIMEOUT=%r; using %ss",
                    raw_timeout,
                    DEFAULT_TIMEOUT,
                )
        logger.info("Library service at %s (timeout %ss)", base_url, timeout)
        return cls(base_url, timeout)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "LibraryClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        message = ERROR_MESSAGES.get(response.status_code)
        if message:
            return message
        return f"HTTP {response.status_code}: {response.text or 'unknown error'}"

    def _get(
        self,
        path: str,
        params: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        try:
            response = self._http.get(
                path,
                params=params,
                timeout=timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT,
            )
        except httpx.TimeoutException as exc:
            raise LibraryApiError(
                f"Request to {path} timed out", timeout=True
            ) from exc
        except httpx.HTTPError as exc:
            raise LibraryApiError(f"Network error: {exc}", network=True) from exc

        if response.is_error:
            logger.warning("GET %s answered %s", path, response.status_code)
            raise LibraryApiError(
                self._error_message(response), status_code=response.status_code
            )
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise LibraryApiError(
                "Invalid API response: body is not JSON",
                status_code=response.status_code,
            ) from exc

    def test_connection(self) -> bool:
        try:
            response = self._get("/test", timeout=CONNECTION_TEST_TIMEOUT)
        except LibraryApiError as exc:
            logger.warning("Library service is unreachable: %s", exc)
            return False
        logger.debug("Library service says: %s", response.text)
        return True

    def get_api_info(self) -> Dict[str, Any]:
        payload = self._json(self._get("/info", timeout=INFO_TIMEOUT))
        if not isinstance(payload, dict):
            raise LibraryApiError("Invalid API response: expected an info object")
        return payload

    def get_user_games(self, steam_id: str, sort_by: str = "playtime") -> list[GameRecord]:
        if not steam_id or not isinstance(steam_id, str):
            raise ValueError("Steam ID is required and must be a string")
        if sort_by not in SORT_KEYS:
            raise ValueError('sort_by must be "name" or "playtime"')

        response = self._get(f"/{quote(steam_id, safe='')}", params={"sortBy": sort_by})
        payload = self._json(response)
        if not isinstance(payload, list):
            raise LibraryApiError("Invalid API response: expected a list of games")
        logger.debug("Fetched %d games for %s", len(payload), steam_id)
        try:
            return normalize_many(payload)
        except InvalidInputError as exc:
            raise LibraryApiError(f"Invalid API response: {exc}") from exc

    def get_user_dashboard(self, steam_id: str) -> DashboardSummary:
        if not steam_id or not isinstance(steam_id, str):
            raise ValueError("Steam ID is required and must be a string")

        response = self._get(f"/{quote(steam_id, safe='')}/dashboard")
        payload = self._json(response)
        if not isinstance(payload, dict):
            raise LibraryApiError("Invalid API response: expected a dashboard object")
        try:
            return normalize_dashboard(payload)
        except InvalidInputError as exc:
            raise LibraryApiError(f"Invalid API response: {exc}") from exc
