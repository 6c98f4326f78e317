"""HTTP client for the anesthesia record service."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Final
from urllib.parse import quote

import httpx
import pydantic

from anesthesia_reports.adapters.http_resilience import ResilienceConfig, ResilientClient
from anesthesia_reports.domain.errors import FatalSessionError, NetworkError
from anesthesia_reports.domain.ports import ConflictError, GatewayError, NotFoundError

from .schema import ErrorResponse

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from anesthesia_reports.config import ApiConfig

    from .translator import JsonBody

log = getLogger(__name__)

FATAL_SESSION_CODES: Final[frozenset[str]] = frozenset(
    {
        "INVALID_TOKEN",
        "TOKEN_EXPIRED",
        "UNAUTHORIZED",
        "USER_INACTIVE",
        "USER_DELETED",
    }
)

_USER_MESSAGES: Final[dict[str, str]] = {
    "INVALID_TOKEN": "Session expired",
    "TOKEN_EXPIRED": "Session expired",
    "UNAUTHORIZED": "Session expired",
    "USER_INACTIVE": "User is inactive",
    "USER_DELETED": "User was deleted",
    "INVALID_PAYLOAD": "Invalid data",
    "PATIENT_NOT_FOUND": "Patient not found",
    "SURGERY_NOT_FOUND": "Surgery not found",
    "PATIENT_ACCESS_REQUIRED": "No access to this patient",
    "SURGERY_ACCESS_REQUIRED": "No access to this surgery",
    "ALREADY_SHARED": "Record is already shared with you",
}


def path_segment(value: str) -> str:
    return quote(value, safe="")


def _error_from_response(response: httpx.Response) -> Exception:
    code: str | None = None
    server_message = ""
    try:
        envelope = ErrorResponse.model_validate(response.json())
    except (ValueError, pydantic.ValidationError):
        envelope = None
    if envelope is not None:
        code = envelope.error.code
        server_message = envelope.error.message

    status = response.status_code
    message = (
        _USER_MESSAGES.get(code or "")
        or server_message
        or f"Request failed with status {status}"
    )

    if status == httpx.codes.UNAUTHORIZED or code in FATAL_SESSION_CODES:
        return FatalSessionError(message, code=code)
    if status == httpx.codes.NOT_FOUND or (code is not None and code.endswith("_NOT_FOUND")):
        return NotFoundError(message, code=code, status=status)
    if status == httpx.codes.CONFLICT:
        return ConflictError(message, code=code, status=status)
    return GatewayError(message, code=code, status=status)


class ApiClient:
    """Low-level JSON client shared by the patient and surgery gateways.

    Maps error envelopes onto the domain taxonomy: fatal session codes (and any
    401) raise :class:`FatalSessionError`, transport failures raise
    :class:`NetworkError`, everything else raises a :class:`GatewayError`.
    """

    def __init__(
        self,
        *,
        config: ApiConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient
        self._client: ResilientClient | None = None

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            client, self._client = self._client, None
            await client.aclose()

    def _http(self) -> ResilientClient:
        if self._client is None:
            self._client = self._client_factory(self._resilience)
        return self._client

    async def request(
        self,
        method: str,
        path: str,
        *,
        body: JsonBody | None = None,
    ) -> JsonBody | None:
        """Send one request; return the decoded JSON object, or ``None`` for an empty body."""

        log.debug(f"{method} {path}")
        try:
            response = await self._http().request(method, path, json=body)
        except httpx.TransportError as exc:
            log.warning(f"{method} {path} failed: {exc!r}")
            raise NetworkError() from exc

        if response.is_error:
            error = _error_from_response(response)
            log.info(f"{method} {path} -> {response.status_code}: {error}")
            raise error

        if response.status_code == httpx.codes.NO_CONTENT or not response.content.strip():
            return None
        try:
            payload = response.json()
        except ValueError as exc:
            raise GatewayError(
                "Unexpected response payload", status=response.status_code
            ) from exc
        if not isinstance(payload, dict):
            raise GatewayError("Unexpected response payload", status=response.status_code)
        return payload

    async def request_object(
        self,
        method: str,
        path: str,
        *,
        body: JsonBody | None = None,
    ) -> JsonBody:
        payload = await self.request(method, path, body=body)
        if payload is None:
            raise GatewayError("Empty response payload")
        return payload
