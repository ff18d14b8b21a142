"""HTTP client for the Condenser link shortener.

Every thread gets its own httpx.Client, built from one shared configuration
(identification header, JSON content negotiation, 10 second timeout). Calls
return the raw status and body; callers branch on the status and decode only
on success. Nothing here retries.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Type, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from .. import __version__
from ..errors import InvalidPathError, ProtocolError, TransportError
from ..log import get_logger
from ..resources import ThreadLocalFactory

logger = get_logger("condenser_client")

USER_AGENT = f"CondenserBot/{__version__} (Slack bot)"
API_KEY_HEADER = "X-API-Key"
REQUEST_TIMEOUT = 10.0

SHORTEN_PATH = "/api/shorten"
META_PATH = "/api/meta/"
DELETE_PATH = "/api/delete"

# Characters that would change the meaning of a path segment.
_RESERVED_IN_SEGMENT = set("/?#\\%")

M = TypeVar("M", bound=BaseModel)


@dataclass(frozen=True)
class RawResponse:
    status_code: int
    body: bytes

    def json(self, model: Type[M]) -> M:
        try:
            return model.model_validate_json(self.body)
        except ValidationError as e:
            raise ProtocolError(
                f"Response does not match {model.__name__}: {e.error_count()} error(s)",
                status_code=self.status_code,
                body=self.body,
            ) from e


def build_http_client(transport: Optional[httpx.BaseTransport] = None) -> httpx.Client:
    return httpx.Client(
        headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
        timeout=REQUEST_TIMEOUT,
        transport=transport,
    )


def quote_segment(code: str) -> str:
    """
    Quotes a short code for use as one URL path segment.
    Raises InvalidPathError if the code cannot be represented as one.
    """
    if not code or code in (".", ".."):
        raise InvalidPathError(code)
    for char in code:
        if char in _RESERVED_IN_SEGMENT or char.isspace() or not char.isprintable():
            raise InvalidPathError(code)
    return quote(code, safe="")


class CondenserClient:
    def __init__(self, base_url: str, transport: Optional[httpx.BaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self._clients: ThreadLocalFactory[httpx.Client] = ThreadLocalFactory(
            lambda: build_http_client(transport)
        )

    def resolve(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def code_path(self, prefix: str, code: str) -> str:
        return prefix + quote_segment(code)

    def short_url(self, code: str) -> str:
        return self.resolve(self.code_path("/", code))

    def post(self, path: str, api_key: str, body: Dict[str, Any]) -> RawResponse:
        return self._send("POST", path, headers={API_KEY_HEADER: api_key}, json=body)

    def get(self, path: str) -> RawResponse:
        return self._send("GET", path)

    def _send(
        self,
        method: str,
        path: str,
        headers: Optional[Dict[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> RawResponse:
        client = self._clients.get()
        url = self.resolve(path)
        request = client.build_request(method, url, headers=headers, json=json)

        try:
            response = client.send(request, stream=True)
        except httpx.RequestError as e:
            raise TransportError(f"{method} {url} failed: {e!r}") from e

        try:
            body = response.read()
        except httpx.HTTPError as e:
            raise TransportError(
                f"{method} {url} returned {response.status_code} but the body could not be read: {e!r}",
                status_code=response.status_code,
            ) from e
        finally:
            response.close()

        logger.debug(f"{method} {url} -> {response.status_code}")
        return RawResponse(status_code=response.status_code, body=body)
