import requests
from dataclasses import dataclass
from typing import Dict, Iterator, Optional

from v20.config.logging import logger
from v20.core.exceptions import TransportError


@dataclass(frozen=True)
class RawResponse:
    status: int
    reason: str
    content_type: str
    body: str


class RawStream:
    """
    An open streaming response.
    Use as a context manager so the connection is released when done.
    """

    def __init__(self, response: requests.Response, chunk_size: int):
        self._response = response
        self.chunk_size = chunk_size
        self.status = response.status_code
        self.reason = response.reason or ""
        self.content_type = response.headers.get("Content-Type", "")

    def iter_chunks(self) -> Iterator[bytes]:
        try:
            for chunk in self._response.iter_content(chunk_size=self.chunk_size):
                if chunk:
                    yield chunk
        except requests.exceptions.RequestException as e:
            logger.error(f"Stream connection error: {e}")
            raise TransportError(f"Stream interrupted: {e}") from e

    def read(self) -> str:
        return self._response.text

    def close(self) -> None:
        self._response.close()

    def __enter__(self) -> "RawStream":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class RequestsTransport:
    """
    Default HTTP collaborator built on requests.
    Only moves bytes; status codes are never raised here.
    """

    def __init__(self, timeout: float = 10, stream_timeout: float = 30,
                 chunk_size: int = 512, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.stream_timeout = stream_timeout
        self.chunk_size = chunk_size
        self.session = session or requests.Session()

    def request(self, method: str, url: str, headers: Dict[str, str],
                body: Optional[str] = None) -> RawResponse:
        try:
            response = self.session.request(method, url, headers=headers, data=body, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"Connection error on {method} {url}: {e}")
            raise TransportError(f"Failed to reach {url}: {e}") from e

        return RawResponse(
            status=response.status_code,
            reason=response.reason or "",
            content_type=response.headers.get("Content-Type", ""),
            body=response.text,
        )

    def stream(self, method: str, url: str, headers: Dict[str, str],
               body: Optional[str] = None) -> RawStream:
        try:
            response = self.session.request(
                method, url, headers=headers, data=body,
                timeout=self.stream_timeout, stream=True
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Connection error opening stream {url}: {e}")
            raise TransportError(f"Failed to open stream {url}: {e}") from e

        return RawStream(response, self.chunk_size)
