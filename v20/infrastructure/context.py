import json
from typing import Any, Callable, Dict, Optional

from v20.config.logging import logger
from v20.config.settings import settings
from v20.core.envelope import Endpoint, Envelope, Response
from v20.core.exceptions import ConfigurationError, ResponseDecodeError
from v20.core.stream import StreamParser
from v20.entities import account, instrument, login, order, position, pricing, trade, transaction, user
from v20.infrastructure.transport import RequestsTransport

VERSION = "1.0.0"


class Context:
    """
    Connection to one v20 REST server.

    Holds the host, headers and transport shared by every call; the entity
    families (`ctx.account`, `ctx.order`, ...) build their requests through it.
    """

    def __init__(self, hostname: str, port: int = 443, ssl: bool = True, application: str = "",
                 token: Optional[str] = None, stream_hostname: Optional[str] = None,
                 transport=None, stream_strict: bool = False,
                 response_strict: bool = False):
        self.hostname = hostname
        self.stream_hostname = stream_hostname or hostname
        self.port = port
        self.ssl = ssl
        self.application = application
        self.stream_strict = stream_strict
        self.response_strict = response_strict
        self.transport = transport or RequestsTransport()

        self.headers = {
            "Content-Type": "application/json",
            "OANDA-Agent": f"v20-python/{VERSION} ({application})",
        }
        self.token = None
        if token:
            self.set_token(token)

        self.account = account.EntitySpec(self)
        self.instrument = instrument.EntitySpec(self)
        self.login = login.EntitySpec(self)
        self.order = order.EntitySpec(self)
        self.position = position.EntitySpec(self)
        self.pricing = pricing.EntitySpec(self)
        self.trade = trade.EntitySpec(self)
        self.transaction = transaction.EntitySpec(self)
        self.user = user.EntitySpec(self)

    @classmethod
    def from_settings(cls, config=None, transport=None) -> "Context":
        config = config if config is not None else settings
        if config is None:
            raise ConfigurationError("Settings could not be loaded; check the V20_* environment variables")

        transport = transport or RequestsTransport(
            timeout=config.V20_REQUEST_TIMEOUT,
            stream_timeout=config.V20_STREAM_TIMEOUT,
            chunk_size=config.V20_STREAM_CHUNK_SIZE,
        )
        return cls(
            config.V20_HOSTNAME,
            port=config.V20_PORT,
            ssl=config.V20_SSL,
            application=config.V20_APPLICATION,
            token=config.V20_TOKEN,
            stream_hostname=config.V20_STREAM_HOSTNAME,
            transport=transport,
            stream_strict=config.V20_STREAM_STRICT,
            response_strict=config.V20_RESPONSE_STRICT,
        )

    def set_token(self, token: str) -> None:
        self.token = token
        self.headers["Authorization"] = f"Bearer {token}"

    def _url(self, host: str, path: str) -> str:
        scheme = "https" if self.ssl else "http"
        return f"{scheme}://{host}:{self.port}{path}"

    def request(self, endpoint: Endpoint, path_params: Optional[Dict[str, Any]] = None,
                query: Optional[Dict[str, Any]] = None, body: Optional[Dict[str, Any]] = None) -> Response:
        path = endpoint.build_path(path_params, query)

        payload = None
        if endpoint.body_params:
            payload = json.dumps(endpoint.build_body(body))
        elif body:
            raise TypeError(f"{endpoint.method} {endpoint.path} takes no body parameters")

        logger.debug(f"{endpoint.method} {path}")
        raw = self.transport.request(endpoint.method, self._url(self.hostname, path), dict(self.headers), payload)

        response = Response(endpoint.method, path, raw.status, raw.reason, raw.content_type, raw.body)
        response.body = self._map_body(endpoint, response)
        return response

    def stream(self, endpoint: Endpoint, on_record: Callable[[Any], None],
               path_params: Optional[Dict[str, Any]] = None,
               query: Optional[Dict[str, Any]] = None) -> Response:
        """
        Open a streaming endpoint and deliver each record to `on_record`
        until the server closes the connection. Blocks the caller.
        """
        parser = StreamParser(
            endpoint.record_decoder(),
            on_record,
            heartbeat=endpoint.heartbeat_decoder(),
            strict=self.stream_strict,
        )
        path = endpoint.build_path(path_params, query)

        headers = dict(self.headers)
        headers["Connection"] = "Keep-Alive"

        logger.debug(f"{endpoint.method} {path}")
        with self.transport.stream(endpoint.method, self._url(self.stream_hostname, path), headers) as raw:
            response = Response(endpoint.method, path, raw.status, raw.reason, raw.content_type, None)

            if not response.is_success():
                response.raw_body = raw.read()
                response.body = self._map_body(endpoint, response)
                return response

            logger.info(f"Stream opened: {path}")
            for chunk in raw.iter_chunks():
                parser.feed(chunk)
            parser.close()

        logger.info(f"Stream closed: {path} ({parser.delivered} records, {parser.skipped} skipped)")
        return response

    def _map_body(self, endpoint: Endpoint, response: Response) -> Optional[Envelope]:
        if not response.content_type.lower().startswith("application/json"):
            logger.debug(f"Non-JSON response ({response.content_type or 'no content type'}) from {response.path}")
            return None

        if not response.raw_body or not response.raw_body.strip():
            msg = {}
        else:
            try:
                msg = json.loads(response.raw_body)
            except ValueError as e:
                if self.response_strict:
                    raise ResponseDecodeError(f"Invalid JSON from {response.method} {response.path}: {e}") from e
                logger.warning(f"Invalid JSON from {response.method} {response.path} ({response.status}): {e}")
                return None

        return endpoint.map_response(response.status, msg)
