import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable, Dict, Iterator, Optional, Tuple

from v20.core.models import decode_array, decode_object, resolve_decoder, to_jsonable

# Field decoders used in response tables
RAW = None


def one(type_name: str) -> Callable[[Any], Any]:
    return partial(decode_object, type_name)


def many(type_name: str) -> Callable[[Any], Any]:
    return partial(decode_array, type_name)


ERROR_SHAPE = {"errorCode": RAW, "errorMessage": RAW}

_PATH_PARAM = re.compile(r"{([^}]+)}")


class Envelope(Mapping):
    """
    Typed response body.
    Holds only the keys the endpoint's table extracted for the status code;
    readable both as a mapping and through attributes.
    """

    def __init__(self, fields: Optional[Dict[str, Any]] = None):
        self._fields = dict(fields or {})

    def __getitem__(self, key: str) -> Any:
        return self._fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._fields[name]
        except KeyError:
            raise AttributeError(f"Response body has no field '{name}'") from None

    def to_dict(self) -> Dict[str, Any]:
        return to_jsonable(self._fields)

    def __repr__(self) -> str:
        return f"Envelope({self._fields!r})"


class Response:
    """One HTTP exchange: request line, status and the decoded body."""

    def __init__(self, method: str, path: str, status: int, reason: str,
                 content_type: str, raw_body: Optional[str], body: Optional[Envelope] = None):
        self.method = method
        self.path = path
        self.status = int(status)
        self.reason = reason
        self.content_type = content_type or ""
        self.raw_body = raw_body
        self.body = body

    def is_success(self) -> bool:
        return 200 <= self.status < 300

    def is_redirection(self) -> bool:
        return 300 <= self.status < 400

    def is_client_error(self) -> bool:
        return 400 <= self.status < 500

    def is_server_error(self) -> bool:
        return 500 <= self.status < 600

    def is_error(self) -> bool:
        return self.is_client_error() or self.is_server_error()

    def get(self, name: str, default: Any = None) -> Any:
        if self.body is None:
            return default
        return self.body.get(name, default)

    def __repr__(self) -> str:
        return f"<Response {self.method} {self.path} [{self.status}]>"


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return str(value)


def _wire_name(name: str) -> str:
    # `from_` stands in for the reserved word `from`
    return name[:-1] if name.endswith("_") else name


@dataclass(frozen=True, eq=False)
class Endpoint:
    """
    One API call: method, path template, accepted query/body parameters and
    the status-code -> {field: decoder} table describing its responses.
    Any status not in the table is read as {errorCode, errorMessage}.
    """
    method: str
    path: str
    responses: Dict[int, Dict[str, Optional[Callable[[Any], Any]]]] = field(default_factory=dict)
    query_params: Tuple[str, ...] = ()
    body_params: Tuple[str, ...] = ()
    record: Optional[str] = None
    heartbeat: Optional[str] = None

    @property
    def path_params(self) -> Tuple[str, ...]:
        return tuple(_PATH_PARAM.findall(self.path))

    @property
    def is_stream(self) -> bool:
        return self.record is not None

    def build_path(self, path_params: Optional[Dict[str, Any]] = None,
                   query: Optional[Dict[str, Any]] = None) -> str:
        path_params = path_params or {}
        path = self.path

        for name in self.path_params:
            if path_params.get(name) is None:
                raise TypeError(f"{self.method} {self.path} requires '{name}'")
            path = path.replace("{" + name + "}", str(path_params[name]))

        supplied = {_wire_name(k): v for k, v in (query or {}).items() if v is not None}
        unknown = [k for k in supplied if k not in self.query_params]
        if unknown:
            raise TypeError(f"{self.method} {self.path} got unexpected query parameter(s): {', '.join(unknown)}")

        pairs = [f"{k}={_query_value(supplied[k])}" for k in self.query_params if k in supplied]
        if pairs:
            path += "?" + "&".join(pairs)
        return path

    def build_body(self, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        supplied = {_wire_name(k): v for k, v in (params or {}).items() if v is not None}
        unknown = [k for k in supplied if k not in self.body_params]
        if unknown:
            raise TypeError(f"{self.method} {self.path} got unexpected body parameter(s): {', '.join(unknown)}")

        return {k: to_jsonable(supplied[k]) for k in self.body_params if k in supplied}

    def map_response(self, status: int, msg: Any) -> Envelope:
        shape = self.responses.get(int(status), ERROR_SHAPE)
        if not isinstance(msg, Mapping):
            msg = {}

        fields = {}
        for key, decoder in shape.items():
            if key not in msg:
                continue
            fields[key] = decoder(msg[key]) if decoder else msg[key]
        return Envelope(fields)

    def record_decoder(self) -> Callable[[Any], Any]:
        return resolve_decoder(self.record)

    def heartbeat_decoder(self) -> Optional[Callable[[Any], Any]]:
        return resolve_decoder(self.heartbeat) if self.heartbeat else None


class EntitySpec:
    """Groups the endpoints of one entity family around a shared context."""

    def __init__(self, context):
        self.context = context
