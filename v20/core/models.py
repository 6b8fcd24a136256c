import json
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

PRIMITIVE = "primitive"
OBJECT = "object"
ARRAY_PRIMITIVE = "array_primitive"
ARRAY_OBJECT = "array_object"

_PLACEHOLDER = re.compile(r"{([^}]+)}")


class _Absent:
    """Marker for a property that has no default value."""

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = _Absent()

# "module.ClassName" -> callable turning a raw JSON object into an entity
_DECODERS: Dict[str, Callable[[Any], Any]] = {}


def register_decoder(type_name: str, decoder: Callable[[Any], Any]) -> None:
    _DECODERS[type_name] = decoder


def resolve_decoder(type_name: str) -> Callable[[Any], Any]:
    try:
        return _DECODERS[type_name]
    except KeyError:
        raise LookupError(f"No decoder registered for '{type_name}'") from None


def decode_object(type_name: str, value: Any) -> Any:
    """Decode one nested JSON object; anything that is not an object passes through."""
    if not isinstance(value, Mapping):
        return value
    return resolve_decoder(type_name)(value)


def decode_array(type_name: str, value: Any) -> Any:
    """Decode every element of a JSON array, keeping order and length."""
    if not isinstance(value, list):
        return value
    decoder = resolve_decoder(type_name)
    return [decoder(item) if isinstance(item, Mapping) else item for item in value]


def to_jsonable(value: Any) -> Any:
    """Convert entities (and containers of entities) into plain JSON values."""
    if isinstance(value, Definition):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    if isinstance(value, Mapping):
        return {key: to_jsonable(item) for key, item in value.items()}
    return value


@dataclass(frozen=True)
class Property:
    """
    Describes one field of an entity.
    `type_class` says how the raw JSON value is decoded, `type_name` names
    the wire type or, for object kinds, the entity used to decode it.
    """
    name: str
    display_name: str
    type_name: str = "string"
    type_class: str = PRIMITIVE
    default: Any = ABSENT
    description: str = ""

    @property
    def has_default(self) -> bool:
        return self.default is not ABSENT

    def decode(self, value: Any) -> Any:
        if self.type_class == OBJECT:
            return decode_object(self.type_name, value)
        if self.type_class == ARRAY_OBJECT:
            return decode_array(self.type_name, value)
        if self.type_class == ARRAY_PRIMITIVE and isinstance(value, list):
            return list(value)
        return value


@dataclass(frozen=True)
class Field:
    """A Property together with the value it holds on one entity."""
    prop: Property
    value: Any

    @property
    def name(self) -> str:
        return self.prop.name

    @property
    def display_name(self) -> str:
        return self.prop.display_name

    @property
    def description(self) -> str:
        return self.prop.description

    @property
    def type_class(self) -> str:
        return self.prop.type_class

    @property
    def type_name(self) -> str:
        return self.prop.type_name


class Definition:
    """
    Base of every entity.

    Subclasses declare `_properties`; construction walks that table once:
    a field present in the input is decoded, an absent field with a default
    gets the default, and an absent field without one is not set at all.
    Instances are read-only after construction.
    """
    _properties: Tuple[Property, ...] = ()
    _name_format = ""
    _summary_format = ""

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        module = cls.__module__.rsplit(".", 1)[-1]
        register_decoder(f"{module}.{cls.__name__}", cls)

    def __init__(self, data: Optional[Mapping] = None, **kwargs):
        values = dict(data) if isinstance(data, Mapping) else {}
        values.update(kwargs)

        for prop in self._properties:
            if prop.name in values:
                object.__setattr__(self, prop.name, prop.decode(values[prop.name]))
            elif prop.has_default:
                object.__setattr__(self, prop.name, prop.default)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name):
        raise AttributeError(f"{type(self).__name__} is immutable")

    @classmethod
    def properties(cls) -> Tuple[Property, ...]:
        return cls._properties

    def __contains__(self, name: str) -> bool:
        return name in self.__dict__

    def get(self, name: str, default: Any = None) -> Any:
        return self.__dict__.get(name, default)

    def _format(self, template: str) -> str:
        # Placeholders of absent or empty fields stay verbatim
        def substitute(match):
            value = self.__dict__.get(match.group(1))
            return str(value) if value else match.group(0)

        return _PLACEHOLDER.sub(substitute, template)

    # Called through Definition so a same-named field never shadows the formatter
    def display_name(self) -> str:
        return Definition._format(self, self._name_format)

    def summary(self) -> str:
        return Definition._format(self, self._summary_format)

    def title(self) -> str:
        name_str = Definition.display_name(self)
        summary_str = Definition.summary(self)

        if name_str and summary_str:
            return f"{name_str}: {summary_str}"
        return name_str + summary_str

    def fields(self) -> List[Field]:
        return [
            Field(prop, self.__dict__[prop.name])
            for prop in self._properties
            if prop.name in self.__dict__
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            prop.name: to_jsonable(self.__dict__[prop.name])
            for prop in self._properties
            if prop.name in self.__dict__
        }

    def to_json(self, **kwargs) -> str:
        return json.dumps(self.to_dict(), **kwargs)

    def __str__(self) -> str:
        lines = [Definition.title(self)]

        for field in Definition.fields(self):
            value = field.value
            rendered = f"[{len(value)}]" if isinstance(value, list) else value
            lines.append(f"{field.display_name}: {rendered}")

        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_dict()!r})"

    def __eq__(self, other) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    __hash__ = None
