from collections.abc import Mapping
from dataclasses import replace
from typing import Any, Dict, Type

from v20.config.logging import logger
from v20.core.models import Definition, Property, register_decoder


class VariantRegistry:
    """
    Discriminated-union decoder.

    Maps the value of a discriminator field (`type` by default) to the
    entity class that represents it. Decoding is total: a missing, unknown
    or non-string tag falls back to the base class, which only knows the
    fields common to every variant.
    """

    def __init__(self, base: Type[Definition], discriminator: str = "type"):
        self.base = base
        self.discriminator = discriminator
        self._variants: Dict[str, Type[Definition]] = {}

        # Nested fields typed as the base class now decode polymorphically
        module = base.__module__.rsplit(".", 1)[-1]
        register_decoder(f"{module}.{base.__name__}", self.decode)

    def register(self, tag):
        """
        Class decorator binding `tag` to a variant.
        The variant's discriminator property gets the tag as its default.
        """
        tag = getattr(tag, "value", tag)

        def decorator(cls: Type[Definition]) -> Type[Definition]:
            if tag in self._variants:
                raise ValueError(f"Tag '{tag}' is already bound to {self._variants[tag].__name__}")

            props = cls._properties
            if any(p.name == self.discriminator for p in props):
                props = tuple(
                    replace(p, default=tag) if p.name == self.discriminator else p
                    for p in props
                )
            else:
                props = props + (Property(self.discriminator, "Type", default=tag),)

            cls._properties = props
            cls.tag = tag
            self._variants[tag] = cls
            return cls

        return decorator

    def variant_for(self, tag: Any) -> Type[Definition]:
        if isinstance(tag, str):
            return self._variants.get(tag, self.base)
        return self.base

    def decode(self, data: Any) -> Definition:
        tag = data.get(self.discriminator) if isinstance(data, Mapping) else None
        cls = self.variant_for(tag)

        if tag is not None and cls is self.base:
            logger.debug(f"Unknown {self.base.__name__} {self.discriminator} '{tag}', using base shape")

        return cls(data)

    @property
    def tags(self):
        return tuple(self._variants)

    def __contains__(self, tag) -> bool:
        return tag in self._variants

    def __len__(self) -> int:
        return len(self._variants)
