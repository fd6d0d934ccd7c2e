"""
Proxy type registry and type classification.

ClassRegistry maps type names to ProxyType descriptors, for both the
hand-written proxy classes and the ones generated from the catalog.
TypeClassifier answers the "is this value already of type X" questions the
promoter asks, from a snapshot of the registry that is refreshed whenever
the set of types changes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator

from .computed import ComputedObject
from .errors import UsageError

__all__ = ["ProxyKind", "ProxyType", "ClassRegistry", "TypeClassifier"]

logger = logging.getLogger(__name__)


class ProxyKind(Enum):
    """Where a proxy type came from."""
    HAND_WRITTEN = "hand_written"
    GENERATED = "generated"


@dataclass(frozen=True)
class ProxyType:
    """A registered proxy type."""
    name: str
    kind: ProxyKind
    cls: type

    @property
    def generated(self) -> bool:
        return self.kind is ProxyKind.GENERATED


class ClassRegistry:
    """
    Type name -> ProxyType.

    Hand-written types are never replaced or removed; generated types can
    only be added under names that are free.
    """

    def __init__(self) -> None:
        self._types: dict[str, ProxyType] = {}

    def register_hand_written(self, cls: type, name: str | None = None) -> None:
        type_name = name or getattr(cls, "type_name", cls.__name__)
        self._types[type_name] = ProxyType(type_name, ProxyKind.HAND_WRITTEN, cls)

    def register_generated(self, name: str, cls: type) -> None:
        if name in self._types:
            raise UsageError(f"Cannot generate class {name}: the name is already registered")
        self._types[name] = ProxyType(name, ProxyKind.GENERATED, cls)

    def unregister(self, name: str) -> None:
        """Remove a generated type. Hand-written types are left in place."""
        entry = self._types.get(name)
        if entry is None:
            return
        if not entry.generated:
            logger.warning("Refusing to unregister hand-written type %s", name)
            return
        del self._types[name]

    def get(self, name: str) -> type | None:
        entry = self._types.get(name)
        return entry.cls if entry is not None else None

    def descriptor(self, name: str) -> ProxyType | None:
        return self._types.get(name)

    def snapshot(self) -> dict[str, type]:
        return {name: entry.cls for name, entry in self._types.items()}

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __iter__(self) -> Iterator[str]:
        return iter(self._types)

    def __len__(self) -> int:
        return len(self._types)


class TypeClassifier:
    """
    Type predicates over proxy values and declared type names.

    Call register_classes() after the set of registered types changes;
    until then the classifier keeps answering from the previous snapshot.
    """

    # Declared abstract types and the concrete types that satisfy them.
    _COLLECTIONS = frozenset({"Collection", "ImageCollection", "FeatureCollection"})
    _SUPERTYPES: dict[str, frozenset[str]] = {
        "EEObject": frozenset({"Image", "Feature", "Element"}) | _COLLECTIONS,
        "Element": frozenset({"Image", "Feature"}),
        "Collection": _COLLECTIONS,
        "EECollection": _COLLECTIONS,
        "FeatureCollection": _COLLECTIONS,
    }

    def __init__(self) -> None:
        self._classes: dict[str, type] = {}

    def register_classes(self, registry: ClassRegistry) -> None:
        self._classes = registry.snapshot()
        logger.debug("Type classifier knows %d classes", len(self._classes))

    def known(self, type_name: str) -> bool:
        return type_name in self._classes

    def is_instance(self, value: Any, type_name: str) -> bool:
        """Whether `value` is a proxy value of a known type `type_name`."""
        if type_name not in self._classes:
            return False
        return isinstance(value, ComputedObject) and value.has_capability(type_name)

    @staticmethod
    def is_string(value: Any) -> bool:
        return isinstance(value, str)

    @staticmethod
    def is_number(value: Any) -> bool:
        return isinstance(value, (int, float)) and not isinstance(value, bool)

    @staticmethod
    def is_var_of_type(value: Any, type_name: str) -> bool:
        """Whether `value` is a function variable declared with type `type_name`."""
        return (
            isinstance(value, ComputedObject)
            and value.is_variable()
            and value.has_capability(type_name)
        )

    @classmethod
    def is_subtype(cls, first: str, second: str) -> bool:
        """Whether a `second` value can be passed where `first` is declared."""
        if first == second:
            return True
        return second in cls._SUPERTYPES.get(first, frozenset())
