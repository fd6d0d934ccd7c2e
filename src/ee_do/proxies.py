"""
Hand-written proxy types.

Each class represents a server-side result type. Constructing one from a
ComputedObject wraps it; constructing one from a plain Python value either
calls the matching constructor algorithm or keeps the value as a literal.

The initialize()/reset() hooks bind and unbind the catalog algorithms of
the class's namespaces. They are driven by the initialization controller.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, ClassVar

from .computed import ComputedObject, has_capability
from .errors import ArgumentError, NotInitializedError

if TYPE_CHECKING:
    from .registry import FunctionRegistry

__all__ = [
    "ProxyObject",
    "Image",
    "Feature",
    "Collection",
    "ImageCollection",
    "FeatureCollection",
    "Filter",
    "Geometry",
    "Number",
    "String",
    "HAND_WRITTEN_TYPES",
]

logger = logging.getLogger(__name__)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class ProxyObject(ComputedObject):
    """
    Base class of the hand-written proxy types.

    Subclasses override _convert() to say how plain Python values become
    server-side computations. Returning None from _convert() keeps the
    single argument as a literal in `value`.
    """

    # Algorithm namespaces bound onto the class, with their attribute prefix.
    api_namespaces: ClassVar[tuple[tuple[str, str], ...]] = ()

    _registry: ClassVar[FunctionRegistry | None] = None

    value: Any = None

    def __init__(self, *args: Any) -> None:
        result = self._convert(*args)
        if result is None:
            super().__init__()
            self.value = args[0] if args else None
        else:
            super().__init__(result.func, result.args, result.var_name)
            self.value = getattr(result, "value", None)

    def _convert(self, *args: Any) -> ComputedObject | None:
        if len(args) == 1 and isinstance(args[0], ComputedObject):
            return args[0]
        raise ArgumentError(
            f"Unrecognized argument type to convert to {self.type_name}: "
            + ", ".join(type(arg).__name__ for arg in args)
        )

    @classmethod
    def _functions(cls) -> FunctionRegistry:
        if cls._registry is None:
            raise NotInitializedError(f"{cls.type_name} used before ee_do.initialize()")
        return cls._registry

    @classmethod
    def _call(cls, name: str, *args: Any) -> ComputedObject:
        return cls._functions().build_call(name, *args)

    @classmethod
    def initialize(cls, registry: FunctionRegistry) -> None:
        """Bind the catalog algorithms of this type's namespaces."""
        cls._registry = registry
        for namespace, prepend in cls.api_namespaces:
            registry.import_api(cls, namespace, cls.type_name, prepend)
        logger.debug("%s initialized", cls.type_name)

    @classmethod
    def reset(cls) -> None:
        """Remove the bound algorithms."""
        if cls._registry is not None:
            cls._registry.clear_api(cls)
        cls._registry = None

    def _key(self) -> tuple[Any, ...]:
        return super()._key() + (self.value,)

    def __repr__(self) -> str:
        if self.func is None and not self.is_variable():
            return f"{self.type_name}({self.value!r})"
        return super().__repr__()


class Image(ProxyObject):
    """An image. Numbers become constant images; strings are asset IDs."""

    type_name = "Image"
    capabilities = frozenset({"Element", "EEObject"})
    api_namespaces = (("Image", ""), ("Window", "focal_"))

    def _convert(self, *args: Any) -> ComputedObject | None:
        if len(args) == 1:
            arg = args[0]
            if _is_number(arg):
                return self._call("Image.constant", arg)
            if isinstance(arg, str):
                return self._call("Image.load", arg)
        return super()._convert(*args)


class Geometry(ProxyObject):
    """A geometry. GeoJSON mappings are kept as literals."""

    type_name = "Geometry"
    api_namespaces = (("Geometry", ""),)

    def _convert(self, *args: Any) -> ComputedObject | None:
        if len(args) == 1 and isinstance(args[0], dict) and "type" in args[0]:
            return None
        return super()._convert(*args)


class Feature(ProxyObject):
    """A feature: a geometry with a dictionary of properties."""

    type_name = "Feature"
    capabilities = frozenset({"Element", "EEObject"})
    api_namespaces = (("Feature", ""),)

    def _convert(self, *args: Any) -> ComputedObject | None:
        if not args or len(args) > 2:
            return super()._convert(*args)
        geometry = args[0]
        properties = args[1] if len(args) == 2 else None
        if isinstance(geometry, dict) and geometry.get("type") == "Feature":
            properties = geometry.get("properties") if properties is None else properties
            return self._call("Feature", Geometry(geometry["geometry"]), properties)
        if isinstance(geometry, dict) or has_capability(geometry, "Geometry"):
            return self._call("Feature", geometry, properties)
        if len(args) == 1:
            return super()._convert(*args)
        raise ArgumentError(f"Cannot build a Feature from {type(geometry).__name__}")


class Collection(ProxyObject):
    """Base of the collection types. Only wraps existing computations."""

    type_name = "Collection"
    api_namespaces = (("Collection", ""), ("AggregateFeatureCollection", "aggregate_"))


class ImageCollection(Collection):
    """A collection of images. Strings are asset IDs; lists hold images."""

    type_name = "ImageCollection"
    capabilities = frozenset({"Collection"})
    api_namespaces = (("ImageCollection", ""),)

    def _convert(self, *args: Any) -> ComputedObject | None:
        if len(args) == 1:
            arg = args[0]
            if isinstance(arg, str):
                return self._call("ImageCollection.load", arg)
            if isinstance(arg, (list, tuple)):
                return self._call("ImageCollection.fromImages", [Image(item) for item in arg])
            if has_capability(arg, "Image"):
                return self._call("ImageCollection.fromImages", [arg])
        return super()._convert(*args)


class FeatureCollection(Collection):
    """A collection of features. Strings are table IDs; lists hold features."""

    type_name = "FeatureCollection"
    capabilities = frozenset({"Collection"})
    api_namespaces = (("FeatureCollection", ""),)

    def _convert(self, *args: Any) -> ComputedObject | None:
        if len(args) == 1:
            arg = args[0]
            if isinstance(arg, str):
                return self._call("Collection.loadTable", arg)
            if isinstance(arg, (list, tuple)):
                return self._call("Collection", [Feature(item) for item in arg])
            if has_capability(arg, "Geometry") or has_capability(arg, "Feature"):
                return self._call("Collection", [Feature(arg)])
        return super()._convert(*args)


class Filter(ProxyObject):
    """A filter. A list of filters is combined with Filter.and."""

    type_name = "Filter"
    api_namespaces = (("Filter", ""),)

    def _convert(self, *args: Any) -> ComputedObject | None:
        if len(args) == 1 and isinstance(args[0], (list, tuple)):
            filters = [Filter(item) for item in args[0]]
            if len(filters) == 1:
                return filters[0]
            return self._call("Filter.and", filters)
        if len(args) == 1 and isinstance(args[0], dict):
            return None
        return super()._convert(*args)


class Number(ProxyObject):
    type_name = "Number"
    api_namespaces = (("Number", ""),)

    def _convert(self, *args: Any) -> ComputedObject | None:
        if len(args) == 1 and _is_number(args[0]):
            return None
        return super()._convert(*args)


class String(ProxyObject):
    type_name = "String"
    api_namespaces = (("String", ""),)

    def _convert(self, *args: Any) -> ComputedObject | None:
        if len(args) == 1 and isinstance(args[0], str):
            return None
        return super()._convert(*args)


# Order in which the controller runs the lifecycle hooks.
HAND_WRITTEN_TYPES: tuple[type[ProxyObject], ...] = (
    Image,
    Feature,
    Collection,
    ImageCollection,
    FeatureCollection,
    Filter,
    Geometry,
    Number,
    String,
)
