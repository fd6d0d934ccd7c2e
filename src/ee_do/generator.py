"""
ClassGenerator - proxy classes derived from the algorithm catalog.

A class is generated for every type name that
  - prefixes one or more algorithm names (``Reducer.sum``),
  - is the declared return type of one or more algorithms,
  - is not already registered, and is not reserved.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, ClassVar

from .computed import ComputedObject
from .errors import UsageError

if TYPE_CHECKING:
    from .classes import ClassRegistry, TypeClassifier
    from .registry import FunctionRegistry

__all__ = ["ClassGenerator", "GeneratedObject", "RESERVED_NAMES"]

logger = logging.getLogger(__name__)

# Type names that are never generated.
RESERVED_NAMES: frozenset[str] = frozenset({"List"})


class GeneratedObject(ComputedObject):
    """
    Base class of generated proxy classes.

    Constructor arguments are either a single ComputedObject, which is
    wrapped as-is, or the arguments of the algorithm named after the class.

    Construction always goes through the class currently registered under
    the type name, so a class object kept from before a reset delegates to
    its replacement.
    """

    _classes: ClassVar[ClassRegistry]
    _functions: ClassVar[FunctionRegistry]

    def __new__(cls, *args: Any) -> Any:
        current = cls._classes.get(cls.type_name)
        if current is None:
            raise UsageError(f"Class {cls.type_name} is no longer registered; call ee_do.initialize()")
        if current is not cls:
            return current(*args)
        return super().__new__(cls)

    def __init__(self, *args: Any) -> None:
        if len(args) == 1 and isinstance(args[0], ComputedObject):
            result = args[0]
        else:
            result = self._functions.build_call(self.type_name, *args)
        super().__init__(result.func, result.args, result.var_name)


class ClassGenerator:
    """Creates and removes the generated proxy classes of one context."""

    def __init__(
        self,
        functions: FunctionRegistry,
        classes: ClassRegistry,
        classifier: TypeClassifier,
        reserved: frozenset[str] = RESERVED_NAMES,
    ) -> None:
        self._functions = functions
        self._classes = classes
        self._classifier = classifier
        self._reserved = reserved
        self._generated: list[str] = []

    @property
    def generated(self) -> list[str]:
        """Names generated by the last run(), in creation order."""
        return list(self._generated)

    def inferable_names(self) -> list[str]:
        """Type names that qualify for generation, in catalog order."""
        signatures = self._functions.all_signatures()

        namespaces: dict[str, None] = {}
        return_types: set[str] = set()
        for signature in signatures.values():
            if signature.namespace is not None:
                namespaces[signature.namespace] = None
            return_types.add(signature.return_type)

        for reserved in self._reserved:
            namespaces.pop(reserved, None)

        return [
            name
            for name in namespaces
            if name in return_types and name not in self._classes
        ]

    def run(self) -> list[str]:
        """
        Generate classes for every inferable type name.

        Returns:
            The names generated by this call
        """
        # Classes kept from an earlier run (re-initialization without reset)
        # are bound to the freshly loaded catalog.
        for name in self._generated:
            cls = self._classes.get(name)
            if cls is not None:
                self._functions.clear_api(cls)
                self._functions.import_api(cls, name, name)

        created: list[str] = []
        for name in self.inferable_names():
            cls = self._make_class(name)
            self._classes.register_generated(name, cls)
            self._generated.append(name)
            self._functions.import_api(cls, name, name)
            created.append(name)
        self._classifier.register_classes(self._classes)
        logger.debug("Generated %d classes: %s", len(created), ", ".join(created))
        return created

    def undo(self) -> None:
        """Remove every class created by run()."""
        for name in self._generated:
            cls = self._classes.get(name)
            if cls is not None:
                self._functions.clear_api(cls)
            self._classes.unregister(name)
        logger.debug("Removed %d generated classes", len(self._generated))
        self._generated = []
        self._classifier.register_classes(self._classes)

    def _make_class(self, name: str) -> type[GeneratedObject]:
        namespace = {
            "__doc__": f"Proxy for server-side {name} values.",
            "__module__": "ee_do",
            "type_name": name,
            "capabilities": frozenset(),
            "_classes": self._classes,
            "_functions": self._functions,
        }
        return type(name, (GeneratedObject,), namespace)
