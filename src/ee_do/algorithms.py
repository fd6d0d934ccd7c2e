"""
The Algorithms namespace and the binder that fills it.

Algorithms not bound to any proxy class are exposed as attributes of a
shared namespace tree, preserving dotted nesting:

    ee_do.Algorithms.Landsat.SimpleComposite(collection)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Iterator

if TYPE_CHECKING:
    from .function import ApiFunction
    from .registry import FunctionRegistry

__all__ = ["Namespace", "UnboundMethodBinder"]

logger = logging.getLogger(__name__)


class Namespace:
    """
    A node of the Algorithms tree.

    Members are reached by attribute access (``ns.Landsat``) or item
    access (``ns["Landsat"]``). Interior nodes expose an empty `signature`
    so documentation tools recognize them as part of the API.

    Example:
        algorithms = Namespace("Algorithms")
        algorithms["Landsat"] = Namespace("Algorithms.Landsat")
        "Landsat" in algorithms    # True
    """

    __slots__ = ("_path", "_members")

    def __init__(self, path: str = "") -> None:
        object.__setattr__(self, "_path", path)
        object.__setattr__(self, "_members", {})

    @property
    def signature(self) -> dict[str, Any]:
        return {}

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(f"'{type(self).__name__}' has no attribute '{name}'")
        try:
            return self._members[name]
        except KeyError:
            raise AttributeError(f"{self._path or 'Namespace'} has no member '{name}'") from None

    def __setattr__(self, name: str, value: Any) -> None:
        """Prevent accidental attribute setting."""
        raise AttributeError(
            f"Cannot set attribute '{name}' on {type(self).__name__}. "
            "Members are managed by ee_do.initialize()."
        )

    def __getitem__(self, name: str) -> Any:
        return self._members[name]

    def __setitem__(self, name: str, value: Any) -> None:
        self._members[name] = value

    def __delitem__(self, name: str) -> None:
        del self._members[name]

    def __contains__(self, name: object) -> bool:
        return name in self._members

    def __iter__(self) -> Iterator[str]:
        return iter(self._members)

    def __len__(self) -> int:
        return len(self._members)

    def __bool__(self) -> bool:
        return True

    def __dir__(self) -> list[str]:
        return sorted(self._members)

    def clear(self) -> None:
        """Remove every member, keeping this node's identity."""
        self._members.clear()

    def child(self, name: str) -> Namespace:
        """Return the sub-namespace `name`, creating it if missing."""
        node = self._members.get(name)
        if node is None:
            path = f"{self._path}.{name}" if self._path else name
            node = Namespace(path)
            self._members[name] = node
        return node

    def __repr__(self) -> str:
        return f"Namespace({self._path or '<root>'}, {len(self._members)} members)"


def _bind(func: ApiFunction, leaf: str) -> Callable[..., Any]:
    """Wrap an algorithm as a positional-argument callable."""

    def bound(*args: Any) -> Any:
        return func.call(*args)

    bound.__name__ = leaf
    bound.__qualname__ = func.name
    bound.__doc__ = func.describe()
    bound.signature = func.signature  # type: ignore[attr-defined]
    return bound


class UnboundMethodBinder:
    """Puts every unbound, visible algorithm onto the Algorithms tree."""

    def __init__(self, functions: FunctionRegistry, root: Namespace) -> None:
        self._functions = functions
        self._root = root

    def run(self) -> int:
        """
        Attach the unbound algorithms.

        Returns:
            The number of algorithms attached
        """
        count = 0
        for name, signature in self._functions.unbound_signatures().items():
            if signature.hidden:
                continue

            *parents, leaf = name.split(".")
            target = self._root
            for part in parents:
                node = target[part] if part in target else None
                if not isinstance(node, Namespace):
                    if node is not None:
                        logger.warning("Namespace %s replaces algorithm of the same name", name.rsplit(".", 1)[0])
                        del target[part]
                    node = target.child(part)
                target = node

            target[leaf] = _bind(self._functions.lookup(name), leaf)
            count += 1
        logger.debug("Bound %d algorithms onto %r", count, self._root)
        return count
