"""
ComputedObject - a client-side reference to a server-side computation.

A ComputedObject records the algorithm it calls and the (already promoted)
named arguments. Every proxy value also carries a set of capability tags,
which is how the library answers "is this value already an X" without
relying on Python class identity.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from .function import ApiFunction

__all__ = ["ComputedObject", "has_capability"]


class ComputedObject:
    """
    A value computed on the server.

    Attributes:
        func: The ApiFunction producing this value, or None for variables
            and literal-backed proxies.
        args: Named arguments of the call.
        var_name: Set when the object is a placeholder variable of a
            client-side function.

    Example:
        image = ee_do.call("Image.constant", 5)
        image.func.name   # "Image.constant"
        image.args        # {"value": 5}
    """

    # Type name of values of this class, and the tags they carry.
    type_name: ClassVar[str] = "ComputedObject"
    capabilities: ClassVar[frozenset[str]] = frozenset()

    def __init__(
        self,
        func: ApiFunction | None = None,
        args: dict[str, Any] | None = None,
        var_name: str | None = None,
    ) -> None:
        self.func = func
        self.args = args
        self.var_name = var_name

    def has_capability(self, tag: str) -> bool:
        """Whether this value is usable where a `tag` value is expected."""
        return tag == self.type_name or tag in self.capabilities

    def is_variable(self) -> bool:
        return self.func is None and self.var_name is not None

    @classmethod
    def variable(cls, var_name: str) -> ComputedObject:
        """A placeholder for an argument of a client-side function."""
        obj = cls.__new__(cls)
        ComputedObject.__init__(obj, None, None, var_name)
        return obj

    def _key(self) -> tuple[Any, ...]:
        return (self.func, self.args, self.var_name)

    def __eq__(self, other: object) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        return self._key() == other._key()  # type: ignore[attr-defined]

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        if self.is_variable():
            return f"{self.type_name}(<var {self.var_name}>)"
        if self.func is None:
            return f"{self.type_name}()"
        return f"{self.type_name}({self.func.name})"


def has_capability(value: Any, tag: str) -> bool:
    """Capability check that is safe on arbitrary values."""
    return isinstance(value, ComputedObject) and value.has_capability(tag)
