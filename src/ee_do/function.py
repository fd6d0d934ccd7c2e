"""
ApiFunction - a callable entry of the algorithm catalog.

Calling an ApiFunction does not contact the server. It names and promotes
the arguments according to the signature and returns a ComputedObject,
promoted to the declared return type.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Sequence

from .computed import ComputedObject
from .errors import ArgumentError

if TYPE_CHECKING:
    from .registry import FunctionRegistry
    from .types import Signature

__all__ = ["ApiFunction"]


class ApiFunction:
    """
    A server-side algorithm bound to the registry that loaded it.

    Example:
        func = registry.lookup("Image.select")
        selected = func(image, ["B1"])           # positional
        selected = func.apply({"input": image, "bandSelectors": ["B1"]})
    """

    __slots__ = ("_registry", "_signature")

    def __init__(self, registry: FunctionRegistry, signature: Signature) -> None:
        self._registry = registry
        self._signature = signature

    @property
    def name(self) -> str:
        return self._signature.name

    @property
    def signature(self) -> Signature:
        return self._signature

    def call(self, *args: Any) -> Any:
        """Call the algorithm with positional arguments."""
        return self.apply(self.name_args(args))

    __call__ = call

    def apply(self, named_args: dict[str, Any]) -> Any:
        """
        Call the algorithm with a mapping of named arguments.

        Returns:
            A ComputedObject promoted to the declared return type.
        """
        result = ComputedObject(self, self.promote_args(named_args))
        return self._registry.promote(result, self._signature.return_type)

    def name_args(self, args: Sequence[Any]) -> dict[str, Any]:
        """
        Convert positional arguments to named ones.

        Raises:
            ArgumentError: If more arguments are given than declared.
        """
        specs = self._signature.args
        if len(args) > len(specs):
            raise ArgumentError(
                f"Too many ({len(args)}) arguments to function: {self.name}",
                algorithm=self.name,
            )
        return {spec.name: value for spec, value in zip(specs, args)}

    def promote_args(self, named_args: dict[str, Any]) -> dict[str, Any]:
        """
        Promote named arguments to their declared types.

        None values are treated as absent.

        Raises:
            ArgumentError: On missing required or unrecognized arguments.
        """
        promoted: dict[str, Any] = {}
        known = set()
        for spec in self._signature.args:
            known.add(spec.name)
            value = named_args.get(spec.name)
            if value is None:
                if not spec.optional:
                    raise ArgumentError(
                        f"Required argument ({spec.name}) missing to function: {self.name}",
                        algorithm=self.name,
                    )
                continue
            promoted[spec.name] = self._registry.promote(value, spec.type)

        unknown = [name for name in named_args if name not in known]
        if unknown:
            raise ArgumentError(
                f"Unrecognized arguments {unknown} to function: {self.name}",
                algorithm=self.name,
            )
        return promoted

    def describe(self) -> str:
        """Human-readable description built from the signature."""
        sig = self._signature
        lines = [f"{sig.name}({', '.join(arg.name for arg in sig.args)}) -> {sig.returns}"]
        if sig.description:
            lines.extend(["", sig.description])
        if sig.args:
            lines.extend(["", "Args:"])
            for arg in sig.args:
                suffix = ", optional" if arg.optional else ""
                line = f"  {arg.name} ({arg.type}{suffix})"
                if arg.description:
                    line += f": {arg.description}"
                lines.append(line)
        return "\n".join(lines)

    __str__ = describe

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ApiFunction):
            return NotImplemented
        return self._signature == other._signature

    def __hash__(self) -> int:
        return hash(self._signature.name)

    def __repr__(self) -> str:
        return f"ApiFunction({self.name})"
