"""
FunctionRegistry - the algorithm signature catalog.

The registry fetches the catalog through the Transport, hands out
ApiFunction objects, builds calls by name and binds namespaced algorithms
onto proxy classes as methods.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from functools import partial
from typing import TYPE_CHECKING, Any, Callable

from .catalog import parse_catalog
from .errors import EEError, LoadFailure, NotInitializedError, UnknownAlgorithmError
from .function import ApiFunction
from .types import Signature

if TYPE_CHECKING:
    from .transport import Transport

__all__ = ["FunctionRegistry", "ApiMethod"]

logger = logging.getLogger(__name__)

Promoter = Callable[[Any, str], Any]


def _identity_promoter(value: Any, type_name: str) -> Any:
    return value


class ApiMethod:
    """
    Descriptor exposing an ApiFunction as a method of a proxy class.

    Instance methods receive the instance as the first algorithm argument;
    static ones ignore it.
    """

    __slots__ = ("func", "is_instance", "name")

    def __init__(self, func: ApiFunction, is_instance: bool, name: str) -> None:
        self.func = func
        self.is_instance = is_instance
        self.name = name

    @property
    def signature(self) -> Signature:
        return self.func.signature

    def __get__(self, instance: Any, owner: type | None = None) -> Callable[..., Any]:
        if self.is_instance and instance is not None:
            bound = partial(self.func.call, instance)
        else:
            bound = partial(self.func.call)
        bound.__doc__ = self.func.describe()
        return bound

    def __repr__(self) -> str:
        kind = "instance" if self.is_instance else "static"
        return f"ApiMethod({self.func.name}, {kind})"


class FunctionRegistry:
    """
    Catalog of server-side algorithm signatures.

    Example:
        registry = FunctionRegistry(transport)
        registry.load_signatures()                 # blocking
        image = registry.build_call("Image.constant", 5)
    """

    def __init__(self, transport: Transport, promoter: Promoter | None = None) -> None:
        self._transport = transport
        self._promoter: Promoter = promoter or _identity_promoter
        self._functions: dict[str, ApiFunction] | None = None
        self._bound: set[str] = set()
        self._pending: set[asyncio.Task[None]] = set()
        # Bumped by every load and by reset(); a load only installs its
        # payload if no newer load or reset happened while it was in flight.
        self._generation = 0
        self._subtype: Callable[[str, str], bool] = lambda first, second: first == second

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------

    def register_promoter(self, promoter: Promoter) -> None:
        """Install the function used to promote arguments and results."""
        self._promoter = promoter

    def register_subtype_check(self, check: Callable[[str, str], bool]) -> None:
        """Install the check deciding whether a bound algorithm is an instance method."""
        self._subtype = check

    def promote(self, value: Any, type_name: str) -> Any:
        return self._promoter(value, type_name)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @property
    def loaded(self) -> bool:
        return self._functions is not None

    def load_signatures(
        self,
        on_success: Callable[[], Any] | None = None,
        on_error: Callable[[BaseException], Any] | None = None,
    ) -> None:
        """
        Fetch the algorithm catalog.

        Without callbacks the request is made inline and errors raise.
        With callbacks the request runs as a task on the running event loop
        and the outcome is reported through them. An asynchronous load
        superseded by a later load or by reset() discards its payload and
        calls neither callback.

        Raises:
            LoadFailure: Synchronous form only, when the fetch or parse fails
        """
        self._generation += 1
        if on_success is None and on_error is None:
            try:
                data = self._transport.send("/algorithms")
            except EEError as e:
                raise LoadFailure(f"Could not load algorithms: {e}") from e
            self._install(data)
            return

        loop = asyncio.get_running_loop()
        task = loop.create_task(self._load_async(self._generation, on_success, on_error))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _load_async(
        self,
        generation: int,
        on_success: Callable[[], Any] | None,
        on_error: Callable[[BaseException], Any] | None,
    ) -> None:
        try:
            data = await self._transport.send_async("/algorithms")
            if generation != self._generation:
                logger.debug("Discarding superseded algorithm load")
                return
            self._install(data)
        except Exception as e:
            if generation != self._generation:
                logger.debug("Discarding failure of superseded algorithm load: %s", e)
                return
            failure = e if isinstance(e, LoadFailure) else LoadFailure(f"Could not load algorithms: {e}")
            if failure is not e:
                failure.__cause__ = e
            logger.debug("Asynchronous algorithm load failed: %s", failure)
            if on_error is not None:
                on_error(failure)
            return
        if on_success is not None:
            on_success()

    def _install(self, data: Any) -> None:
        """Validate the catalog payload and replace the current catalog."""
        self._functions = {
            name: ApiFunction(self, signature)
            for name, signature in parse_catalog(data).items()
        }
        # Bound names are kept: a reload without reset() rebinds the same classes.
        logger.debug("Loaded %d algorithm signatures", len(self._functions))

    def reset(self) -> None:
        """Forget the catalog and which algorithms are bound."""
        self._generation += 1
        self._functions = None
        self._bound.clear()

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def _catalog(self) -> dict[str, ApiFunction]:
        if self._functions is None:
            raise NotInitializedError()
        return self._functions

    def all_signatures(self) -> dict[str, Signature]:
        """Every signature in the catalog, keyed by algorithm name."""
        return {name: func.signature for name, func in self._catalog().items()}

    def unbound_signatures(self) -> dict[str, Signature]:
        """Signatures not bound to any proxy class by import_api()."""
        return {
            name: func.signature
            for name, func in self._catalog().items()
            if name not in self._bound
        }

    def lookup(self, name: str) -> ApiFunction:
        """
        Return the ApiFunction for an algorithm name.

        Raises:
            NotInitializedError: If the catalog has not been loaded
            UnknownAlgorithmError: If there is no such algorithm
        """
        func = self._catalog().get(name)
        if func is None:
            raise UnknownAlgorithmError(name)
        return func

    def __contains__(self, name: object) -> bool:
        return self._functions is not None and name in self._functions

    def build_call(self, name: str, *args: Any) -> Any:
        """Call the named algorithm with positional arguments."""
        return self.lookup(name).call(*args)

    def build_apply(self, name: str, named_args: dict[str, Any]) -> Any:
        """Call the named algorithm with named arguments."""
        return self.lookup(name).apply(named_args)

    # ------------------------------------------------------------------
    # Binding onto classes
    # ------------------------------------------------------------------

    def import_api(
        self,
        target: type,
        namespace: str,
        type_name: str,
        prepend: str = "",
    ) -> list[str]:
        """
        Bind every ``namespace.member`` algorithm onto a class.

        A member whose first declared argument is a subtype of `type_name`
        becomes an instance method; any other becomes static. Attributes the
        class already has (its own or inherited) are never overwritten.

        Args:
            target: The proxy class
            namespace: Algorithm name prefix, e.g. "Image"
            type_name: Type the class represents, for instance-method detection
            prepend: Prefix for the attribute names, e.g. "focal_"

        Returns:
            The attribute names that were bound
        """
        bound: list[str] = []
        for name, func in self._catalog().items():
            parts = name.split(".")
            if len(parts) != 2 or parts[0] != namespace:
                continue
            self._bound.add(name)

            attr = prepend + parts[1]
            existing = inspect.getattr_static(target, attr, None)
            if existing is not None and not isinstance(existing, ApiMethod):
                continue

            args = func.signature.args
            is_instance = bool(args) and args[0].type != "Object" and self._subtype(args[0].type, type_name)
            setattr(target, attr, ApiMethod(func, is_instance, attr))
            bound.append(attr)
        logger.debug("Bound %d %s algorithms onto %s", len(bound), namespace, target.__name__)
        return bound

    def clear_api(self, target: type) -> None:
        """Remove every algorithm binding from a class."""
        for attr, value in list(vars(target).items()):
            if isinstance(value, ApiMethod):
                delattr(target, attr)
