"""
ee-do - client bootstrap for a catalog of typed server-side algorithms.

This package brings the client into a usable state:
- Fetches the algorithm catalog and binds algorithms onto proxy classes
- Generates proxy classes for result types without a hand-written class
- Exposes unbound algorithms on the ee_do.Algorithms namespace
- Promotes call arguments to the types each algorithm declares

Example usage:
    import ee_do

    ee_do.initialize()                       # blocking

    image = ee_do.Image(5)                   # Image.constant(5)
    buffered = ee_do.call("Geometry.buffer", geometry, 100, 5)   # 5 -> ErrorMargin
    composite = ee_do.Algorithms.Landsat.SimpleComposite(collection)
    total = ee_do.Reducer.sum()              # generated class

    # Asynchronous form, on a running event loop
    async def main():
        await ee_do.initialize_async()
"""

from __future__ import annotations

__version__ = "0.1.0"

from typing import Any

from .algorithms import Namespace
from .computed import ComputedObject
from .config import configure, configure_from_env, get_config
from .context import Context, InitializationController
from .errors import (
    ArgumentError,
    EEError,
    ErrorCode,
    HookFailure,
    LoadFailure,
    NotInitializedError,
    TransportError,
    UnknownAlgorithmError,
    UsageError,
)
from .function import ApiFunction
from .proxies import (
    Collection,
    Feature,
    FeatureCollection,
    Filter,
    Geometry,
    Image,
    ImageCollection,
    Number,
    String,
)
from .types import EndpointConfig, InitState, Signature

# The size of a tile generated by the map server.
TILE_SIZE = 256

_context = Context.create()

# Unbound algorithms, e.g. Algorithms.Landsat.SimpleComposite. Cleared in
# place by reset(), so references to it stay valid.
Algorithms: Namespace = _context.algorithms


def default_context() -> Context:
    """The Context behind the package-level functions."""
    return _context


def initialize(
    base_url: str | None = None,
    tile_url: str | None = None,
    on_success: Any = None,
    on_error: Any = None,
) -> None:
    """
    Initialize the library.

    Calling it again with a different base_url or tile_url re-loads the
    catalog from the new server without resetting first.

    If initialize() is first called asynchronously (by passing on_success),
    later asynchronous calls add their callbacks to a queue and all the
    callbacks run together. A synchronous call made after any number of
    asynchronous ones blocks and runs every queued callback before returning.

    Args:
        base_url: The REST API endpoint (default: get_config().api_url)
        tile_url: The tile endpoint (default: get_config().tile_url)
        on_success: Called on success. When given, initialization runs
            asynchronously on the running event loop.
        on_error: Called with the error if asynchronous initialization fails.
    """
    _context.controller.initialize(base_url, tile_url, on_success, on_error)


async def initialize_async(base_url: str | None = None, tile_url: str | None = None) -> None:
    """Initialize on the running event loop and wait until done."""
    await _context.controller.initialize_async(base_url, tile_url)


def reset() -> None:
    """Reset the library to its base state, e.g. to switch servers."""
    _context.controller.reset()


def ready() -> InitState:
    """The initialization status."""
    return _context.controller.ready()


def call(func: ApiFunction | str, *args: Any) -> Any:
    """
    Call a function with the given positional arguments.

    Args:
        func: An ApiFunction or the name of an algorithm
        *args: Positional arguments to pass to the function

    Returns:
        A ComputedObject; if the signature declares a recognized return
        type, the value is cast to that type.
    """
    return _context.call(func, *args)


def apply(func: ApiFunction | str, named_args: dict[str, Any]) -> Any:
    """
    Call a function with a dictionary of named arguments.

    Args:
        func: An ApiFunction or the name of an algorithm
        named_args: A dictionary of arguments to the function

    Returns:
        A ComputedObject; if the signature declares a recognized return
        type, the value is cast to that type.
    """
    return _context.apply(func, named_args)


def __getattr__(name: str) -> Any:
    """Generated classes, e.g. ee_do.Reducer after initialize()."""
    descriptor = _context.classes.descriptor(name)
    if descriptor is not None and descriptor.generated:
        return descriptor.cls
    raise AttributeError(f"module 'ee_do' has no attribute '{name}'")


__all__ = [
    # Lifecycle
    "initialize",
    "initialize_async",
    "reset",
    "ready",
    "InitState",
    # Calls
    "call",
    "apply",
    "Algorithms",
    "ApiFunction",
    "ComputedObject",
    # Proxy types
    "Image",
    "ImageCollection",
    "Feature",
    "FeatureCollection",
    "Collection",
    "Geometry",
    "Filter",
    "Number",
    "String",
    # Contexts
    "Context",
    "InitializationController",
    "default_context",
    "Namespace",
    # Configuration
    "configure",
    "configure_from_env",
    "get_config",
    "EndpointConfig",
    "Signature",
    # Errors
    "ErrorCode",
    "EEError",
    "UsageError",
    "UnknownAlgorithmError",
    "ArgumentError",
    "NotInitializedError",
    "TransportError",
    "LoadFailure",
    "HookFailure",
    # Constants
    "TILE_SIZE",
    "__version__",
]
