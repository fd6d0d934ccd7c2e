"""
Type definitions for ee-do

This module contains the plain data types shared across the ee-do package.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Parametric suffix on a declared type, e.g. the "<Object>" in "Dictionary<Object>"
_PARAMETRIC_SUFFIX = re.compile(r"<.*>")


def strip_type_parameters(type_name: str) -> str:
    """Drop any parametric suffix from a declared type name."""
    return _PARAMETRIC_SUFFIX.sub("", type_name)


class InitState(str, Enum):
    """
    The possible states of library initialization.

    Overlapping bootstraps are coalesced; callers can poll ready() to see
    where the library is.
    """
    NOT_READY = "not_ready"
    LOADING = "loading"
    READY = "ready"


@dataclass
class EndpointConfig:
    """Endpoint configuration for the remote API."""
    api_url: str = "https://earthengine.googleapis.com/api"
    tile_url: str = "https://earthengine.googleapis.com/map"
    timeout: float = 30.0


@dataclass(frozen=True)
class ArgSpec:
    """A single declared argument of an algorithm."""
    name: str
    type: str
    optional: bool = False
    description: str = ""


@dataclass(frozen=True)
class Signature:
    """
    Declared signature of a server-side algorithm.

    Attributes:
        name: Dotted algorithm name, e.g. "Image.select".
        returns: Declared return type, possibly parametric ("Dictionary<Object>").
        args: Declared arguments in positional order.
        description: Free-form description from the catalog.
        hidden: Hidden algorithms are not exposed on the Algorithms namespace.
    """
    name: str
    returns: str
    args: tuple[ArgSpec, ...] = ()
    description: str = ""
    hidden: bool = False

    @property
    def return_type(self) -> str:
        """The declared return type without its parametric suffix."""
        return strip_type_parameters(self.returns)

    @property
    def namespace(self) -> str | None:
        """Text before the first '.', or None for un-namespaced names."""
        if "." not in self.name:
            return None
        return self.name.split(".", 1)[0]


@dataclass
class CallbackQueues:
    """Pending bootstrap callbacks, drained once per resolution."""
    success: list[Any] = field(default_factory=list)
    error: list[Any] = field(default_factory=list)

    def clear(self) -> None:
        self.success.clear()
        self.error.clear()

    def __bool__(self) -> bool:
        return bool(self.success or self.error)
