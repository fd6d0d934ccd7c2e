"""
TypePromoter - coerce values to the types algorithm parameters declare.

Promotion is applied to every argument of an algorithm call and to every
call result, e.g. a number passed where an ErrorMargin is declared becomes
``ErrorMargin(value, "meters")`` and a FeatureCollection passed where a
Geometry is declared becomes the collection's geometry.
"""

from __future__ import annotations

import inspect
import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from .computed import ComputedObject, has_capability
from .errors import ArgumentError, UnknownAlgorithmError
from .proxies import Feature, FeatureCollection, Filter, Geometry, Image, ImageCollection, String
from .registry import ApiMethod, FunctionRegistry

if TYPE_CHECKING:
    from .classes import ClassRegistry, TypeClassifier

__all__ = ["TypePromoter"]

logger = logging.getLogger(__name__)

# Date string formats accepted besides ISO 8601.
_DATE_FORMATS = ("%Y/%m/%d", "%Y/%m/%d %H:%M:%S")


def _to_datetime(value: str | int | float) -> datetime:
    """
    Convert a Date argument to an aware datetime.

    Strings are ISO 8601 (a trailing "Z" is UTC) or slash-separated dates;
    naive results are taken as UTC. Numbers are milliseconds since the epoch.

    Raises:
        ArgumentError: If a string is not a recognized date
    """
    if not isinstance(value, str):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        for fmt in _DATE_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
        else:
            raise ArgumentError(f"Invalid date string: {value!r}", algorithm="Date") from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class TypePromoter:
    """
    Maps (value, declared type name) to the promoted value.

    Example:
        promoter = TypePromoter(functions, classes, classifier)
        margin = promoter.promote(5, "ErrorMargin")
    """

    def __init__(
        self,
        functions: FunctionRegistry,
        classes: ClassRegistry,
        classifier: TypeClassifier,
    ) -> None:
        self._functions = functions
        self._classes = classes
        self._classifier = classifier

    def __call__(self, value: Any, type_name: str) -> Any:
        return self.promote(value, type_name)

    def promote(self, value: Any, type_name: str) -> Any:
        """
        Promote `value` to `type_name`.

        Returns:
            The promoted value, or `value` unchanged when the type is not
            recognized or no promotion applies.

        Raises:
            UnknownAlgorithmError: When a string names a missing factory
                member of a registered type
            ArgumentError: When a string passed as a Date is not a date
        """
        if value is None:
            return None

        classifier = self._classifier

        if type_name == "Image":
            return Image(value)
        elif type_name == "ImageCollection":
            return ImageCollection(value)
        elif type_name in ("Feature", "EEObject"):
            if has_capability(value, "Collection"):
                # Can be expensive on large collections.
                return self._functions.build_call(
                    "Feature", self._functions.build_call("Collection.geometry", value)
                )
            elif type_name == "EEObject" and has_capability(value, "Image"):
                return value
            else:
                return Feature(value)
        elif type_name == "Geometry":
            if has_capability(value, "FeatureCollection"):
                return self._functions.build_call("Collection.geometry", value)
            else:
                return Geometry(value)
        elif type_name in ("FeatureCollection", "EECollection", "Collection"):
            if has_capability(value, "Collection"):
                return value
            else:
                return FeatureCollection(value)
        elif type_name == "Filter":
            return Filter(value)
        elif type_name == "ErrorMargin":
            if classifier.is_number(value):
                return self._functions.build_call("ErrorMargin", value, "meters")
            else:
                return value
        elif type_name == "Algorithm":
            if classifier.is_string(value):
                return self._functions.lookup(value)
            else:
                return value
        elif type_name == "Date":
            if classifier.is_string(value) or classifier.is_number(value):
                return _to_datetime(value)
            elif isinstance(value, ComputedObject):
                # Not calling the function, so the result is not re-cast to Date.
                func = self._functions.lookup("Date")
                return ComputedObject(func, func.promote_args(func.name_args([value])))
            else:
                return value
        elif type_name == "Dictionary":
            cls = self._classes.get(type_name)
            if cls is None:
                return value
            elif classifier.is_instance(value, type_name):
                return value
            elif isinstance(value, ComputedObject):
                return cls(value)
            else:
                # No constructor from plain values.
                return value
        elif type_name == "String":
            if (
                classifier.is_string(value)
                or isinstance(value, String)
                or isinstance(value, ComputedObject)
                or classifier.is_var_of_type(value, "String")
            ):
                return String(value)
            else:
                return value
        elif type_name == "List":
            return value
        else:
            return self._promote_registered(value, type_name)

    def _promote_registered(self, value: Any, type_name: str) -> Any:
        """Default rule: hand-written and generated classes by name."""
        cls = self._classes.get(type_name)
        if cls is None or not value:
            return value
        if self._classifier.is_instance(value, type_name):
            return value
        if self._classifier.is_string(value):
            # "Type.member" must be a catalog algorithm callable without arguments.
            if not isinstance(inspect.getattr_static(cls, value, None), ApiMethod):
                raise UnknownAlgorithmError(
                    f"{type_name}.{value}", f"Unknown algorithm: {type_name}.{value}"
                )
            return getattr(cls, value)()
        logger.debug("Promoting %s to %s", type(value).__name__, type_name)
        return cls(value)
