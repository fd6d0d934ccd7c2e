"""
Validation of the /algorithms catalog payload.

The payload maps algorithm names to signature objects. Each entry is
validated with a pydantic model before it becomes a Signature; unknown
fields are ignored so newer servers can add metadata.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import LoadFailure
from .types import ArgSpec, Signature

__all__ = ["ArgSpecModel", "SignatureModel", "parse_catalog"]


class ArgSpecModel(BaseModel):
    """One declared argument of a catalog entry."""

    name: str
    type: str = "Object"
    optional: bool = False
    description: str = ""

    model_config = {"extra": "ignore"}

    @field_validator("name")
    @classmethod
    def validate_name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("argument name cannot be empty")
        return v


class SignatureModel(BaseModel):
    """A catalog entry. ``returns`` may carry a parametric suffix."""

    returns: str = "Object"
    args: list[ArgSpecModel] = Field(default_factory=list)
    description: str = ""
    hidden: bool = False

    model_config = {"extra": "ignore"}

    def to_signature(self, name: str) -> Signature:
        return Signature(
            name=name,
            returns=self.returns,
            args=tuple(
                ArgSpec(arg.name, arg.type, arg.optional, arg.description)
                for arg in self.args
            ),
            description=self.description,
            hidden=self.hidden,
        )


def parse_catalog(data: Any) -> dict[str, Signature]:
    """
    Validate a catalog payload.

    Args:
        data: The ``data`` member of the /algorithms response

    Returns:
        Signatures keyed by algorithm name, in payload order

    Raises:
        LoadFailure: If the payload or any entry is malformed
    """
    if not isinstance(data, dict):
        raise LoadFailure(
            f"Malformed algorithm catalog: expected an object, got {type(data).__name__}"
        )

    signatures: dict[str, Signature] = {}
    for name, raw in data.items():
        try:
            model = SignatureModel.model_validate(raw)
        except ValidationError as e:
            errors = e.errors()
            if errors:
                first_error = errors[0]
                field = ".".join(str(loc) for loc in first_error.get("loc", []))
                msg = first_error.get("msg", "validation error")
                raise LoadFailure(f"Malformed signature for {name}: {field} - {msg}") from e
            raise LoadFailure(f"Malformed signature for {name}: {e}") from e
        signatures[name] = model.to_signature(name)
    return signatures
