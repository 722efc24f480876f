"""Call signature models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ParameterDoc(BaseModel):
    """One documented entry of a parameter list.

    Attributes:
        name: Parameter name, or None for nameless "Type:" items.
        type: Raw type expression (e.g. "string|Buffer").
        description: Free text following the type.
        default: Value given after a "**Default:**" marker.
        optional: True when the description flags the parameter as optional.
        is_return: True for "Returns:" items.
        is_extends: True for "Extends:" items documenting a superclass.
        options: Documented properties of an options object.
    """

    name: str | None = None
    type: str | None = None
    description: str | None = None
    default: str | None = None
    optional: bool = False
    is_return: bool = False
    is_extends: bool = False
    options: list[ParameterDoc] = Field(default_factory=list)


class SignatureParameter(BaseModel):
    """A parameter as it appears in a call signature."""

    name: str
    optional: bool = False
    default: str | None = None
    type: str | None = None
    description: str | None = None


class ReturnType(BaseModel):
    type: str
    description: str | None = None


class Extends(BaseModel):
    type: str


class Signature(BaseModel):
    """Parsed call shape of a callable heading.

    ``raw_params`` keeps the comma-split parameter tokens as written (bracket
    notation included) so that overloads can be enumerated later.
    """

    model_config = ConfigDict(populate_by_name=True)

    params: list[SignatureParameter] = Field(default_factory=list)
    return_: ReturnType | None = Field(default=None, alias="return")
    extends: Extends | None = None
    raw_params: list[str] = Field(default_factory=list)
