"""Parse call signatures out of headings and render them for display."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from apidoc2json.schemas import (
    Extends,
    HeadingData,
    HeadingType,
    ParameterDoc,
    ReturnType,
    Signature,
    SignatureParameter,
)

logger = logging.getLogger(__name__)

_PARAMETERS_RE = re.compile(r"\((.*)\)")
_RETURN_SUFFIX_RE = re.compile(r"\)\s*:\s*([^`]+?)\s*`?\s*$")
_EXTENDS_RE = re.compile(r"\bextends\s+`?([\w.$]+)")
_CALLABLE_NAME_RE = re.compile(r"([\w.$\[\]]+)\s*\(")
_UNION_RE = re.compile(r"\s*\|\s*")


def parse_signature(
    heading: HeadingData, parameter_docs: Sequence[ParameterDoc] = ()
) -> Signature | None:
    """Build the signature of a callable heading.

    Parameters come from the parenthesised list in the heading text, where
    ``[...]`` groups and a ``?`` suffix mark optional parameters and
    ``name=value`` gives a default. Documented parameters (from the entry's
    leading list) fill in types, descriptions and defaults by name.

    Returns:
        The signature, or None when the heading is not callable or declares
        no parameter list at all.
    """
    if heading.type is HeadingType.CLASS:
        return _parse_class_signature(heading, parameter_docs)

    if heading.type not in {HeadingType.CTOR, HeadingType.METHOD, HeadingType.CLASS_METHOD}:
        return None

    match = _PARAMETERS_RE.search(heading.text)
    if match is None:
        logger.debug("No parameter list in callable heading %r", heading.text)
        return None

    documented = {doc.name: doc for doc in parameter_docs if doc.name and not doc.is_return}
    params: list[SignatureParameter] = []
    raw_params: list[str] = []
    depth = 0

    for token in _split_parameters(match.group(1)):
        name, default, optional, depth, raw = _parse_token(token, depth)
        if not name:
            continue
        doc = documented.get(name)
        if doc is not None:
            default = default if default is not None else doc.default
            optional = optional or doc.optional
        params.append(
            SignatureParameter(
                name=name,
                optional=optional,
                default=default,
                type=doc.type if doc else None,
                description=doc.description if doc else None,
            )
        )
        raw_params.append(raw)

    return Signature(params=params, return_=_parse_return(heading, parameter_docs), raw_params=raw_params)


def _parse_class_signature(
    heading: HeadingData, parameter_docs: Sequence[ParameterDoc]
) -> Signature:
    extends = None
    match = _EXTENDS_RE.search(heading.text)
    if match:
        extends = Extends(type=match.group(1))
    else:
        for doc in parameter_docs:
            if doc.is_extends and doc.type:
                extends = Extends(type=doc.type)
                break
    return Signature(extends=extends)


def _parse_return(
    heading: HeadingData, parameter_docs: Sequence[ParameterDoc]
) -> ReturnType | None:
    for doc in parameter_docs:
        if doc.is_return and doc.type:
            return ReturnType(type=doc.type, description=doc.description)
    match = _RETURN_SUFFIX_RE.search(heading.text)
    if match:
        return ReturnType(type=match.group(1).strip())
    return None


def _split_parameters(text: str) -> list[str]:
    """Split on top-level commas, leaving commas inside default values alone."""
    tokens: list[str] = []
    current: list[str] = []
    nesting = 0
    for char in text:
        if char in "({":
            nesting += 1
        elif char in ")}":
            nesting -= 1
        if char == "," and nesting == 0:
            tokens.append("".join(current))
            current = []
            continue
        current.append(char)
    tokens.append("".join(current))
    return [token for token in tokens if token.strip()]


def _parse_token(token: str, depth: int) -> tuple[str, str | None, bool, int, str]:
    """Parse one comma-split token given the bracket depth before it.

    Returns:
        The name, default, optional flag, bracket depth after the token and
        the token rewritten in pure bracket notation (``a?`` becomes ``[a]``).
    """
    stripped = token.strip()

    leading = ""
    while stripped[:1] in {"[", "]"}:
        leading += stripped[0]
        depth += 1 if stripped[0] == "[" else -1
        stripped = stripped[1:].lstrip()
    optional = depth > 0

    trailing = ""
    while stripped[-1:] in {"[", "]"}:
        trailing = stripped[-1] + trailing
        stripped = stripped[:-1].rstrip()
    for char in trailing:
        depth += 1 if char == "[" else -1

    default = None
    if "=" in stripped:
        stripped, default = (part.strip() for part in stripped.split("=", 1))

    name = stripped
    marked = name.endswith("?")
    if marked:
        name = name[:-1].rstrip()
        optional = True

    # A bare "a?" becomes its own optional group.
    if marked and not leading and not trailing:
        raw = f"[{name}]"
    else:
        raw = f"{leading}{name}{trailing}"
    return name, default, optional, depth, raw


def generate_signature(name: str, signature: Signature, prefix: str = "") -> str:
    """Render a signature as ``name(a, b?): ret``.

    Optional parameters and parameters with a default get a ``?`` marker;
    union return types are spaced out as ``a | b``. A signature that extends
    a base renders as ``class Name extends Base`` instead.
    """
    if signature.extends is not None:
        return f"class {prefix}{name} extends {signature.extends.type}"

    params = ", ".join(
        f"{param.name}?" if param.optional or param.default is not None else param.name
        for param in signature.params
    )
    result = f"{prefix}{name}({params})"
    if signature.return_ is not None:
        result += f": {_UNION_RE.sub(' | ', signature.return_.type)}"
    return result


def render_signature(heading: HeadingData, signature: Signature) -> str:
    """Render the display signature of a classified heading."""
    if heading.type is HeadingType.CLASS:
        if signature.extends is not None:
            return generate_signature(heading.name, signature)
        return f"class {heading.name}"

    prefix = "new " if heading.type is HeadingType.CTOR else ""
    return generate_signature(callable_display_name(heading), signature, prefix)


def callable_display_name(heading: HeadingData) -> str:
    """Return the name as written before the parameter list (``fs.open``)."""
    text = heading.text.strip("`")
    if heading.type is HeadingType.CLASS_METHOD:
        text = text.split("`", 1)[-1]
    if heading.type is HeadingType.CTOR:
        text = re.sub(r"^`?new\s+", "", text)
    match = _CALLABLE_NAME_RE.search(text)
    return match.group(1) if match else heading.name
