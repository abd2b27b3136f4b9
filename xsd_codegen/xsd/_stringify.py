"""Stringify the resolved schemas."""

from typing import List, Optional, Union

from xsd_codegen import stringify as stringify_mod
from xsd_codegen.common import assert_never
from xsd_codegen.xsd import _types
from xsd_codegen.xsd._types import (
    Attribute,
    Builtin,
    ComplexType,
    Element,
    LinkedType,
    Restriction,
    Schema,
    SimpleType,
    Type,
)


def _reference(that: Type) -> str:
    """Refer to the type by name to avoid endless recursion through the bases."""
    if isinstance(that, Builtin):
        return f"Reference to the built-in type {that.value}"
    elif isinstance(that, SimpleType):
        return f"Reference to the simple type {that.name}"
    elif isinstance(that, ComplexType):
        return f"Reference to the complex type {that.name}"
    elif isinstance(that, LinkedType):
        return f"Reference to the unresolved type {that.name}"
    else:
        assert_never(that)

    raise AssertionError("Should not have gotten here")


def _stringify_linked_type(that: LinkedType) -> stringify_mod.Entity:
    return stringify_mod.Entity(
        name=that.__class__.__name__,
        properties=[stringify_mod.Property("name", str(that.name))],
    )


def _stringify_restriction(that: Restriction) -> stringify_mod.Entity:
    return stringify_mod.Entity(
        name=that.__class__.__name__,
        properties=[
            stringify_mod.Property("enumeration", list(that.enumeration)),
            stringify_mod.Property(
                "minimum", str(that.minimum) if that.minimum is not None else None
            ),
            stringify_mod.Property("min_exclusive", that.min_exclusive),
            stringify_mod.Property(
                "maximum", str(that.maximum) if that.maximum is not None else None
            ),
            stringify_mod.Property("max_exclusive", that.max_exclusive),
            stringify_mod.Property("min_length", that.min_length),
            stringify_mod.Property("max_length", that.max_length),
            stringify_mod.Property("precision", that.precision),
            stringify_mod.Property("total_digits", that.total_digits),
            stringify_mod.Property(
                "pattern", that.pattern.pattern if that.pattern is not None else None
            ),
            stringify_mod.Property("documentation", that.documentation),
        ],
    )


def _stringify_simple_type(that: SimpleType) -> stringify_mod.Entity:
    return stringify_mod.Entity(
        name=that.__class__.__name__,
        properties=[
            stringify_mod.Property("name", str(that.name)),
            stringify_mod.Property("base", _reference(that.base)),
            stringify_mod.Property("anonymous", that.anonymous),
            stringify_mod.Property("is_list", that.is_list),
            stringify_mod.Property("union", [_reference(member) for member in that.union]),
            stringify_mod.Property("restriction", stringify(that.restriction)),
            stringify_mod.Property("documentation", that.documentation),
        ],
    )


def _stringify_element(that: Element) -> stringify_mod.Entity:
    return stringify_mod.Entity(
        name=that.__class__.__name__,
        properties=[
            stringify_mod.Property("name", str(that.name)),
            stringify_mod.Property("type", _reference(that.type)),
            stringify_mod.Property("plural", that.plural),
            stringify_mod.Property("optional", that.optional),
            stringify_mod.Property("nillable", that.nillable),
            stringify_mod.Property("wildcard", that.wildcard),
            stringify_mod.Property("abstract", that.abstract),
            stringify_mod.Property("default", that.default),
            stringify_mod.Property("documentation", that.documentation),
            stringify_mod.Property(
                "extra_attributes",
                {str(name): value for name, value in that.extra_attributes.items()},
            ),
            stringify_mod.PropertyEllipsis("scope", that.scope),
        ],
    )


def _stringify_attribute(that: Attribute) -> stringify_mod.Entity:
    return stringify_mod.Entity(
        name=that.__class__.__name__,
        properties=[
            stringify_mod.Property("name", str(that.name)),
            stringify_mod.Property("type", _reference(that.type)),
            stringify_mod.Property("plural", that.plural),
            stringify_mod.Property("optional", that.optional),
            stringify_mod.Property("default", that.default),
            stringify_mod.Property("documentation", that.documentation),
            stringify_mod.Property(
                "extra_attributes",
                {str(name): value for name, value in that.extra_attributes.items()},
            ),
            stringify_mod.PropertyEllipsis("scope", that.scope),
        ],
    )


def _stringify_complex_type(that: ComplexType) -> stringify_mod.Entity:
    return stringify_mod.Entity(
        name=that.__class__.__name__,
        properties=[
            stringify_mod.Property("name", str(that.name)),
            stringify_mod.Property("base", _reference(that.base)),
            stringify_mod.Property("anonymous", that.anonymous),
            stringify_mod.Property("abstract", that.abstract),
            stringify_mod.Property("mixed", that.mixed),
            stringify_mod.Property("extends", that.extends),
            stringify_mod.Property("elements", list(map(stringify, that.elements))),
            stringify_mod.Property(
                "attributes", list(map(stringify, that.attributes))
            ),
            stringify_mod.Property("documentation", that.documentation),
        ],
    )


def _stringify_schema(that: Schema) -> stringify_mod.Entity:
    types = []  # type: List[stringify_mod.PrimitiveStringifiable]
    for name, a_type in that.types.items():
        if isinstance(a_type, Builtin) or _types.xml_name(a_type) != name:
            # Aliases and built-ins are listed by reference only.
            types.append(f"{name}: {_reference(a_type)}")
        else:
            types.append(stringify(a_type))

    return stringify_mod.Entity(
        name=that.__class__.__name__,
        properties=[
            stringify_mod.Property("target_namespace", that.target_namespace),
            stringify_mod.Property("types", types),
            stringify_mod.Property("documentation", that.documentation),
        ],
    )


Dumpable = Union[
    Attribute,
    ComplexType,
    Element,
    LinkedType,
    Restriction,
    Schema,
    SimpleType,
]

stringify_mod.assert_all_public_types_listed_as_dumpables(
    dumpable=Dumpable, types_module=_types
)

_DISPATCH = {
    Attribute: _stringify_attribute,
    ComplexType: _stringify_complex_type,
    Element: _stringify_element,
    LinkedType: _stringify_linked_type,
    Restriction: _stringify_restriction,
    Schema: _stringify_schema,
    SimpleType: _stringify_simple_type,
}

stringify_mod.assert_dispatch_exhaustive(dispatch=_DISPATCH, dumpable=Dumpable)


def stringify(that: Optional[Dumpable]) -> Optional[stringify_mod.Entity]:
    """Dispatch to the correct ``_stringify_*`` method."""
    if that is None:
        return None

    stringify_func = _DISPATCH.get(that.__class__, None)
    if stringify_func is None:
        raise AssertionError(
            f"No stringify function could be found for the class {that.__class__}"
        )

    stringified = stringify_func(that)  # type: ignore
    assert isinstance(stringified, stringify_mod.Entity)
    stringify_mod.assert_compares_against_dict(stringified, that)

    return stringified


def dump(that: Optional[Dumpable]) -> str:
    """Produce a string representation of the ``that`` for testing or debugging."""
    if that is None:
        return repr(None)

    stringified = stringify(that)
    return stringify_mod.dump(stringified)
