"""Provide common functionality across different tests."""
import textwrap
from typing import List, Optional, Sequence

from xsd_codegen import xsd
from xsd_codegen.common import Error, error_message
from xsd_codegen.xmltree import QName

# pylint: disable=missing-function-docstring

#: Target namespace used throughout the test schemas
TNS = "urn:test"


def schema_document(body: str, attributes: str = "") -> bytes:
    """Wrap the ``body`` in a ``<schema>`` with the test target namespace."""
    return (
        f'<xs:schema xmlns:xs="{xsd.SCHEMA_NS}"\n'
        f'           xmlns:tns="{TNS}"\n'
        f'           targetNamespace="{TNS}"{" " + attributes if attributes else ""}>\n'
        f"{textwrap.indent(textwrap.dedent(body).strip(), '  ')}\n"
        f"</xs:schema>\n"
    ).encode("utf-8")


def parse_or_fail(docs: Sequence[bytes]) -> List[xsd.Schema]:
    schemas, error = xsd.parse(docs)
    if error is not None:
        raise AssertionError(
            f"Unexpected error when parsing the schemas:\n{error_message(error)}"
        )

    assert schemas is not None
    return schemas


def parse_error(docs: Sequence[bytes]) -> Error:
    schemas, error = xsd.parse(docs)
    if error is None:
        raise AssertionError(f"Expected an error, but got: {schemas!r}")

    return error


def find(schemas: Sequence[xsd.Schema], local: str, space: str = TNS) -> xsd.Type:
    a_type = xsd.find_type(schemas, QName(space, local))
    if a_type is None:
        raise AssertionError(f"The type {QName(space, local)} could not be found")

    return a_type


def find_complex(
    schemas: Sequence[xsd.Schema], local: str, space: str = TNS
) -> xsd.ComplexType:
    a_type = find(schemas, local, space)
    assert isinstance(a_type, xsd.ComplexType), a_type
    return a_type


def find_simple(
    schemas: Sequence[xsd.Schema], local: str, space: str = TNS
) -> xsd.SimpleType:
    a_type = find(schemas, local, space)
    assert isinstance(a_type, xsd.SimpleType), a_type
    return a_type


def element_named(a_type: xsd.ComplexType, local: str) -> xsd.Element:
    for element in a_type.elements:
        if element.name.local == local:
            return element

    raise AssertionError(
        f"The element {local!r} could not be found in {a_type.name}; got: "
        f"{[str(element.name) for element in a_type.elements]}"
    )


def attribute_named(a_type: xsd.ComplexType, local: str) -> Optional[xsd.Attribute]:
    for attribute in a_type.attributes:
        if attribute.name.local == local:
            return attribute

    return None
