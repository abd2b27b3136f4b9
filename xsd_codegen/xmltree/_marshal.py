"""Serialize the trees back to XML text."""
import io
from typing import Dict, List, Tuple
from xml.sax.saxutils import escape, quoteattr

from xsd_codegen.xmltree._types import Element, MAX_DEPTH, QName, XML_NS


def _spell(
    name: QName, mapping: Dict[str, str], declarations: List[Tuple[str, str]]
) -> str:
    """
    Spell the ``name`` with a prefix of the ``mapping``.

    If no prefix is bound to the namespace of the ``name``, declare a new one
    in both ``mapping`` and ``declarations``.
    """
    if name.space == XML_NS:
        return f"xml:{name.local}"

    for prefix, namespace in mapping.items():
        if namespace == name.space:
            return name.local if prefix == "" else f"{prefix}:{name.local}"

    if name.space == "":
        if mapping.get("", "") != "":
            mapping[""] = ""
            declarations.append(("", ""))
        return name.local

    counter = 0
    while f"ns{counter}" in mapping:
        counter += 1

    prefix = f"ns{counter}"
    mapping[prefix] = name.space
    declarations.append((prefix, name.space))
    return f"{prefix}:{name.local}"


def _write(
    element: Element,
    outer_mapping: Dict[str, str],
    writer: io.StringIO,
    depth: int,
    max_depth: int,
) -> None:
    if depth > max_depth:
        writer.write("<!-- nested too deep, truncated -->")
        return

    mapping = dict(outer_mapping)
    declarations = []  # type: List[Tuple[str, str]]
    for prefix, namespace in element.scope.mapping().items():
        if outer_mapping.get(prefix) != namespace:
            mapping[prefix] = namespace
            declarations.append((prefix, namespace))

    tag = _spell(element.name, mapping, declarations)

    attribute_parts = []  # type: List[str]
    for attr in element.attrs:
        if attr.name.space == "":
            attribute_name = attr.name.local
        else:
            # Attributes are never in the default namespace.
            attribute_mapping = {
                prefix: namespace for prefix, namespace in mapping.items() if prefix
            }
            attribute_name = _spell(attr.name, attribute_mapping, declarations)
            mapping.update(attribute_mapping)

        attribute_parts.append(f"{attribute_name}={quoteattr(attr.value)}")

    declaration_parts = [
        f"xmlns={quoteattr(namespace)}"
        if prefix == ""
        else f"xmlns:{prefix}={quoteattr(namespace)}"
        for prefix, namespace in declarations
    ]

    opening = " ".join([tag] + declaration_parts + attribute_parts)

    if len(element.children) == 0 and element.text == "":
        writer.write(f"<{opening}/>")
    else:
        writer.write(f"<{opening}>")
        writer.write(escape(element.text))
        for child in element.children:
            _write(
                element=child,
                outer_mapping=mapping,
                writer=writer,
                depth=depth + 1,
                max_depth=max_depth,
            )
            writer.write(escape(child.tail))
        writer.write(f"</{tag}>")


def marshal(element: Element, max_depth: int = MAX_DEPTH) -> str:
    """
    Serialize the ``element`` and its descendants as XML text.

    The namespace declarations are written wherever they change so that
    the prefixed names in attribute values can be interpreted by the reader.
    The elements nested deeper than ``max_depth`` are left out.
    """
    writer = io.StringIO()
    _write(
        element=element,
        outer_mapping=dict(),
        writer=writer,
        depth=0,
        max_depth=max_depth,
    )
    return writer.getvalue()
