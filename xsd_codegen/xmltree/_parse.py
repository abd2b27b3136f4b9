"""Parse XML documents into namespace-aware trees."""
import xml.etree.ElementTree as ET
from typing import List, Optional, Tuple

from icontract import ensure

from xsd_codegen.xmltree._types import (
    Attr,
    Element,
    MAX_DEPTH,
    QName,
    Scope,
)


def _split_clark(name: str) -> QName:
    """Split the name in Clark notation as it is reported by :py:mod:`ElementTree`."""
    if name.startswith("{"):
        space, _, local = name[1:].partition("}")
        return QName(space, local)

    return QName("", name)


@ensure(lambda result: (result[0] is not None) ^ (result[1] is not None))
def parse(data: bytes) -> Tuple[Optional[Element], Optional[Exception]]:
    """
    Parse the ``data`` into a tree of elements.

    Every element records the namespace declarations in effect at its position
    so that the prefixed names in the attribute values can be resolved later.

    :param data: content of an XML document
    :return: the root element, or the parse exception
    """
    parser = ET.XMLPullParser(events=("start-ns", "start", "end"))
    try:
        parser.feed(data)
        parser.close()
    except ET.ParseError as exception:
        return None, exception

    root = None  # type: Optional[Element]

    # Stack of (element in ElementTree, our element)
    stack = []  # type: List[Tuple[ET.Element, Element]]

    pending_bindings = []  # type: List[Tuple[str, str]]

    for event, payload in parser.read_events():
        if event == "start-ns":
            prefix, namespace = payload
            pending_bindings.append((prefix, namespace))

        elif event == "start":
            if len(stack) >= MAX_DEPTH:
                return None, ValueError(
                    f"The document is nested deeper than {MAX_DEPTH} levels"
                )

            outer_scope = stack[-1][1].scope if len(stack) > 0 else Scope()
            scope = (
                Scope(outer_scope.bindings + tuple(pending_bindings))
                if len(pending_bindings) > 0
                else outer_scope
            )
            pending_bindings = []

            element = Element(
                name=_split_clark(payload.tag),
                attrs=[
                    Attr(_split_clark(key), value)
                    for key, value in payload.attrib.items()
                ],
                scope=scope,
            )

            if len(stack) > 0:
                stack[-1][1].children.append(element)
            else:
                root = element

            stack.append((payload, element))

        elif event == "end":
            et_element, element = stack.pop()
            element.text = et_element.text if et_element.text is not None else ""

            # The tails of the children are complete only once the parent ends.
            for et_child, child in zip(et_element, element.children):
                child.tail = et_child.tail if et_child.tail is not None else ""

        else:
            raise AssertionError(f"Unexpected event: {event}")

    if root is None:
        return None, ValueError("The document contains no element")

    return root, None
