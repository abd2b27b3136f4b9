"""Compose predicates over the nodes of schema trees."""
from xsd_codegen.xmltree import Element, Predicate, QName
from xsd_codegen.xsd._types import SCHEMA_NS

#: Marker attribute set on the types whose names we synthesized
ANONYMOUS_MARKER = "_anonymous"


def and_(*predicates: Predicate) -> Predicate:
    """Match the nodes which satisfy all the ``predicates``."""

    def predicate(node: Element) -> bool:
        return all(a_predicate(node) for a_predicate in predicates)

    return predicate


def or_(*predicates: Predicate) -> Predicate:
    """Match the nodes which satisfy at least one of the ``predicates``."""

    def predicate(node: Element) -> bool:
        return any(a_predicate(node) for a_predicate in predicates)

    return predicate


def not_(a_predicate: Predicate) -> Predicate:
    """Match the nodes which do not satisfy ``a_predicate``."""

    def predicate(node: Element) -> bool:
        return not a_predicate(node)

    return predicate


def is_elem(space: str, local: str) -> Predicate:
    """Match the nodes named ``{space}local``."""
    name = QName(space, local)

    def predicate(node: Element) -> bool:
        return node.name == name

    return predicate


def is_schema_elem(*locals_: str) -> Predicate:
    """Match the XSD nodes with any of the given local names."""
    local_set = frozenset(locals_)

    def predicate(node: Element) -> bool:
        return node.name.space == SCHEMA_NS and node.name.local in local_set

    return predicate


def has_attr(local: str, space: str = "") -> Predicate:
    """Match the nodes which carry the attribute."""

    def predicate(node: Element) -> bool:
        return node.attr(local, space) is not None

    return predicate


def has_attr_value(local: str, value: str, space: str = "") -> Predicate:
    """Match the nodes where the attribute has exactly the ``value``."""

    def predicate(node: Element) -> bool:
        return node.attr(local, space) == value

    return predicate


def has_child(a_predicate: Predicate) -> Predicate:
    """Match the nodes with at least one direct child matching ``a_predicate``."""

    def predicate(node: Element) -> bool:
        return any(a_predicate(child) for child in node.children)

    return predicate


is_type = is_schema_elem("complexType", "simpleType")

is_anonymous_type = and_(is_type, not_(has_attr("name")))

has_anonymous_type = has_child(is_anonymous_type)

is_group = is_schema_elem("group", "attributeGroup")

has_groups = has_child(is_group)

is_element_or_attribute = is_schema_elem("element", "attribute")
