"""Parse the normalized schema trees into the object model and resolve the types."""
import decimal
import inspect
import re
from typing import (
    List,
    Mapping,
    MutableMapping,
    Optional,
    Sequence,
    Set,
    Tuple,
)

from icontract import ensure

from xsd_codegen.common import Error, assert_never
from xsd_codegen.xmltree import Attr, Element as Node, QName
from xsd_codegen.xsd._normalize import (
    NAMESPACE_MARKER,
    expand_complex_type,
    normalize,
    target_namespace,
)
from xsd_codegen.xsd._query import ANONYMOUS_MARKER
from xsd_codegen.xsd._types import (
    Attribute,
    Builtin,
    ComplexType,
    Element,
    LinkedType,
    Restriction,
    SCHEMA_NS,
    Schema,
    SimpleType,
    Type,
    base_of,
    builtin_schema,
    parse_builtin,
    xml_name,
)

#: Value of ``maxOccurs="unbounded"``
UNBOUNDED = -1

#: Local name of the synthetic type listing the top-level elements of a namespace
SELF_TYPE_LOCAL = "_self"

#: Lexical form of an XSD integer
_INTEGER_RE = re.compile(r"[+-]?[0-9]+")

#: Lexical form of an XSD non-negative integer
_NON_NEGATIVE_INTEGER_RE = re.compile(r"\+?[0-9]+")

#: Built-in types whose values are lists
_BUILTIN_LISTS = (Builtin.ENTITIES, Builtin.IDREFS, Builtin.NMTOKENS)

#: Attributes of element declarations which we model explicitly
_ELEMENT_ATTRIBUTES = frozenset(
    [
        QName("", "name"),
        QName("", "type"),
        QName("", "minOccurs"),
        QName("", "maxOccurs"),
        QName("", "nillable"),
        QName("", "abstract"),
        QName("", "default"),
        QName("", "fixed"),
        QName("", "form"),
        QName("", NAMESPACE_MARKER),
    ]
)

#: Attributes of attribute declarations which we model explicitly
_ATTRIBUTE_ATTRIBUTES = frozenset(
    [
        QName("", "name"),
        QName("", "type"),
        QName("", "use"),
        QName("", "default"),
        QName("", "fixed"),
        QName("", "form"),
        QName("", NAMESPACE_MARKER),
    ]
)


def is_self_type(a_type: Type) -> bool:
    """Check whether ``a_type`` is the synthetic type listing the top-level elements."""
    return (
        isinstance(a_type, ComplexType)
        and a_type.anonymous
        and a_type.name.local.startswith(SELF_TYPE_LOCAL)
    )


class _Context:
    """Capture the settings of the schema which are in effect for a declaration."""

    def __init__(
        self,
        target_namespace: str,
        elements_qualified: bool,
        attributes_qualified: bool,
    ) -> None:
        """Initialize with the given values."""
        self.target_namespace = target_namespace
        self.elements_qualified = elements_qualified
        self.attributes_qualified = attributes_qualified


def _context_of(root: Node) -> _Context:
    return _Context(
        target_namespace=target_namespace(root),
        elements_qualified=root.attr("elementFormDefault") == "qualified",
        attributes_qualified=root.attr("attributeFormDefault") == "qualified",
    )


def _is_xsd(node: Node, local: str) -> bool:
    return node.name.space == SCHEMA_NS and node.name.local == local


# region Conversion of attribute values


@ensure(lambda result: (result[0] is not None) ^ (result[1] is not None))
def _parse_bool(node: Node, local: str) -> Tuple[Optional[bool], Optional[Error]]:
    """Parse the boolean attribute, where a missing or empty value means false."""
    value = node.attr(local)
    if value is None:
        return False, None

    value = value.strip()
    if value in ("", "0", "false"):
        return False, None

    if value in ("1", "true"):
        return True, None

    return None, Error(
        node, f"Expected a boolean in the attribute {local!r}, but got: {value!r}"
    )


@ensure(lambda result: (result[0] is not None) ^ (result[1] is not None))
def _parse_occurs(node: Node, local: str) -> Tuple[Optional[int], Optional[Error]]:
    """
    Parse ``minOccurs`` or ``maxOccurs``.

    A missing or empty value means 1, ``unbounded`` is :py:data:`UNBOUNDED`.
    """
    value = node.attr(local)
    if value is None or value.strip() == "":
        return 1, None

    value = value.strip()
    if value == "unbounded":
        return UNBOUNDED, None

    if _NON_NEGATIVE_INTEGER_RE.fullmatch(value) is None:
        return None, Error(
            node,
            f"Expected a non-negative integer or 'unbounded' "
            f"in the attribute {local!r}, but got: {value!r}",
        )

    return int(value), None


def _is_plural(max_occurs: int) -> bool:
    return max_occurs == UNBOUNDED or max_occurs > 1


def _parse_type_reference(node: Node, local: str) -> Type:
    """Parse the prefixed name in the attribute as a reference to a type."""
    value = node.attr(local)
    if value is None:
        return Builtin.ANY_TYPE

    name = node.scope.resolve(value)
    builtin = parse_builtin(name)
    if builtin is not None:
        return builtin

    return LinkedType(name)


def _documentation(node: Node) -> str:
    """Join the ``<documentation>`` of the ``<annotation>`` children of ``node``."""
    parts = []  # type: List[str]
    for annotation in node.children:
        if not _is_xsd(annotation, "annotation"):
            continue

        for documentation in annotation.children:
            if not _is_xsd(documentation, "documentation"):
                continue

            text = inspect.cleandoc("".join(documentation.itertext()))
            if text != "":
                parts.append(text)

    return "\n\n".join(parts)


def _join_documentation(*parts: str) -> str:
    return "\n\n".join(part for part in parts if part != "")


def _declared_name(node: Node, context: _Context, qualified_by_default: bool) -> QName:
    """Resolve the name of an element or an attribute declaration."""
    name = node.attr("name")
    assert name is not None

    if ":" in name:
        return node.scope.resolve(name)

    namespace = node.attr(NAMESPACE_MARKER)
    if namespace is not None:
        return QName(namespace, name.strip())

    form = node.attr("form")
    qualified = form == "qualified" if form is not None else qualified_by_default

    return QName(context.target_namespace if qualified else "", name.strip())


# endregion

# region Elements and attributes


@ensure(lambda result: (result[0] is not None) ^ (result[1] is not None))
def _parse_element(
    node: Node, context: _Context
) -> Tuple[Optional[Element], Optional[Error]]:
    if node.attr("name") is None:
        return None, Error(node, "Expected the element declaration to have a name")

    min_occurs, error = _parse_occurs(node, "minOccurs")
    if error is not None:
        return None, error

    max_occurs, error = _parse_occurs(node, "maxOccurs")
    if error is not None:
        return None, error

    nillable, error = _parse_bool(node, "nillable")
    if error is not None:
        return None, error

    abstract, error = _parse_bool(node, "abstract")
    if error is not None:
        return None, error

    assert min_occurs is not None
    assert max_occurs is not None
    assert nillable is not None
    assert abstract is not None

    default = node.attr("default")
    if default is None:
        default = node.attr("fixed")

    return (
        Element(
            name=_declared_name(node, context, context.elements_qualified),
            type=_parse_type_reference(node, "type"),
            plural=min_occurs > 1 or _is_plural(max_occurs),
            optional=min_occurs == 0 or default is not None,
            nillable=nillable,
            wildcard=False,
            abstract=abstract,
            default=default,
            documentation=_documentation(node),
            extra_attributes={
                attr.name: attr.value
                for attr in node.attrs
                if attr.name not in _ELEMENT_ATTRIBUTES
            },
            scope=node.scope,
        ),
        None,
    )


@ensure(lambda result: (result[0] is not None) ^ (result[1] is not None))
def _parse_wildcard(node: Node) -> Tuple[Optional[Element], Optional[Error]]:
    """Parse an ``<any>`` as an element which stands for any element."""
    min_occurs, error = _parse_occurs(node, "minOccurs")
    if error is not None:
        return None, error

    max_occurs, error = _parse_occurs(node, "maxOccurs")
    if error is not None:
        return None, error

    assert min_occurs is not None
    assert max_occurs is not None

    return (
        Element(
            name=QName("", ""),
            type=Builtin.ANY_TYPE,
            plural=min_occurs > 1 or _is_plural(max_occurs),
            optional=min_occurs == 0,
            nillable=False,
            wildcard=True,
            abstract=False,
            default=None,
            documentation=_documentation(node),
            extra_attributes={attr.name: attr.value for attr in node.attrs},
            scope=node.scope,
        ),
        None,
    )


@ensure(lambda result: (result[0] is not None) ^ (result[1] is not None))
def _parse_attribute(
    node: Node, context: _Context
) -> Tuple[Optional[Attribute], Optional[Error]]:
    if node.attr("name") is None:
        return None, Error(node, "Expected the attribute declaration to have a name")

    default = node.attr("default")
    if default is None:
        default = node.attr("fixed")

    return (
        Attribute(
            name=_declared_name(node, context, context.attributes_qualified),
            type=_parse_type_reference(node, "type"),
            plural=False,
            optional=node.attr("use") != "required",
            default=default,
            documentation=_documentation(node),
            extra_attributes={
                attr.name: attr.value
                for attr in node.attrs
                if attr.name not in _ATTRIBUTE_ATTRIBUTES
            },
            scope=node.scope,
        ),
        None,
    )


def _join_elements(existing: Element, another: Element) -> None:
    """Merge ``another`` declaration of the same element into ``existing``."""
    existing.documentation = _join_documentation(
        existing.documentation, another.documentation
    )
    existing.abstract = existing.abstract and another.abstract
    existing.plural = existing.plural or another.plural
    existing.optional = existing.optional or another.optional
    existing.nillable = existing.nillable or another.nillable
    if existing.default != another.default:
        existing.default = None


def _collect_elements(
    node: Node,
    context: _Context,
    optional: bool,
    plural: bool,
    elements: List[Element],
) -> Optional[Error]:
    """
    Collect the elements from the particles nested in the ``node``.

    The elements nested in an optional or a repeated particle are themselves
    optional or plural, respectively. Only the first wildcard is collected.
    The repeated declarations of an element are merged.
    """
    for child in node.children:
        if child.name.space != SCHEMA_NS:
            continue

        if child.name.local in ("sequence", "choice", "all"):
            min_occurs, error = _parse_occurs(child, "minOccurs")
            if error is not None:
                return error

            max_occurs, error = _parse_occurs(child, "maxOccurs")
            if error is not None:
                return error

            assert min_occurs is not None
            assert max_occurs is not None

            error = _collect_elements(
                node=child,
                context=context,
                optional=optional or min_occurs == 0,
                plural=plural or _is_plural(max_occurs),
                elements=elements,
            )
            if error is not None:
                return error

        elif child.name.local == "element":
            element, error = _parse_element(child, context)
            if error is not None:
                return error

            assert element is not None
            element.optional = element.optional or optional
            element.plural = element.plural or plural

            existing = next(
                (
                    another
                    for another in elements
                    if not another.wildcard and another.name == element.name
                ),
                None,
            )
            if existing is not None:
                _join_elements(existing, element)
            else:
                elements.append(element)

        elif child.name.local == "any":
            if any(another.wildcard for another in elements):
                continue

            wildcard, error = _parse_wildcard(child)
            if error is not None:
                return error

            assert wildcard is not None
            wildcard.optional = wildcard.optional or optional
            wildcard.plural = wildcard.plural or plural
            elements.append(wildcard)

    return None


@ensure(lambda result: (result[0] is not None) ^ (result[1] is not None))
def _collect_attributes(
    node: Node, context: _Context
) -> Tuple[Optional[List[Attribute]], Optional[Error]]:
    """Collect the attributes declared in the ``node``, skipping the prohibited."""
    attributes = []  # type: List[Attribute]
    for attribute_node in node.search(SCHEMA_NS, "attribute"):
        if attribute_node.attr("use") == "prohibited":
            continue

        attribute, error = _parse_attribute(attribute_node, context)
        if error is not None:
            return None, error

        assert attribute is not None
        if any(another.name == attribute.name for another in attributes):
            continue

        attributes.append(attribute)

    return attributes, None


# endregion

# region Types


@ensure(lambda result: (result[0] is not None) ^ (result[1] is not None))
def _parse_restriction(node: Node) -> Tuple[Optional[Restriction], Optional[Error]]:
    """
    Parse the facets of a ``<restriction>``.

    The bounds and patterns which we can not interpret are dropped and noted in
    the documentation. Invalid lengths and digits are errors.
    """
    restriction = Restriction()
    notes = []  # type: List[str]
    patterns = []  # type: List[str]

    for facet in node.children:
        if facet.name.space != SCHEMA_NS:
            continue

        value = facet.attr("value")
        if value is None:
            value = ""

        local = facet.name.local

        if local == "enumeration":
            restriction.enumeration.append(value)

        elif local in ("minInclusive", "minExclusive", "maxInclusive", "maxExclusive"):
            try:
                number = decimal.Decimal(value.strip())
            except decimal.InvalidOperation:
                notes.append(
                    f"The facet {local} with the value {value!r} has been ignored "
                    f"as it could not be interpreted as a number."
                )
                continue

            if local.startswith("min"):
                restriction.minimum = number
                restriction.min_exclusive = local == "minExclusive"
            else:
                restriction.maximum = number
                restriction.max_exclusive = local == "maxExclusive"

        elif local in (
            "length",
            "minLength",
            "maxLength",
            "fractionDigits",
            "totalDigits",
        ):
            stripped = value.strip()
            if _INTEGER_RE.fullmatch(stripped) is None:
                return None, Error(
                    facet,
                    f"Expected an integer in the facet {local}, but got: {value!r}",
                )

            number_of = int(stripped)
            if number_of < 0:
                return None, Error(
                    facet,
                    f"Expected a non-negative integer in the facet {local}, "
                    f"but got: {number_of}",
                )

            if local == "length":
                restriction.min_length = number_of
                restriction.max_length = number_of
            elif local == "minLength":
                restriction.min_length = number_of
            elif local == "maxLength":
                restriction.max_length = number_of
            elif local == "fractionDigits":
                restriction.precision = number_of
            elif local == "totalDigits":
                restriction.total_digits = number_of
            else:
                raise AssertionError(f"Unexpected facet: {local}")

        elif local == "pattern":
            patterns.append(value)

    if len(patterns) > 0:
        joined = "|".join(patterns)
        try:
            restriction.pattern = re.compile(
                "|".join(f"(?:{pattern})" for pattern in patterns)
            )
        except re.error as exception:
            notes.append(
                f"The pattern {joined!r} has been ignored as it could not be "
                f"interpreted: {exception}"
            )

    restriction.documentation = _join_documentation(
        _documentation(node), *notes
    )

    return restriction, None


@ensure(lambda result: (result[0] is not None) ^ (result[1] is not None))
def _parse_simple_type(
    node: Node, context: _Context
) -> Tuple[Optional[SimpleType], Optional[Error]]:
    name_attr = node.attr("name")
    assert name_attr is not None, "Expected all types named after normalization"
    name = node.scope.resolve_default(name_attr, context.target_namespace)

    base = None  # type: Optional[Type]
    is_list = False
    union = []  # type: List[Type]
    restriction = Restriction()

    for child in node.children:
        if child.name.space != SCHEMA_NS:
            continue

        if child.name.local == "restriction":
            base = _parse_type_reference(child, "base")

            maybe_restriction, error = _parse_restriction(child)
            if error is not None:
                return None, Error(
                    node, f"Failed to parse the simple type {name}", underlying=[error]
                )

            assert maybe_restriction is not None
            restriction = maybe_restriction

        elif child.name.local == "list":
            base = _parse_type_reference(child, "itemType")
            is_list = True

        elif child.name.local == "union":
            member_types = child.attr("memberTypes")
            for member in (member_types or "").split():
                member_name = child.scope.resolve(member)
                builtin = parse_builtin(member_name)
                union.append(
                    builtin if builtin is not None else LinkedType(member_name)
                )

            base = Builtin.ANY_SIMPLE_TYPE

    if base is None:
        return None, Error(
            node,
            f"The simple type {name} is neither a restriction, nor a list, "
            f"nor a union",
        )

    return (
        SimpleType(
            name=name,
            base=base,
            anonymous=node.attr(ANONYMOUS_MARKER) == "true",
            is_list=is_list,
            union=union,
            restriction=restriction,
            documentation=_join_documentation(
                _documentation(node), restriction.documentation
            ),
        ),
        None,
    )


@ensure(lambda result: (result[0] is not None) ^ (result[1] is not None))
def _parse_complex_type(
    node: Node, context: _Context
) -> Tuple[Optional[ComplexType], Optional[Error]]:
    name_attr = node.attr("name")
    assert name_attr is not None, "Expected all types named after normalization"
    name = node.scope.resolve_default(name_attr, context.target_namespace)

    def wrap(error: Error) -> Error:
        return Error(
            node, f"Failed to parse the complex type {name}", underlying=[error]
        )

    abstract, error = _parse_bool(node, "abstract")
    if error is not None:
        return None, wrap(error)

    mixed, error = _parse_bool(node, "mixed")
    if error is not None:
        return None, wrap(error)

    assert abstract is not None
    assert mixed is not None

    base = None  # type: Optional[Type]
    extends = False
    elements = []  # type: List[Element]
    attributes = []  # type: List[Attribute]
    documentation_parts = [_documentation(node)]

    for content in node.children:
        if content.name.space != SCHEMA_NS or content.name.local not in (
            "simpleContent",
            "complexContent",
        ):
            continue

        documentation_parts.append(_documentation(content))

        if content.name.local == "simpleContent":
            mixed = True

        elif content.name.local == "complexContent":
            if content.attr("mixed") is not None:
                mixed, error = _parse_bool(content, "mixed")
                if error is not None:
                    return None, wrap(error)

                assert mixed is not None

        else:
            raise AssertionError(f"Unexpected content: {content.name}")

        for derivation in content.children:
            if derivation.name.space != SCHEMA_NS or derivation.name.local not in (
                "extension",
                "restriction",
            ):
                continue

            base = _parse_type_reference(derivation, "base")
            extends = derivation.name.local == "extension"
            documentation_parts.append(_documentation(derivation))

            if content.name.local == "complexContent":
                error = _collect_elements(
                    node=derivation,
                    context=context,
                    optional=False,
                    plural=False,
                    elements=elements,
                )
                if error is not None:
                    return None, wrap(error)

            maybe_attributes, error = _collect_attributes(derivation, context)
            if error is not None:
                return None, wrap(error)

            assert maybe_attributes is not None
            attributes.extend(maybe_attributes)

    if base is None:
        return None, Error(
            node,
            f"The complex type {name} is derived neither by extension "
            f"nor by restriction",
        )

    return (
        ComplexType(
            name=name,
            base=base,
            anonymous=node.attr(ANONYMOUS_MARKER) == "true",
            abstract=abstract,
            mixed=mixed,
            extends=extends,
            elements=elements,
            attributes=attributes,
            documentation=_join_documentation(*documentation_parts),
        ),
        None,
    )


@ensure(lambda result: (result[0] is not None) ^ (result[1] is not None))
def _parse_types(
    root: Node, context: _Context
) -> Tuple[Optional[MutableMapping[QName, Type]], Optional[Error]]:
    """Parse the types declared at the top level of the schema ``root``."""
    types = dict()  # type: MutableMapping[QName, Type]

    for child in root.children:
        a_type = None  # type: Optional[Type]

        if _is_xsd(child, "complexType"):
            a_type, error = _parse_complex_type(child, context)
        elif _is_xsd(child, "simpleType"):
            a_type, error = _parse_simple_type(child, context)
        else:
            continue

        if error is not None:
            return None, error

        assert a_type is not None
        types[a_type.name] = a_type

    return types, None


def _self_type_node(roots: Sequence[Node], local: str) -> Node:
    """Make a complex type listing the top-level elements of the ``roots``."""
    assert len(roots) > 0

    elements = []  # type: List[Node]
    for root in roots:
        for child in root.children:
            if _is_xsd(child, "element") and child.attr("name") is not None:
                copy = child.copy()
                copy.set_attr(NAMESPACE_MARKER, target_namespace(root))
                copy.set_attr("minOccurs", "0")
                elements.append(copy)

    node = Node(
        name=QName(SCHEMA_NS, "complexType"),
        attrs=[Attr(QName("", "name"), local), Attr(QName("", ANONYMOUS_MARKER), "true")],
        scope=roots[0].scope,
        children=[
            Node(
                name=QName(SCHEMA_NS, "sequence"),
                scope=roots[0].scope,
                children=elements,
            )
        ],
    )
    expand_complex_type(node)
    return node


# endregion

# region Resolution


def _resolve(a_type: Type, global_types: Mapping[QName, Type]) -> Optional[Type]:
    """Replace the placeholder with the type it names, if it is a placeholder."""
    if isinstance(a_type, LinkedType):
        builtin = parse_builtin(a_type.name)
        if builtin is not None:
            return builtin

        return global_types.get(a_type.name, None)

    return a_type


def _resolve_complex_type(
    a_type: ComplexType, global_types: Mapping[QName, Type]
) -> Optional[Error]:
    base = _resolve(a_type.base, global_types)
    if base is None:
        assert isinstance(a_type.base, LinkedType)
        return Error(None, f"The base type {a_type.base.name} has not been declared")

    a_type.base = base

    for element in a_type.elements:
        resolved = _resolve(element.type, global_types)
        if resolved is None:
            assert isinstance(element.type, LinkedType)
            return Error(
                None,
                f"The type {element.type.name} of the element {element.name} "
                f"has not been declared",
            )

        element.type = resolved

    for attribute in a_type.attributes:
        resolved = _resolve(attribute.type, global_types)
        if resolved is None:
            assert isinstance(attribute.type, LinkedType)
            return Error(
                None,
                f"The type {attribute.type.name} of the attribute {attribute.name} "
                f"has not been declared",
            )

        attribute.type = resolved
        attribute.plural = (
            isinstance(resolved, SimpleType) and resolved.is_list
        ) or resolved in _BUILTIN_LISTS

    return None


def _resolve_simple_type(
    a_type: SimpleType, global_types: Mapping[QName, Type]
) -> Optional[Error]:
    base = _resolve(a_type.base, global_types)
    if base is None:
        assert isinstance(a_type.base, LinkedType)
        return Error(None, f"The base type {a_type.base.name} has not been declared")

    a_type.base = base

    members = []  # type: List[Type]
    for member in a_type.union:
        resolved = _resolve(member, global_types)
        if resolved is None:
            assert isinstance(member, LinkedType)
            return Error(
                None, f"The member type {member.name} has not been declared"
            )

        members.append(resolved)

    a_type.union = members
    return None


def _resolve_partial_types(
    schemas: Sequence[Schema], global_types: Mapping[QName, Type]
) -> Optional[Error]:
    """Replace all the placeholders in all the types of all the ``schemas``."""
    for schema in schemas:
        for a_type in schema.types.values():
            if isinstance(a_type, ComplexType):
                error = _resolve_complex_type(a_type, global_types)
                if error is not None:
                    return Error(
                        None,
                        f"Failed to resolve the complex type {a_type.name}",
                        underlying=[error],
                    )

            elif isinstance(a_type, SimpleType):
                error = _resolve_simple_type(a_type, global_types)
                if error is not None:
                    return Error(
                        None,
                        f"Failed to resolve the simple type {a_type.name}",
                        underlying=[error],
                    )

            elif isinstance(a_type, (Builtin, LinkedType)):
                pass

            else:
                assert_never(a_type)

    return None


def _check_base_chains(schemas: Sequence[Schema]) -> Optional[Error]:
    """Check that no type is derived, directly or indirectly, from itself."""
    for schema in schemas:
        for a_type in schema.types.values():
            chain = [a_type]  # type: List[Type]
            seen = {id(a_type)}  # type: Set[int]

            base = base_of(a_type)
            while base is not None:
                chain.append(base)
                if id(base) in seen:
                    names = " -> ".join(str(xml_name(link)) for link in chain)
                    return Error(
                        None, f"The type is derived from itself: {names}"
                    )

                seen.add(id(base))
                base = base_of(base)

    return None


def _propagate_mixed(schemas: Sequence[Schema]) -> None:
    """
    Propagate the mixed content from the base types to the derived ones.

    An extension of a mixed type is mixed, and so is an extension of
    ``anyType``. A type with a simple base carries character data, so it is
    mixed as well.
    """
    done = set()  # type: Set[int]

    for schema in schemas:
        for a_type in schema.types.values():
            chain = []  # type: List[ComplexType]
            cursor = a_type  # type: Type
            while isinstance(cursor, ComplexType) and id(cursor) not in done:
                chain.append(cursor)
                cursor = cursor.base

            for derived in reversed(chain):
                base = derived.base
                if not derived.mixed:
                    if isinstance(base, Builtin):
                        if base is Builtin.ANY_TYPE:
                            derived.mixed = derived.extends
                    elif isinstance(base, ComplexType):
                        if derived.extends:
                            derived.mixed = base.mixed
                    elif isinstance(base, SimpleType):
                        derived.mixed = True
                    elif isinstance(base, LinkedType):
                        raise AssertionError(
                            f"Unexpected unresolved base of {derived.name}"
                        )
                    else:
                        assert_never(base)

                done.add(id(derived))


# endregion

# region Invariants


def _has_linked_types(schemas: Sequence[Schema]) -> bool:
    """Check whether any placeholder remains in the ``schemas``."""
    for schema in schemas:
        for a_type in schema.types.values():
            if isinstance(a_type, LinkedType):
                return True

            if isinstance(a_type, SimpleType):
                if isinstance(a_type.base, LinkedType) or any(
                    isinstance(member, LinkedType) for member in a_type.union
                ):
                    return True

            elif isinstance(a_type, ComplexType):
                if (
                    isinstance(a_type.base, LinkedType)
                    or any(
                        isinstance(element.type, LinkedType)
                        for element in a_type.elements
                    )
                    or any(
                        isinstance(attribute.type, LinkedType)
                        for attribute in a_type.attributes
                    )
                ):
                    return True

    return False


def _base_chains_end_in_builtins(schemas: Sequence[Schema]) -> bool:
    """Check that following the bases from any type ends in a built-in type."""
    bound = sum(len(schema.types) for schema in schemas) + 1

    for schema in schemas:
        for a_type in schema.types.values():
            cursor = a_type  # type: Optional[Type]
            steps = 0
            while cursor is not None and not isinstance(cursor, Builtin):
                cursor = base_of(cursor)
                steps += 1
                if steps > bound:
                    return False

            if cursor is None:
                return False

    return True


# endregion


# fmt: off
@ensure(lambda result: (result[0] is not None) ^ (result[1] is not None))
@ensure(
    lambda result:
    result[0] is None
    or not _has_linked_types(result[0]),
    "No placeholders remain after a successful parse"
)
@ensure(
    lambda result:
    result[0] is None
    or _base_chains_end_in_builtins(result[0]),
    "The base chain of every type ends in a built-in type"
)
# fmt: on
def parse(docs: Sequence[bytes]) -> Tuple[Optional[List[Schema]], Optional[Error]]:
    """
    Parse the ``docs`` into schemas with all the types resolved.

    The standard schemas are always available, see
    :py:mod:`xsd_codegen.xsd._standard`.

    :param docs: schemas, or service descriptions embedding schemas
    :return:
        One schema per target namespace followed by the pseudo-schema of
        the built-in types; or the error
    """
    roots, error = normalize(docs)
    if error is not None:
        return None, error

    assert roots is not None

    schema_by_namespace = dict()  # type: MutableMapping[str, Schema]
    roots_by_namespace = dict()  # type: MutableMapping[str, List[Node]]

    for root in roots:
        context = _context_of(root)
        namespace = context.target_namespace

        types, error = _parse_types(root, context)
        if error is not None:
            return None, Error(
                root,
                f"Failed to parse the schema of the target namespace {namespace!r}",
                underlying=[error],
            )

        assert types is not None

        schema = schema_by_namespace.get(namespace, None)
        if schema is None:
            schema = Schema(target_namespace=namespace, types=dict())
            schema_by_namespace[namespace] = schema
            roots_by_namespace[namespace] = []

        roots_by_namespace[namespace].append(root)

        for name, a_type in types.items():
            if name in schema.types:
                return None, Error(
                    root,
                    f"The type {name} has been declared in more than one schema "
                    f"of the target namespace {namespace!r}",
                )

            schema.types[name] = a_type

        schema.documentation = _join_documentation(
            schema.documentation, _documentation(root)
        )

    self_types = dict()  # type: MutableMapping[str, ComplexType]

    for namespace, schema in schema_by_namespace.items():
        taken = set(name.local for name in schema.types)
        local = SELF_TYPE_LOCAL
        counter = 0
        while local in taken:
            counter += 1
            local = f"{SELF_TYPE_LOCAL}{counter}"

        context = _context_of(roots_by_namespace[namespace][0])

        self_type, error = _parse_complex_type(
            _self_type_node(roots_by_namespace[namespace], local), context
        )
        if error is not None:
            return None, Error(
                None,
                f"Failed to parse the top-level elements of "
                f"the target namespace {namespace!r}",
                underlying=[error],
            )

        assert self_type is not None
        schema.types[self_type.name] = self_type
        self_types[namespace] = self_type

    schemas = list(schema_by_namespace.values())

    global_types = dict()  # type: MutableMapping[QName, Type]
    for schema in schemas:
        global_types.update(schema.types)

    error = _resolve_partial_types(schemas, global_types)
    if error is not None:
        return None, error

    error = _check_base_chains(schemas)
    if error is not None:
        return None, error

    for namespace, self_type in self_types.items():
        schema = schema_by_namespace[namespace]
        for element in self_type.elements:
            if element.name not in schema.types:
                schema.types[element.name] = element.type

    _propagate_mixed(schemas)

    return schemas + [builtin_schema()], None
