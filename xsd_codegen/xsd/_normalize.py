"""
Rewrite schema trees into a canonical form before parsing them into types.

The passes run in a fixed order since each pass relies on the invariants
established by the previous ones:

1. default types are injected,
2. anonymous types are named after their declarations, where possible,
3. the remaining anonymous types are given synthetic names,
4. the branches of choices are made optional,
5. the shorthand complex types are expanded,
6. the references are flattened,
7. the groups are unpacked, and
8. the trees are checked to be acyclic.

The trees are modified in place.
"""
from typing import (
    List,
    MutableMapping,
    Optional,
    Sequence,
    Set,
    Tuple,
)

from icontract import ensure

from xsd_codegen import dependency, xmltree
from xsd_codegen.common import Error
from xsd_codegen.xmltree import Element, QName
from xsd_codegen.xsd import _query, _standard
from xsd_codegen.xsd._index import SchemaIndex, build_index
from xsd_codegen.xsd._query import (
    ANONYMOUS_MARKER,
    and_,
    has_anonymous_type,
    has_attr,
    is_anonymous_type,
    is_element_or_attribute,
    is_group,
    is_schema_elem,
    not_,
)
from xsd_codegen.xsd._types import Builtin, SCHEMA_NS

#: Marker attribute on copies of global declarations which keeps the namespace
#: of the declaration after the copy has been moved to another schema
NAMESPACE_MARKER = "_targetNamespace"

_SCHEMA = QName(SCHEMA_NS, "schema")

_ELEMENT = QName(SCHEMA_NS, "element")

#: Map a local name to the declarations asking for it as (schema root, declaration)
_DeclarationsByName = MutableMapping[str, List[Tuple[Element, Element]]]

_PARTICLES = ("element", "any", "group", "choice", "sequence", "all")

is_particle = is_schema_elem(*_PARTICLES)

is_reference = and_(
    is_schema_elem("element", "attribute", "group", "attributeGroup"), has_attr("ref")
)

#: Attributes whose values are prefixed names, or lists thereof
_QNAME_ATTRIBUTES = ("type", "base", "itemType", "memberTypes", "substitutionGroup")

#: Map the declarations which can hold anonymous types to the attribute
#: referring to the type once it has been hoisted
_ANONYMOUS_TYPE_SITES = {
    "element": "type",
    "attribute": "type",
    "list": "itemType",
    "restriction": "base",
    "union": "memberTypes",
}


def target_namespace(root: Element) -> str:
    """Give the target namespace of the schema ``root``, empty if none."""
    value = root.attr("targetNamespace")
    return value if value is not None else ""


def _spell_in_scope(node: Element, name: QName) -> str:
    """
    Spell ``name`` so that it resolves correctly in the scope of ``node``.

    If the scope lacks a prefix for the namespace, a new prefix is declared
    on the ``node``.
    """
    spelled = node.scope.prefix(name)
    if spelled is not None:
        return spelled

    if name.space == "":
        node.scope = node.scope.with_binding("", "")
        return name.local

    prefix = node.scope.unused_prefix()
    node.scope = node.scope.with_binding(prefix, name.space)
    return f"{prefix}:{name.local}"


def _hoist(root: Element, parent: Element, a_type: Element) -> None:
    """Move ``a_type`` from its ``parent`` to the top level of the schema."""
    parent.children = [child for child in parent.children if child is not a_type]
    root.children.append(a_type)


def _make_optional(node: Element) -> None:
    """Set ``minOccurs`` to zero, keeping the node plural if it was."""
    min_occurs = node.attr("minOccurs")
    if (
        min_occurs is not None
        and min_occurs.strip().isdigit()
        and int(min_occurs) > 1
        and node.attr("maxOccurs") is None
    ):
        node.set_attr("maxOccurs", min_occurs.strip())

    node.set_attr("minOccurs", "0")


# region Loading


def _schemas_in(root: Element) -> List[Element]:
    """Find the ``<schema>`` elements of a schema or a service description."""
    if root.name == _SCHEMA:
        return [root]

    return root.search(SCHEMA_NS, "schema")


@ensure(lambda result: (result[0] is not None) ^ (result[1] is not None))
def _parse_documents(
    docs: Sequence[bytes],
) -> Tuple[Optional[List[Element]], Optional[Error]]:
    """Parse the ``docs`` and collect their schema roots."""
    roots = []  # type: List[Element]
    for i, data in enumerate(docs):
        root, exception = xmltree.parse(data)
        if exception is not None:
            return None, Error(
                None,
                f"Failed to parse the document {i + 1} of {len(docs)}: {exception}",
            )

        assert root is not None
        roots.extend(_schemas_in(root))

    return roots, None


@ensure(lambda result: (result[0] is not None) ^ (result[1] is not None))
def imports(doc: bytes) -> Tuple[Optional[List[Tuple[str, str]]], Optional[Error]]:
    """
    List the documents the ``doc`` depends on.

    :param doc: a schema or a service description embedding schemas
    :return:
        ``(namespace, location)`` for each ``<import>``, and
        ``(target namespace, location)`` for each ``<include>``; or the error
    """
    roots, error = _parse_documents([doc])
    if error is not None:
        return None, error

    assert roots is not None

    result = []  # type: List[Tuple[str, str]]
    for root in roots:
        for child in root.children:
            if child.name == QName(SCHEMA_NS, "import"):
                namespace = child.attr("namespace")
                result.append(
                    (
                        namespace if namespace is not None else "",
                        child.attr("schemaLocation") or "",
                    )
                )

            elif child.name == QName(SCHEMA_NS, "include"):
                result.append(
                    (target_namespace(root), child.attr("schemaLocation") or "")
                )

    return result, None


@ensure(lambda result: (result[0] is not None) ^ (result[1] is not None))
def target_namespaces(doc: bytes) -> Tuple[Optional[List[str]], Optional[Error]]:
    """List the target namespaces of the schemas in ``doc``, without repetition."""
    roots, error = _parse_documents([doc])
    if error is not None:
        return None, error

    assert roots is not None

    result = []  # type: List[str]
    for root in roots:
        namespace = target_namespace(root)
        if namespace not in result:
            result.append(namespace)

    return result, None


# endregion

# region Passes


def inject_default_types(roots: Sequence[Element]) -> None:
    """
    Give every declaration of an element or an attribute an explicit type.

    An element without a type is of ``anyType``, an attribute without a type of
    ``anySimpleType``. References and declarations with an inline type are left
    as-is. Running the pass more than once has no further effect.
    """
    lacks_type = and_(
        is_element_or_attribute,
        not_(has_attr("type")),
        not_(has_attr("ref")),
        not_(has_anonymous_type),
    )

    for root in roots:
        for node in root.search_func(lacks_type):
            default = (
                Builtin.ANY_TYPE
                if node.name.local == "element"
                else Builtin.ANY_SIMPLE_TYPE
            )
            node.set_attr("type", _spell_in_scope(node, default.qname))


@ensure(lambda result: (result[0] is not None) ^ (result[1] is not None))
def _collect_type_names(
    roots: Sequence[Element],
) -> Tuple[Optional[MutableMapping[str, Set[str]]], Optional[Error]]:
    """Map each target namespace to the local names of its named types."""
    taken = dict()  # type: MutableMapping[str, Set[str]]

    for root in roots:
        namespace = target_namespace(root)
        taken_in_namespace = taken.setdefault(namespace, set())

        for node in root.search_func(and_(_query.is_type, has_attr("name"))):
            name = node.attr("name")
            assert name is not None

            local = node.scope.resolve_default(name, namespace).local
            if local in taken_in_namespace:
                return None, Error(
                    node,
                    f"The type {QName(namespace, local)} has been declared "
                    f"more than once",
                )

            taken_in_namespace.add(local)

    return taken, None


def name_anonymous_types_after_declarations(
    roots: Sequence[Element],
) -> Optional[Error]:
    """
    Name the anonymous types after the element or attribute declaring them.

    The name is borrowed only if no other type in the namespace has it and
    exactly one declaration with an anonymous type asks for it. A name of a
    top-level element is borrowed only by that element so that the types of
    the top-level elements can be looked up by their names later on.
    The named types are hoisted to the top level of their schema.
    """
    taken, error = _collect_type_names(roots)
    if error is not None:
        return error

    assert taken is not None

    declares_anonymous_type = and_(
        is_element_or_attribute, has_attr("name"), has_anonymous_type
    )

    # Map namespace 🠒 local name 🠒 declarations asking for the name
    candidates = dict()  # type: MutableMapping[str, _DeclarationsByName]

    # Map namespace 🠒 local names of the top-level elements
    top_level_elements = dict()  # type: MutableMapping[str, Set[str]]

    for root in roots:
        namespace = target_namespace(root)
        candidates_in_namespace = candidates.setdefault(namespace, dict())
        top_level_in_namespace = top_level_elements.setdefault(namespace, set())

        for child in root.children:
            name = child.attr("name")
            if child.name == _ELEMENT and name is not None:
                top_level_in_namespace.add(
                    child.scope.resolve_default(name, namespace).local
                )

        for node in root.search_func(declares_anonymous_type):
            name = node.attr("name")
            assert name is not None

            local = node.scope.resolve_default(name, namespace).local
            candidates_in_namespace.setdefault(local, []).append((root, node))

    for namespace, candidates_in_namespace in candidates.items():
        taken_in_namespace = taken[namespace]
        top_level_in_namespace = top_level_elements[namespace]

        for local, declarations in candidates_in_namespace.items():
            if local in taken_in_namespace or len(declarations) != 1:
                continue

            root, node = declarations[0]
            if local in top_level_in_namespace and not (
                node.name == _ELEMENT and node in root.children
            ):
                continue

            taken_in_namespace.add(local)

            a_type = next(child for child in node.children if is_anonymous_type(child))
            a_type.set_attr("name", local)
            _hoist(root=root, parent=node, a_type=a_type)

            node.set_attr("type", _spell_in_scope(node, QName(namespace, local)))

    return None


def name_anonymous_types_with_counter(roots: Sequence[Element]) -> Optional[Error]:
    """
    Give all the remaining anonymous types synthetic names, ``_anon1``, ``_anon2`` *etc.*

    The counter runs per namespace and skips the names already taken.
    The types are marked as anonymous, hoisted to the top level of their schema
    and referred to by name from their original position.
    """
    taken, error = _collect_type_names(roots)
    if error is not None:
        return error

    assert taken is not None

    counters = dict()  # type: MutableMapping[str, int]

    for root in roots:
        namespace = target_namespace(root)
        taken_in_namespace = taken[namespace]

        for node in root.search_func(has_anonymous_type):
            site_attribute = (
                _ANONYMOUS_TYPE_SITES.get(node.name.local, None)
                if node.name.space == SCHEMA_NS
                else None
            )

            if site_attribute is None:
                return Error(
                    node,
                    f"Unexpected anonymous type in <{node.name.local}>; "
                    f"expected anonymous types only in: "
                    f"{', '.join(sorted(_ANONYMOUS_TYPE_SITES))}",
                )

            anonymous_types = [
                child for child in node.children if is_anonymous_type(child)
            ]

            for a_type in anonymous_types:
                counter = counters.get(namespace, 0) + 1
                while f"_anon{counter}" in taken_in_namespace:
                    counter += 1
                counters[namespace] = counter

                local = f"_anon{counter}"
                taken_in_namespace.add(local)

                a_type.set_attr("name", local)
                a_type.set_attr(ANONYMOUS_MARKER, "true")
                _hoist(root=root, parent=node, a_type=a_type)

                spelled = _spell_in_scope(node, QName(namespace, local))

                if site_attribute == "memberTypes":
                    existing = node.attr("memberTypes")
                    if existing is not None and existing.strip() != "":
                        spelled = f"{existing.strip()} {spelled}"

                node.set_attr(site_attribute, spelled)

    return None


def make_choice_branches_optional(roots: Sequence[Element]) -> None:
    """
    Mark every branch of a ``<choice>`` as optional.

    This applies also to the particles of a ``<sequence>`` which is itself
    a branch of a choice.
    """
    for root in roots:
        for choice in root.search(SCHEMA_NS, "choice"):
            for child in choice.children:
                if not is_particle(child):
                    continue

                _make_optional(child)

                if child.name.local == "sequence":
                    for grandchild in child.children:
                        if is_particle(grandchild):
                            _make_optional(grandchild)


def expand_complex_type(node: Element) -> None:
    """
    Wrap the content of a shorthand complex type in a restriction of ``anyType``.

    The annotations and the elements outside the XSD namespace are kept
    directly in the ``node``. The types with ``<simpleContent>`` or
    ``<complexContent>`` are left as-is.
    """
    if any(
        child.name.space == SCHEMA_NS
        and child.name.local in ("simpleContent", "complexContent")
        for child in node.children
    ):
        return

    kept = []  # type: List[Element]
    content = []  # type: List[Element]
    for child in node.children:
        if child.name.space != SCHEMA_NS or child.name.local == "annotation":
            kept.append(child)
        else:
            content.append(child)

    restriction = Element(
        name=QName(SCHEMA_NS, "restriction"), scope=node.scope, children=content
    )
    restriction.set_attr(
        "base", _spell_in_scope(restriction, Builtin.ANY_TYPE.qname)
    )

    complex_content = Element(
        name=QName(SCHEMA_NS, "complexContent"),
        scope=node.scope,
        children=[restriction],
    )

    node.children = kept + [complex_content]
    node.text = ""


def expand_complex_type_shorthand(roots: Sequence[Element]) -> None:
    """Expand all the shorthand complex types, see :py:func:`expand_complex_type`."""
    for root in roots:
        for node in root.search(SCHEMA_NS, "complexType"):
            expand_complex_type(node)


@ensure(lambda result: (result[0] is not None) ^ (result[1] is not None))
def _resolve_reference(
    index: SchemaIndex, node: Element
) -> Tuple[Optional[int], Optional[Error]]:
    """Find the id of the global declaration the ``node`` refers to."""
    ref = node.attr("ref")
    assert ref is not None

    name = node.scope.resolve(ref)
    target_id = index.element_id(name, node.name)
    if target_id is None:
        return None, Error(
            node,
            f"The referenced {node.name.local} {name} has not been declared "
            f"in any of the schemas",
        )

    return target_id, None


def _dereference(index: SchemaIndex, node_id: int, target_id: int) -> None:
    """Replace the reference at ``node_id`` with a copy of the declaration."""
    node = index.node_by_id(node_id)
    target = index.node_by_id(target_id)

    overlay = [attr for attr in node.attrs if attr.name != QName("", "ref")]

    attrs = []  # type: List[xmltree.Attr]
    for attr in target.attrs:
        if attr.name.space == "" and attr.name.local in _QNAME_ATTRIBUTES:
            value = " ".join(
                _spell_in_scope(node, target.scope.resolve(token))
                for token in attr.value.split()
            )
            attrs.append(xmltree.Attr(attr.name, value))
        else:
            attrs.append(attr)

    if target.name.local in ("element", "attribute"):
        attrs.append(
            xmltree.Attr(QName("", NAMESPACE_MARKER), index.namespace_of(target_id))
        )

    node.attrs = attrs
    for attr in overlay:
        node.set_attr(attr.name.local, attr.value, attr.name.space)

    node.name = target.name
    node.text = target.text
    node.children = [child.copy() for child in target.children]

    if len(node.children) > 0:
        node.scope = target.scope.join(node.scope)


def flatten_references(roots: Sequence[Element]) -> Optional[Error]:
    """
    Replace every reference with a copy of the referenced global declaration.

    The attributes of the reference override the ones of the copy. The prefixed
    names in the copied attributes are re-spelled in the scope of the reference.

    The references are replaced in dependency order so that the references
    nested in a declaration are flattened before the declaration is copied.
    The references in a cycle remain and are reported by
    :py:func:`check_acyclic`.
    """
    index, error = build_index(roots)
    if error is not None:
        return error

    assert index is not None

    graph = dependency.Graph()
    target_of = dict()  # type: MutableMapping[int, int]

    for node_id, node in enumerate(index.nodes):
        if not is_reference(node):
            continue

        target_id, error = _resolve_reference(index, node)
        if error is not None:
            return error

        assert target_id is not None

        target_of[node_id] = target_id
        graph.add(node_id, target_id)

        for nested in index.node_by_id(target_id).iter_descendants():
            if is_reference(nested):
                nested_id = index.id_of(nested)
                assert nested_id is not None
                graph.add(node_id, nested_id)

    def visit(node_id: int) -> None:
        target_id = target_of.get(node_id, None)
        if target_id is not None:
            _dereference(index=index, node_id=node_id, target_id=target_id)

    graph.flatten(visit)

    return None


def _spliced(group: Element) -> List[Element]:
    """Give the children of the ``group`` which replace it in its parent."""
    min_occurs = group.attr("minOccurs")
    max_occurs = group.attr("maxOccurs")

    result = []  # type: List[Element]
    for child in group.children:
        if child.name == QName(SCHEMA_NS, "annotation"):
            continue

        if is_particle(child):
            if min_occurs is not None and min_occurs.strip() == "0":
                _make_optional(child)

            if max_occurs is not None and max_occurs.strip() not in ("0", "1"):
                if max_occurs.strip() == "unbounded" or child.attr("maxOccurs") is None:
                    child.set_attr("maxOccurs", max_occurs.strip())

        result.append(child)

    return result


def _unpack_groups_in(node: Element, depth: int) -> Optional[Error]:
    """Unpack the groups in the descendants first, then in the ``node``."""
    if depth > xmltree.MAX_DEPTH:
        return Error(
            node, f"The schema is nested deeper than {xmltree.MAX_DEPTH} levels"
        )

    for child in node.children:
        error = _unpack_groups_in(child, depth + 1)
        if error is not None:
            return error

    if node.name == _SCHEMA:
        # The global declarations of the groups stay.
        return None

    if not any(is_group(child) and child.attr("ref") is None for child in node.children):
        return None

    children = []  # type: List[Element]
    for child in node.children:
        # The groups still carrying a reference are left for the cycle check.
        if is_group(child) and child.attr("ref") is None:
            children.extend(_spliced(child))
        else:
            children.append(child)

    node.children = children
    return None


def unpack_groups(roots: Sequence[Element]) -> Optional[Error]:
    """
    Splice the content of every (flattened) group into its parent.

    An optional or repeated group passes its occurrence on to the spliced
    particles.
    """
    for root in roots:
        error = _unpack_groups_in(root, depth=0)
        if error is not None:
            return error

    return None


def _check_acyclic_in(node: Element, on_path: Set[int], depth: int) -> Optional[Error]:
    if depth > xmltree.MAX_DEPTH:
        return Error(
            node, f"The schema is nested deeper than {xmltree.MAX_DEPTH} levels"
        )

    if id(node) in on_path:
        return Error(node, "The node is its own ancestor")

    if is_reference(node):
        return Error(
            node,
            f"The reference {node.attr('ref')!r} could not be flattened "
            f"since it is a part of a cycle",
        )

    on_path.add(id(node))
    try:
        for child in node.children:
            error = _check_acyclic_in(child, on_path, depth + 1)
            if error is not None:
                if child.attr("name") is not None:
                    return Error(
                        child, "The declaration is invalid", underlying=[error]
                    )
                return error
    finally:
        on_path.remove(id(node))

    return None


def check_acyclic(roots: Sequence[Element]) -> Optional[Error]:
    """
    Check that the flattened trees are acyclic.

    A node appearing twice on a path, a reference left in a cycle, and a nesting
    deeper than :py:data:`xmltree.MAX_DEPTH` are all reported as cycles.
    """
    for root in roots:
        for child in root.children:
            error = _check_acyclic_in(child, on_path={id(root)}, depth=1)
            if error is not None:
                return Error(
                    child,
                    f"Cycle detected after flattening the references:\n"
                    f"{xmltree.marshal(child)}",
                    underlying=[error],
                )

    return None


def normalize_in_place(roots: Sequence[Element]) -> Optional[Error]:
    """Run all the passes in order over the schema ``roots``."""
    inject_default_types(roots)

    error = name_anonymous_types_after_declarations(roots)
    if error is not None:
        return error

    error = name_anonymous_types_with_counter(roots)
    if error is not None:
        return error

    make_choice_branches_optional(roots)

    expand_complex_type_shorthand(roots)

    error = flatten_references(roots)
    if error is not None:
        return error

    error = unpack_groups(roots)
    if error is not None:
        return error

    return check_acyclic(roots)


# endregion


@ensure(lambda result: (result[0] is not None) ^ (result[1] is not None))
def normalize(docs: Sequence[bytes]) -> Tuple[Optional[List[Element]], Optional[Error]]:
    """
    Parse the ``docs`` and bring their schemas into the canonical form.

    The standard schemas are appended unless a document already provides
    a schema with the same target namespace.

    :param docs: schemas, or service descriptions embedding schemas
    :return: normalized schema roots, or the error
    """
    roots, error = _parse_documents(docs)
    if error is not None:
        return None, error

    assert roots is not None

    given_namespaces = set(target_namespace(root) for root in roots)

    standard_roots, error = _parse_documents(_standard.standard_schemas())
    if error is not None:
        return None, Error(
            None, "Failed to load the standard schemas", underlying=[error]
        )

    assert standard_roots is not None

    for root in standard_roots:
        if target_namespace(root) not in given_namespaces:
            roots.append(root)

    error = normalize_in_place(roots)
    if error is not None:
        return None, error

    return roots, None
