"""Index the nodes of schema trees for constant-time look-ups."""
from typing import (
    Final,
    List,
    Mapping,
    MutableMapping,
    Optional,
    Sequence,
    Set,
    Tuple,
)

from icontract import ensure, require

from xsd_codegen.common import Error
from xsd_codegen.xmltree import Element, QName
from xsd_codegen.xsd._types import SCHEMA_NS

#: Key of a global declaration, as (resolved name, tag of the declaring node)
Key = Tuple[QName, QName]


class SchemaIndex:
    """
    Lay out the nodes of the schema trees in an arena and index the declarations.

    The integer ids are positions in the arena. They are stable for the life
    of the index so that they can be used, for example, in a dependency graph.
    """

    #: All the nodes of all the trees, in pre-order
    nodes: Final[Sequence[Element]]

    _id_by_identity: Final[Mapping[int, int]]
    _id_by_key: Final[Mapping[Key, int]]
    _namespace_by_id: Final[Mapping[int, str]]

    def __init__(
        self,
        nodes: Sequence[Element],
        id_by_identity: Mapping[int, int],
        id_by_key: Mapping[Key, int],
        namespace_by_id: Mapping[int, str],
    ) -> None:
        """Initialize with the given values."""
        self.nodes = nodes
        self._id_by_identity = id_by_identity
        self._id_by_key = id_by_key
        self._namespace_by_id = namespace_by_id

    @require(lambda self, node_id: 0 <= node_id < len(self.nodes))
    def node_by_id(self, node_id: int) -> Element:
        """Get the node at ``node_id`` in the arena."""
        return self.nodes[node_id]

    def id_of(self, node: Element) -> Optional[int]:
        """Find the arena id of the ``node``, if it has been indexed."""
        return self._id_by_identity.get(id(node), None)

    def element_id(self, name: QName, kind: QName) -> Optional[int]:
        """
        Find the id of the global declaration.

        :param name: canonical name of the declaration
        :param kind: tag of the declaring node, *e.g.*, ``{xsd}element``
        :return: id of the node, if declared
        """
        return self._id_by_key.get((name, kind), None)

    def lookup(self, name: QName, kind: QName) -> Optional[Element]:
        """Find the node of the global declaration."""
        node_id = self.element_id(name, kind)
        if node_id is None:
            return None

        return self.nodes[node_id]

    @require(lambda self, node_id: 0 <= node_id < len(self.nodes))
    def namespace_of(self, node_id: int) -> str:
        """Give the target namespace of the schema the node lives in."""
        return self._namespace_by_id[node_id]


@ensure(lambda result: (result[0] is not None) ^ (result[1] is not None))
def build_index(
    roots: Sequence[Element],
) -> Tuple[Optional[SchemaIndex], Optional[Error]]:
    """
    Index the nodes of the schema ``roots``.

    The global declarations, *i.e.*, named XSD children of ``<schema>``, are
    indexed by their name resolved against the target namespace and the tag.
    A declaration repeated within one document is an error. A later document
    with the same target namespace overrides the earlier declarations.
    """
    nodes = []  # type: List[Element]
    id_by_identity = dict()  # type: MutableMapping[int, int]
    id_by_key = dict()  # type: MutableMapping[Key, int]
    namespace_by_id = dict()  # type: MutableMapping[int, str]

    for root in roots:
        target_namespace = root.attr("targetNamespace")
        if target_namespace is None:
            target_namespace = ""

        for node in [root] + list(root.iter_descendants()):
            node_id = len(nodes)
            nodes.append(node)
            id_by_identity[id(node)] = node_id
            namespace_by_id[node_id] = target_namespace

        keys_in_document = set()  # type: Set[Key]

        for child in root.children:
            if child.name.space != SCHEMA_NS:
                continue

            name = child.attr("name")
            if name is None:
                continue

            key = (child.scope.resolve_default(name, target_namespace), child.name)
            if key in keys_in_document:
                return None, Error(
                    child,
                    f"The {child.name.local} {key[0]} "
                    f"has been declared more than once in the same schema",
                )

            keys_in_document.add(key)
            id_by_key[key] = id_by_identity[id(child)]

    return (
        SchemaIndex(
            nodes=nodes,
            id_by_identity=id_by_identity,
            id_by_key=id_by_key,
            namespace_by_id=namespace_by_id,
        ),
        None,
    )
