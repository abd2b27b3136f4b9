"""Provide a namespace-aware tree of XML elements."""
from typing import (
    Callable,
    Dict,
    Iterator,
    List,
    NamedTuple,
    Optional,
    Sequence,
    Tuple,
)

from icontract import ensure

#: Namespace implicitly bound to the ``xml`` prefix in every document
XML_NS = "http://www.w3.org/XML/1998/namespace"

#: Maximum nesting of the elements we accept, so that deeply nested or
#: self-referencing input results in an error instead of a stack overflow.
MAX_DEPTH = 400


class QName(NamedTuple):
    """Represent a name qualified with a namespace."""

    #: Namespace of the name; empty if the name is not in any namespace
    space: str

    #: Local part of the name
    local: str

    def __str__(self) -> str:
        """Render the name in Clark notation, ``{namespace}local``."""
        if self.space == "":
            return self.local

        return f"{{{self.space}}}{self.local}"


class Attr(NamedTuple):
    """Represent an attribute of an XML element."""

    name: QName
    value: str


class Scope:
    """
    Represent the namespace declarations visible at an element.

    The bindings are ordered from the outermost to the innermost declaration.
    The default namespace is bound to the empty prefix.
    """

    def __init__(self, bindings: Sequence[Tuple[str, str]] = ()) -> None:
        """Initialize with the given ``(prefix, namespace)`` pairs."""
        self.bindings = tuple(bindings)

    def namespace_of(self, prefix: str) -> Optional[str]:
        """Find the namespace bound to the ``prefix`` by the nearest declaration."""
        for bound_prefix, namespace in reversed(self.bindings):
            if bound_prefix == prefix:
                return namespace

        if prefix == "xml":
            return XML_NS

        return None

    def resolve(self, qname: str) -> QName:
        """
        Resolve the prefixed ``qname`` to its namespace and local name.

        A prefix without a declaration is taken verbatim as the namespace.
        An unprefixed name belongs to the default namespace, if any.

        >>> scope = Scope([("xs", "http://www.w3.org/2001/XMLSchema")])
        >>> str(scope.resolve("xs:string"))
        '{http://www.w3.org/2001/XMLSchema}string'

        >>> str(scope.resolve("Widget"))
        'Widget'
        """
        prefix, separator, local = qname.strip().partition(":")
        if separator == "":
            prefix, local = "", prefix

        namespace = self.namespace_of(prefix)
        if namespace is None:
            namespace = prefix

        return QName(namespace, local)

    def resolve_default(self, qname: str, default_namespace: str) -> QName:
        """
        Resolve the ``qname``, putting an unprefixed one in ``default_namespace``.

        This is how the names of declarations are interpreted: a ``name``
        attribute is never affected by the default namespace of the document.
        """
        if ":" in qname:
            return self.resolve(qname)

        return QName(default_namespace, qname.strip())

    @ensure(lambda self, name, result: result is None or self.resolve(result) == name)
    def prefix(self, name: QName) -> Optional[str]:
        """
        Spell the ``name`` as a prefixed string which resolves back to it.

        Return None if there is no such spelling in this scope.

        >>> scope = Scope([("", "urn:a"), ("b", "urn:b")])
        >>> scope.prefix(QName("urn:b", "Widget"))
        'b:Widget'

        >>> scope.prefix(QName("urn:a", "Widget"))
        'Widget'

        >>> scope.prefix(QName("urn:c", "Widget")) is None
        True
        """
        for bound_prefix, namespace in reversed(self.bindings):
            if namespace != name.space:
                continue

            candidate = (
                name.local if bound_prefix == "" else f"{bound_prefix}:{name.local}"
            )
            if self.resolve(candidate) == name:
                return candidate

        if name.space == XML_NS:
            return f"xml:{name.local}"

        if name.space == "" and self.namespace_of("") is None:
            return name.local

        return None

    def with_binding(self, prefix: str, namespace: str) -> "Scope":
        """Create a scope nested in this one which binds ``prefix`` to ``namespace``."""
        return Scope(self.bindings + ((prefix, namespace),))

    def join(self, inner: "Scope") -> "Scope":
        """Create a scope where the bindings of ``inner`` take precedence."""
        return Scope(self.bindings + inner.bindings)

    def unused_prefix(self, stem: str = "ns") -> str:
        """Pick a prefix that no declaration in the scope uses yet."""
        used = set(bound_prefix for bound_prefix, _ in self.bindings)
        counter = 0
        while f"{stem}{counter}" in used:
            counter += 1

        return f"{stem}{counter}"

    def mapping(self) -> Dict[str, str]:
        """Map each prefix to the namespace it is effectively bound to."""
        return {prefix: namespace for prefix, namespace in self.bindings}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({list(self.bindings)!r})"


Predicate = Callable[["Element"], bool]


class Element:
    """Represent an XML element together with its namespace scope."""

    def __init__(
        self,
        name: QName,
        attrs: Optional[List[Attr]] = None,
        scope: Optional[Scope] = None,
        text: str = "",
        children: Optional[List["Element"]] = None,
        tail: str = "",
    ) -> None:
        """Initialize with the given values."""
        self.name = name
        self.attrs = attrs if attrs is not None else []
        self.scope = scope if scope is not None else Scope()
        self.text = text
        self.children = children if children is not None else []
        self.tail = tail

    def attr(self, local: str, space: str = "") -> Optional[str]:
        """Get the value of the attribute, or None if the element lacks it."""
        for attr in self.attrs:
            if attr.name.local == local and attr.name.space == space:
                return attr.value

        return None

    def set_attr(self, local: str, value: str, space: str = "") -> None:
        """Set the value of the attribute, adding it if necessary."""
        name = QName(space, local)
        for i, attr in enumerate(self.attrs):
            if attr.name == name:
                self.attrs[i] = Attr(name, value)
                return

        self.attrs.append(Attr(name, value))

    def del_attr(self, local: str, space: str = "") -> None:
        """Remove the attribute if the element has it."""
        name = QName(space, local)
        self.attrs = [attr for attr in self.attrs if attr.name != name]

    def copy(self) -> "Element":
        """Copy the element and its descendants deeply."""
        result = Element(
            name=self.name,
            attrs=list(self.attrs),
            scope=self.scope,
            text=self.text,
            tail=self.tail,
        )

        stack = [(self, result)]  # type: List[Tuple[Element, Element]]
        while len(stack) > 0:
            original, duplicate = stack.pop()
            for child in original.children:
                child_duplicate = Element(
                    name=child.name,
                    attrs=list(child.attrs),
                    scope=child.scope,
                    text=child.text,
                    tail=child.tail,
                )
                duplicate.children.append(child_duplicate)
                stack.append((child, child_duplicate))

        return result

    def iter_descendants(self) -> Iterator["Element"]:
        """Iterate over all the descendants in pre-order, excluding the element."""
        stack = list(reversed(self.children))
        while len(stack) > 0:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def search_func(self, predicate: Predicate) -> List["Element"]:
        """Collect all the descendants matching the ``predicate`` in pre-order."""
        return [node for node in self.iter_descendants() if predicate(node)]

    def search(self, space: str, local: str) -> List["Element"]:
        """Collect all the descendants named ``{space}local`` in pre-order."""
        name = QName(space, local)
        return self.search_func(lambda node: node.name == name)

    def itertext(self) -> Iterator[str]:
        """Iterate over the character data of the element and its descendants."""
        yield self.text
        for child in self.children:
            yield from child.itertext()
            yield child.tail

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, attrs={self.attrs!r})"
