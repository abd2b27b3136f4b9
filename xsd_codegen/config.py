"""Configure which parts of the schemas are generated and how."""
import re
from typing import (
    Callable,
    Final,
    FrozenSet,
    List,
    Mapping,
    MutableMapping,
    Optional,
    Pattern,
    Sequence,
    Tuple,
)

from icontract import ensure

from xsd_codegen import xsd
from xsd_codegen.xmltree import QName

#: Transform a type of a schema after the resolution into another type
TypeTransform = Callable[[xsd.Schema, xsd.Type], xsd.Type]


class ReplaceRule:
    """Represent a substitution applied to the names from the schemas."""

    #: Pattern matched against a local name
    pattern: Final[Pattern[str]]

    #: Replacement in the syntax of :py:func:`re.sub`
    replacement: Final[str]

    def __init__(self, pattern: Pattern[str], replacement: str) -> None:
        """Initialize with the given values."""
        self.pattern = pattern
        self.replacement = replacement

    def apply(self, name: str) -> str:
        """Substitute all the matches of the pattern in ``name``."""
        return self.pattern.sub(self.replacement, name)

    def __repr__(self) -> str:
        return f"{self.pattern.pattern} -> {self.replacement}"


@ensure(lambda result: (result[0] is not None) ^ (result[1] is not None))
def parse_replace_rule(text: str) -> Tuple[Optional[ReplaceRule], Optional[str]]:
    """
    Parse a replacement rule of the form ``regex -> replacement``.

    >>> rule, _ = parse_replace_rule("^ArrayOf(.*)$ -> \\\\1List")
    >>> rule.apply("ArrayOfInt")
    'IntList'

    >>> _, error = parse_replace_rule("no arrow")
    >>> error.startswith("Expected a replacement rule")
    True
    """
    pattern_text, arrow, replacement = text.partition("->")
    if arrow == "":
        return None, (
            f"Expected a replacement rule of the form 'regex -> replacement', "
            f"but got: {text!r}"
        )

    pattern_text = pattern_text.strip()
    try:
        pattern = re.compile(pattern_text)
    except re.error as exception:
        return None, (
            f"Invalid regular expression {pattern_text!r} "
            f"in the replacement rule {text!r}: {exception}"
        )

    return ReplaceRule(pattern=pattern, replacement=replacement.strip()), None


class Config:
    """Represent the settings of a code generation run."""

    #: Target namespaces whose types are to be generated. If empty, the target
    #: namespaces of the input documents are generated.
    namespaces: Final[Tuple[str, ...]]

    #: Local names of the attributes which are left out of the generated code
    ignored_attributes: Final[FrozenSet[str]]

    #: Local names of the elements which are left out of the generated code
    ignored_elements: Final[FrozenSet[str]]

    #: Transformations applied, in order, to every resolved type
    type_transforms: Final[Tuple[TypeTransform, ...]]

    #: If set, the schemas imported by the input documents are loaded as well
    follow_imports: Final[bool]

    #: Substitutions applied, in order, to the names before they become
    #: identifiers
    replace_rules: Final[Tuple[ReplaceRule, ...]]

    #: If any, only the types whose local names match one of the patterns are
    #: generated, along with the types they depend on
    only_types: Final[Tuple[Pattern[str], ...]]

    def __init__(
        self,
        namespaces: Sequence[str] = (),
        ignored_attributes: Sequence[str] = (),
        ignored_elements: Sequence[str] = (),
        type_transforms: Sequence[TypeTransform] = (),
        follow_imports: bool = False,
        replace_rules: Sequence[ReplaceRule] = (),
        only_types: Sequence[Pattern[str]] = (),
    ) -> None:
        """Initialize with the given values."""
        self.namespaces = tuple(namespaces)
        self.ignored_attributes = frozenset(ignored_attributes)
        self.ignored_elements = frozenset(ignored_elements)
        self.type_transforms = tuple(type_transforms)
        self.follow_imports = follow_imports
        self.replace_rules = tuple(replace_rules)
        self.only_types = tuple(only_types)

    def replace(
        self,
        namespaces: Optional[Sequence[str]] = None,
        follow_imports: Optional[bool] = None,
        replace_rules: Optional[Sequence[ReplaceRule]] = None,
        only_types: Optional[Sequence[Pattern[str]]] = None,
    ) -> "Config":
        """Copy the configuration with the given settings replaced."""
        return Config(
            namespaces=namespaces if namespaces is not None else self.namespaces,
            ignored_attributes=sorted(self.ignored_attributes),
            ignored_elements=sorted(self.ignored_elements),
            type_transforms=self.type_transforms,
            follow_imports=(
                follow_imports if follow_imports is not None else self.follow_imports
            ),
            replace_rules=(
                replace_rules if replace_rules is not None else self.replace_rules
            ),
            only_types=only_types if only_types is not None else self.only_types,
        )

    def is_wanted(self, local: str) -> bool:
        """Check that the type with the ``local`` name passes :py:attr:`only_types`."""
        if len(self.only_types) == 0:
            return True

        return any(pattern.search(local) is not None for pattern in self.only_types)


def _array_item_name(attribute: xsd.Attribute) -> Optional[QName]:
    """Extract the item type from ``wsdl:arrayType="ns:Item[]"``, if specified."""
    value = attribute.extra_attributes.get(QName(xsd.WSDL_NS, "arrayType"), None)
    if value is None:
        return None

    value = value.strip()
    while value.endswith("[]"):
        value = value[: -len("[]")]

    if value == "":
        return None

    return attribute.scope.resolve(value)


def handle_soap_array_type(schema: xsd.Schema, a_type: xsd.Type) -> xsd.Type:
    """
    Turn a SOAP-encoded array into a complex type with a plural ``item`` element.

    SOAP arrays are declared as a restriction of ``soapenc:Array``:

    .. code-block:: xml

        <complexType name="IntArray">
          <complexContent>
            <restriction base="soapenc:Array">
              <attribute ref="soapenc:arrayType" wsdl:arrayType="xs:int[]"/>
            </restriction>
          </complexContent>
        </complexType>

    The item type is looked up in the ``schema`` and among the built-in types.
    If the item type can not be found, ``a_type`` is returned unchanged.
    """
    if not isinstance(a_type, xsd.ComplexType):
        return a_type

    item_name = None  # type: Optional[QName]
    array_attribute = None  # type: Optional[xsd.Attribute]
    attributes = []  # type: List[xsd.Attribute]
    for attribute in a_type.attributes:
        if item_name is None and attribute.name.local == "arrayType":
            item_name = _array_item_name(attribute)
            if item_name is not None:
                array_attribute = attribute
                continue

        attributes.append(attribute)

    if item_name is None:
        return a_type

    assert array_attribute is not None

    item_type = schema.find_type(item_name)
    if item_type is None:
        item_type = xsd.parse_builtin(item_name)

    if item_type is None:
        return a_type

    item = xsd.Element(
        name=QName("", "item"),
        type=item_type,
        plural=True,
        optional=True,
        nillable=False,
        wildcard=False,
        abstract=False,
        default=None,
        documentation="",
        extra_attributes=dict(),
        scope=array_attribute.scope,
    )

    return xsd.ComplexType(
        name=a_type.name,
        base=a_type.base,
        anonymous=a_type.anonymous,
        abstract=a_type.abstract,
        mixed=False,
        extends=False,
        elements=[item],
        attributes=attributes,
        documentation=a_type.documentation,
    )


def default_config() -> Config:
    """
    Build the default configuration.

    The SOAP-encoding attributes ``id``, ``href`` and ``offset`` are ignored,
    and the SOAP arrays are generated as lists.
    """
    return Config(
        ignored_attributes=["id", "href", "offset"],
        type_transforms=[handle_soap_array_type],
    )


def _replace_transformed(
    a_type: xsd.Type, replacements: Mapping[int, Tuple[xsd.Type, xsd.Type]]
) -> xsd.Type:
    replacement = replacements.get(id(a_type), None)
    if replacement is None:
        return a_type

    return replacement[1]


# fmt: off
@ensure(
    lambda schemas:
    all(
        not isinstance(a_type, xsd.LinkedType)
        for schema in schemas
        for a_type in schema.types.values()
    ),
    "Transforms never introduce placeholders"
)
# fmt: on
def apply_type_transforms(schemas: Sequence[xsd.Schema], config: Config) -> None:
    """
    Apply the transformations of the ``config`` to every type in the ``schemas``.

    The references to a transformed type are re-pointed to the new type
    so that the base chains, elements and attributes stay consistent.
    """
    for transform in config.type_transforms:
        # Map id of the old type -> (old type, new type)
        replacements = dict()  # type: MutableMapping[int, Tuple[xsd.Type, xsd.Type]]

        for schema in schemas:
            for a_type in list(schema.types.values()):
                if isinstance(a_type, xsd.Builtin) or id(a_type) in replacements:
                    continue

                transformed = transform(schema, a_type)
                if transformed is not a_type:
                    replacements[id(a_type)] = (a_type, transformed)

        if len(replacements) == 0:
            continue

        for schema in schemas:
            for name, a_type in list(schema.types.items()):
                schema.types[name] = _replace_transformed(a_type, replacements)

            for a_type in schema.types.values():
                if isinstance(a_type, (xsd.SimpleType, xsd.ComplexType)):
                    a_type.base = _replace_transformed(a_type.base, replacements)

                if isinstance(a_type, xsd.SimpleType):
                    a_type.union = [
                        _replace_transformed(member, replacements)
                        for member in a_type.union
                    ]

                if isinstance(a_type, xsd.ComplexType):
                    for element in a_type.elements:
                        element.type = _replace_transformed(element.type, replacements)

                    for attribute in a_type.attributes:
                        attribute.type = _replace_transformed(
                            attribute.type, replacements
                        )
