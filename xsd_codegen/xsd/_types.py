"""Provide the object model of the resolved XML schemas."""
import decimal
import enum
import pathlib
from typing import (
    Final,
    List,
    Mapping,
    MutableMapping,
    Optional,
    Pattern,
    Sequence,
    Set,
    Union,
)

from xsd_codegen.common import assert_never
from xsd_codegen.xmltree import QName, Scope

_MODULE_NAME = pathlib.Path(__file__).parent.name

#: Namespace of the XML Schema Definition language
SCHEMA_NS = "http://www.w3.org/2001/XMLSchema"

#: Namespace of the SOAP 1.1 encoding
SOAPENC_NS = "http://schemas.xmlsoap.org/soap/encoding/"

#: Namespace of WSDL 1.1
WSDL_NS = "http://schemas.xmlsoap.org/wsdl/"

#: Namespace of XLink
XLINK_NS = "http://www.w3.org/1999/xlink"


class Builtin(enum.Enum):
    """List the primitive types of the XML Schema Definition language."""

    ANY_TYPE = "anyType"
    ANY_SIMPLE_TYPE = "anySimpleType"
    ENTITIES = "ENTITIES"
    ENTITY = "ENTITY"
    ID = "ID"
    IDREF = "IDREF"
    IDREFS = "IDREFS"
    NC_NAME = "NCName"
    NMTOKEN = "NMTOKEN"
    NMTOKENS = "NMTOKENS"
    NOTATION = "NOTATION"
    NAME = "Name"
    QNAME = "QName"
    ANY_URI = "anyURI"
    BASE64_BINARY = "base64Binary"
    BOOLEAN = "boolean"
    BYTE = "byte"
    DATE = "date"
    DATE_TIME = "dateTime"
    DECIMAL = "decimal"
    DOUBLE = "double"
    DURATION = "duration"
    FLOAT = "float"
    G_DAY = "gDay"
    G_MONTH = "gMonth"
    G_MONTH_DAY = "gMonthDay"
    G_YEAR = "gYear"
    G_YEAR_MONTH = "gYearMonth"
    HEX_BINARY = "hexBinary"
    INT = "int"
    INTEGER = "integer"
    LANGUAGE = "language"
    LONG = "long"
    NEGATIVE_INTEGER = "negativeInteger"
    NON_NEGATIVE_INTEGER = "nonNegativeInteger"
    NON_POSITIVE_INTEGER = "nonPositiveInteger"
    NORMALIZED_STRING = "normalizedString"
    POSITIVE_INTEGER = "positiveInteger"
    SHORT = "short"
    STRING = "string"
    TIME = "time"
    TOKEN = "token"
    UNSIGNED_BYTE = "unsignedByte"
    UNSIGNED_INT = "unsignedInt"
    UNSIGNED_LONG = "unsignedLong"
    UNSIGNED_SHORT = "unsignedShort"

    @property
    def qname(self) -> QName:
        """Give the canonical name of the built-in type."""
        return QName(SCHEMA_NS, self.value)


_LOCAL_NAME_TO_BUILTIN = {
    literal.value: literal for literal in Builtin
}  # type: Mapping[str, Builtin]


def parse_builtin(name: QName) -> Optional[Builtin]:
    """
    Map the ``name`` to a built-in type, if it refers to one.

    >>> parse_builtin(QName(SCHEMA_NS, "int"))
    <Builtin.INT: 'int'>

    >>> parse_builtin(QName("urn:x", "int")) is None
    True
    """
    if name.space != SCHEMA_NS:
        return None

    return _LOCAL_NAME_TO_BUILTIN.get(name.local, None)


class LinkedType:
    """
    Represent a reference to a type which has not been resolved yet.

    The placeholders live only during the parsing of the schemas. None of them
    survives a successful parse.
    """

    #: Canonical name of the referenced type
    name: Final[QName]

    def __init__(self, name: QName) -> None:
        """Initialize with the given values."""
        self.name = name

    def __repr__(self) -> str:
        """Represent the instance as a string for easier debugging."""
        return f"<{_MODULE_NAME}.{self.__class__.__name__} {self.name}>"


class Restriction:
    """
    Capture the facets restricting the values of a simple type.

    The facets are informational. We do not validate any data against them.
    """

    #: Allowed values, if the type is an enumeration
    enumeration: List[str]

    #: Lower bound of the values
    minimum: Optional[decimal.Decimal]

    #: Set if the lower bound itself is excluded from the values
    min_exclusive: bool

    #: Upper bound of the values
    maximum: Optional[decimal.Decimal]

    #: Set if the upper bound itself is excluded from the values
    max_exclusive: bool

    #: Minimum length of the values
    min_length: Optional[int]

    #: Maximum length of the values
    max_length: Optional[int]

    #: Maximum number of digits after the decimal point
    precision: Optional[int]

    #: Maximum number of digits
    total_digits: Optional[int]

    #: Pattern which the values need to fully match
    pattern: Optional[Pattern[str]]

    #: Documentation of the restriction, including the notes about
    #: the facets which we could not interpret
    documentation: str

    def __init__(self) -> None:
        """Initialize as a restriction without any facets."""
        self.enumeration = []
        self.minimum = None
        self.min_exclusive = False
        self.maximum = None
        self.max_exclusive = False
        self.min_length = None
        self.max_length = None
        self.precision = None
        self.total_digits = None
        self.pattern = None
        self.documentation = ""


class SimpleType:
    """Represent a type whose values are plain text without any markup."""

    #: Canonical name of the type
    name: Final[QName]

    #: Type this type is derived from
    base: "Type"

    #: Set if the name has been synthesized for an anonymous declaration
    anonymous: Final[bool]

    #: Set if the values are white-space separated lists of the ``base``
    is_list: Final[bool]

    #: Member types if the type is a union
    union: List["Type"]

    #: Facets of the restriction
    restriction: Final[Restriction]

    #: Documentation of the type
    documentation: str

    def __init__(
        self,
        name: QName,
        base: "Type",
        anonymous: bool,
        is_list: bool,
        union: List["Type"],
        restriction: Restriction,
        documentation: str,
    ) -> None:
        """Initialize with the given values."""
        self.name = name
        self.base = base
        self.anonymous = anonymous
        self.is_list = is_list
        self.union = union
        self.restriction = restriction
        self.documentation = documentation

    def __repr__(self) -> str:
        """Represent the instance as a string for easier debugging."""
        return (
            f"<{_MODULE_NAME}.{self.__class__.__name__} {self.name} at 0x{id(self):x}>"
        )


class Element:
    """Represent an element declared in the content model of a complex type."""

    #: Canonical name of the element
    name: QName

    #: Type of the element content
    type: "Type"

    #: Set if the element can occur more than once
    plural: bool

    #: Set if the element can be omitted
    optional: bool

    #: Set if the element can be explicitly nil
    nillable: bool

    #: Set if this declaration stands for an ``<any>`` wildcard
    wildcard: Final[bool]

    #: Set if the element can not appear in a document by itself
    abstract: bool

    #: Default value of the element, if any
    default: Optional[str]

    #: Documentation of the element
    documentation: str

    #: Attributes of the declaration which we do not model explicitly
    extra_attributes: Final[Mapping[QName, str]]

    #: Namespace declarations to interpret the ``extra_attributes``
    scope: Final[Scope]

    def __init__(
        self,
        name: QName,
        type: "Type",  # pylint: disable=redefined-builtin
        plural: bool,
        optional: bool,
        nillable: bool,
        wildcard: bool,
        abstract: bool,
        default: Optional[str],
        documentation: str,
        extra_attributes: Mapping[QName, str],
        scope: Scope,
    ) -> None:
        """Initialize with the given values."""
        self.name = name
        self.type = type
        self.plural = plural
        self.optional = optional
        self.nillable = nillable
        self.wildcard = wildcard
        self.abstract = abstract
        self.default = default
        self.documentation = documentation
        self.extra_attributes = extra_attributes
        self.scope = scope

    def __repr__(self) -> str:
        """Represent the instance as a string for easier debugging."""
        return (
            f"<{_MODULE_NAME}.{self.__class__.__name__} {self.name} at 0x{id(self):x}>"
        )


class Attribute:
    """Represent an attribute declared on a complex type."""

    #: Canonical name of the attribute
    name: QName

    #: Type of the attribute value, always simple or built-in once resolved
    type: "Type"

    #: Set if the value is a white-space separated list
    plural: bool

    #: Set unless the attribute is required
    optional: bool

    #: Default value of the attribute, if any
    default: Optional[str]

    #: Documentation of the attribute
    documentation: str

    #: Attributes of the declaration which we do not model explicitly
    extra_attributes: Final[Mapping[QName, str]]

    #: Namespace declarations to interpret the ``extra_attributes``
    scope: Final[Scope]

    def __init__(
        self,
        name: QName,
        type: "Type",  # pylint: disable=redefined-builtin
        plural: bool,
        optional: bool,
        default: Optional[str],
        documentation: str,
        extra_attributes: Mapping[QName, str],
        scope: Scope,
    ) -> None:
        """Initialize with the given values."""
        self.name = name
        self.type = type
        self.plural = plural
        self.optional = optional
        self.default = default
        self.documentation = documentation
        self.extra_attributes = extra_attributes
        self.scope = scope

    def __repr__(self) -> str:
        """Represent the instance as a string for easier debugging."""
        return (
            f"<{_MODULE_NAME}.{self.__class__.__name__} {self.name} at 0x{id(self):x}>"
        )


class ComplexType:
    """Represent a type whose values carry elements, attributes or both."""

    #: Canonical name of the type
    name: Final[QName]

    #: Type this type is derived from
    base: "Type"

    #: Set if the name has been synthesized for an anonymous declaration
    anonymous: Final[bool]

    #: Set if the type can not be instantiated directly
    abstract: Final[bool]

    #: Set if the values can contain character data
    mixed: bool

    #: Set if the type is derived by extension, unset for restriction
    extends: Final[bool]

    #: Elements of the content model, in order of declaration
    elements: List[Element]

    #: Attributes of the type
    attributes: List[Attribute]

    #: Documentation of the type
    documentation: str

    def __init__(
        self,
        name: QName,
        base: "Type",
        anonymous: bool,
        abstract: bool,
        mixed: bool,
        extends: bool,
        elements: List[Element],
        attributes: List[Attribute],
        documentation: str,
    ) -> None:
        """Initialize with the given values."""
        self.name = name
        self.base = base
        self.anonymous = anonymous
        self.abstract = abstract
        self.mixed = mixed
        self.extends = extends
        self.elements = elements
        self.attributes = attributes
        self.documentation = documentation

    def __repr__(self) -> str:
        """Represent the instance as a string for easier debugging."""
        return (
            f"<{_MODULE_NAME}.{self.__class__.__name__} {self.name} at 0x{id(self):x}>"
        )


Type = Union[Builtin, SimpleType, ComplexType, LinkedType]

#: Types which remain after a successful parse
ResolvedType = Union[Builtin, SimpleType, ComplexType]


def xml_name(a_type: Type) -> QName:
    """Give the canonical name of ``a_type``."""
    if isinstance(a_type, Builtin):
        return a_type.qname
    elif isinstance(a_type, (SimpleType, ComplexType, LinkedType)):
        return a_type.name
    else:
        assert_never(a_type)
        raise AssertionError("Unexpected execution path")


def base_of(a_type: Type) -> Optional[Type]:
    """Give the type ``a_type`` is derived from, if any."""
    if isinstance(a_type, (Builtin, LinkedType)):
        return None
    elif isinstance(a_type, (SimpleType, ComplexType)):
        return a_type.base
    else:
        assert_never(a_type)
        raise AssertionError("Unexpected execution path")


def builtin_root(a_type: Type) -> Optional[Builtin]:
    """
    Follow the base chain of ``a_type`` to the built-in type at its end.

    Return None if the chain ends in a placeholder or loops.
    """
    visited = set()  # type: Set[int]
    cursor = a_type  # type: Optional[Type]
    while cursor is not None:
        if isinstance(cursor, Builtin):
            return cursor

        if id(cursor) in visited:
            return None

        visited.add(id(cursor))
        cursor = base_of(cursor)

    return None


class Schema:
    """Represent the declarations of a target namespace."""

    #: Target namespace of the declarations
    target_namespace: Final[str]

    #: Map canonical names to the declared types
    types: MutableMapping[QName, Type]

    #: Documentation collected from the top-level annotations
    documentation: str

    def __init__(
        self,
        target_namespace: str,
        types: MutableMapping[QName, Type],
        documentation: str = "",
    ) -> None:
        """Initialize with the given values."""
        self.target_namespace = target_namespace
        self.types = types
        self.documentation = documentation

    def find_type(self, name: QName) -> Optional[Type]:
        """Find the type with the canonical ``name`` in this schema."""
        return self.types.get(name, None)

    def __repr__(self) -> str:
        """Represent the instance as a string for easier debugging."""
        return (
            f"<{_MODULE_NAME}.{self.__class__.__name__} "
            f"{self.target_namespace!r} at 0x{id(self):x}>"
        )


def find_type(schemas: Sequence[Schema], name: QName) -> Optional[Type]:
    """Find the type with the canonical ``name`` in any of the ``schemas``."""
    for schema in schemas:
        a_type = schema.find_type(name)
        if a_type is not None:
            return a_type

    return None


def builtin_schema() -> Schema:
    """Create the pseudo-schema listing all the built-in types."""
    return Schema(
        target_namespace=SCHEMA_NS,
        types={literal.qname: literal for literal in Builtin},
        documentation="Built-in types of the XML Schema Definition language",
    )
