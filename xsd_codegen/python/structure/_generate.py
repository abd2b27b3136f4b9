"""Generate the Python data structures from the resolved schemas."""
import enum
import io
import textwrap
from typing import (
    Dict,
    Final,
    Iterator,
    List,
    Mapping,
    MutableMapping,
    Optional,
    Sequence,
    Set,
    Tuple,
    Union,
)

from icontract import ensure, require

from xsd_codegen import config as config_mod, dependency, xsd
from xsd_codegen.common import (
    Error,
    Identifier,
    Stripped,
    assert_never,
)
from xsd_codegen.python import common as python_common, naming as python_naming
from xsd_codegen.python.common import (
    INDENT as I,
    INDENT2 as II,
)
from xsd_codegen.xmltree import QName

#: Names used by the generated module itself which the types must not shadow
_MODULE_LEVEL_NAMES = frozenset(
    [
        "Any",
        "List",
        "Mapping",
        "Optional",
        "ROOT_ELEMENTS",
        "datetime",
        "decimal",
        "enum",
    ]
)

#: Types which are generated as a class, an enum or an alias
GeneratedType = Union[xsd.SimpleType, xsd.ComplexType]


class Kind(enum.Enum):
    """List the kinds of the generated definitions."""

    ENUM = "enum"
    ALIAS = "alias"
    CLASS = "class"


def kind_of(a_type: GeneratedType) -> Kind:
    """Determine how ``a_type`` is to be generated."""
    if isinstance(a_type, xsd.ComplexType):
        return Kind.CLASS

    elif isinstance(a_type, xsd.SimpleType):
        if (
            len(a_type.restriction.enumeration) > 0
            and not a_type.is_list
            and len(a_type.union) == 0
        ):
            return Kind.ENUM

        return Kind.ALIAS

    else:
        assert_never(a_type)

    raise AssertionError("Unexpected execution path")


def _is_inlined(a_type: xsd.Type) -> bool:
    """Check whether ``a_type`` is written in place instead of as a definition."""
    return (
        isinstance(a_type, xsd.SimpleType)
        and a_type.anonymous
        and kind_of(a_type) is Kind.ALIAS
    )


def _describe(a_type: xsd.Type) -> str:
    if isinstance(a_type, xsd.Builtin):
        return f"built-in type {a_type.value}"
    elif isinstance(a_type, xsd.SimpleType):
        return f"simple type {a_type.name}"
    elif isinstance(a_type, xsd.ComplexType):
        return f"complex type {a_type.name}"
    elif isinstance(a_type, xsd.LinkedType):
        return f"unresolved type {a_type.name}"
    else:
        assert_never(a_type)

    raise AssertionError("Unexpected execution path")


def _referenced_types(a_type: xsd.Type) -> Iterator[xsd.Type]:
    """Iterate over the types ``a_type`` directly refers to."""
    if isinstance(a_type, xsd.SimpleType):
        yield a_type.base
        yield from a_type.union

    elif isinstance(a_type, xsd.ComplexType):
        yield a_type.base

        for element in a_type.elements:
            yield element.type

        for attribute in a_type.attributes:
            yield attribute.type


def _inherits(a_type: xsd.ComplexType) -> bool:
    """Check whether the class of ``a_type`` is a subclass of the base class."""
    return a_type.extends and isinstance(a_type.base, xsd.ComplexType)


def _simple_content(a_type: xsd.ComplexType) -> Optional[xsd.Type]:
    """Give the type of the character data, if the content of ``a_type`` is simple."""
    cursor = a_type.base
    while isinstance(cursor, xsd.ComplexType):
        cursor = cursor.base

    if cursor is xsd.Builtin.ANY_TYPE:
        return None

    return cursor


class Field:
    """Represent a property of a generated class."""

    #: Python name of the property
    name: Final[Identifier]

    #: Type of the items if plural, otherwise the type of the property
    type: Final[xsd.Type]

    #: Set if the property holds a list
    plural: Final[bool]

    #: Set if the property can be None
    optional: Final[bool]

    #: Default value, if any
    default: Final[Optional[str]]

    #: Documentation of the property
    documentation: Final[str]

    #: Description of the XML node the property comes from, for error messages
    origin: Final[str]

    def __init__(
        self,
        name: Identifier,
        type: xsd.Type,  # pylint: disable=redefined-builtin
        plural: bool,
        optional: bool,
        default: Optional[str],
        documentation: str,
        origin: str,
    ) -> None:
        """Initialize with the given values."""
        self.name = name
        self.type = type
        self.plural = plural
        self.optional = optional
        self.default = default
        self.documentation = documentation
        self.origin = origin


def _own_fields(
    a_type: xsd.ComplexType, config: config_mod.Config
) -> List[Field]:
    """List the properties declared by ``a_type`` itself, excluding the inherited."""
    fields = []  # type: List[Field]

    simple_content = _simple_content(a_type)
    if simple_content is not None and not _inherits(a_type):
        fields.append(
            Field(
                name=Identifier("value"),
                type=simple_content,
                plural=False,
                optional=True,
                default=None,
                documentation="Character data of the element",
                origin="the simple content",
            )
        )

    if (
        a_type.mixed
        and simple_content is None
        and not (
            _inherits(a_type)
            and isinstance(a_type.base, xsd.ComplexType)
            and a_type.base.mixed
        )
    ):
        fields.append(
            Field(
                name=Identifier("text"),
                type=xsd.Builtin.STRING,
                plural=False,
                optional=False,
                default="",
                documentation="Character data mixed with the elements",
                origin="the mixed content",
            )
        )

    for attribute in a_type.attributes:
        if attribute.name.local in config.ignored_attributes:
            continue

        item_type = attribute.type
        if (
            attribute.plural
            and isinstance(item_type, xsd.SimpleType)
            and item_type.is_list
        ):
            item_type = item_type.base

        fields.append(
            Field(
                name=python_naming.property_name(
                    attribute.name.local, config.replace_rules
                ),
                type=item_type,
                plural=attribute.plural and item_type is not attribute.type,
                optional=attribute.optional,
                default=attribute.default,
                documentation=attribute.documentation,
                origin=f"the attribute {attribute.name}",
            )
        )

    for element in a_type.elements:
        if element.wildcard:
            fields.append(
                Field(
                    name=Identifier("any_elements"),
                    type=xsd.Builtin.ANY_TYPE,
                    plural=True,
                    optional=True,
                    default=None,
                    documentation=element.documentation,
                    origin="the wildcard",
                )
            )
            continue

        if element.name.local in config.ignored_elements:
            continue

        fields.append(
            Field(
                name=python_naming.property_name(
                    element.name.local, config.replace_rules
                ),
                type=element.type,
                plural=element.plural,
                optional=element.optional or element.nillable,
                default=element.default,
                documentation=element.documentation,
                origin=f"the element {element.name}",
            )
        )

    return fields


def _all_fields(a_type: xsd.ComplexType, config: config_mod.Config) -> List[Field]:
    """List the inherited properties followed by the own properties of ``a_type``."""
    chain = [a_type]  # type: List[xsd.ComplexType]
    cursor = a_type
    while _inherits(cursor):
        assert isinstance(cursor.base, xsd.ComplexType)
        cursor = cursor.base
        chain.append(cursor)

    fields = []  # type: List[Field]
    for link in reversed(chain):
        fields.extend(_own_fields(link, config))

    return fields


# region Verification


class VerifiedTypes:
    """Represent the types to be generated, verified for name collisions."""

    #: Generated types in the order of definition
    types: Final[Sequence[GeneratedType]]

    #: Map ``id`` of a generated type to its Python name
    names: Final[Mapping[int, Identifier]]

    #: Top-level elements and their types, in order of declaration
    root_elements: Final[Sequence[Tuple[QName, xsd.Type]]]

    #: Documentation of the selected schemas
    documentation: Final[str]

    #: Settings of the generation
    config: Final[config_mod.Config]

    def __init__(
        self,
        types: Sequence[GeneratedType],
        names: Mapping[int, Identifier],
        root_elements: Sequence[Tuple[QName, xsd.Type]],
        documentation: str,
        config: config_mod.Config,
    ) -> None:
        """Initialize with the given values."""
        self.types = types
        self.names = names
        self.root_elements = root_elements
        self.documentation = documentation
        self.config = config


def _select(
    schemas: Sequence[xsd.Schema],
    namespaces: Sequence[str],
    config: config_mod.Config,
) -> Tuple[List[GeneratedType], List[Tuple[QName, xsd.Type]]]:
    """
    Select the types of the ``namespaces`` and all the types they refer to.

    If the ``config`` restricts the generation to some types, only these types
    and the top-level elements named like them, or of them, are selected in
    the first place.

    :return: selected types in order of discovery, top-level elements
    """
    selected = []  # type: List[GeneratedType]
    selected_ids = set()  # type: Set[int]
    root_elements = []  # type: List[Tuple[QName, xsd.Type]]

    def select(a_type: xsd.Type) -> None:
        if isinstance(a_type, (xsd.SimpleType, xsd.ComplexType)):
            if id(a_type) not in selected_ids:
                selected_ids.add(id(a_type))
                selected.append(a_type)
        elif isinstance(a_type, xsd.LinkedType):
            raise AssertionError(f"Unexpected unresolved type: {a_type.name}")

    for schema in schemas:
        if schema.target_namespace not in namespaces:
            continue

        for name, a_type in schema.types.items():
            if xsd.is_self_type(a_type):
                assert isinstance(a_type, xsd.ComplexType)
                for element in a_type.elements:
                    if not (
                        config.is_wanted(element.name.local)
                        or config.is_wanted(xsd.xml_name(element.type).local)
                    ):
                        continue

                    root_elements.append((element.name, element.type))
                    select(element.type)

            elif (
                not isinstance(a_type, xsd.Builtin)
                and xsd.xml_name(a_type) == name
                and config.is_wanted(name.local)
            ):
                select(a_type)

    cursor = 0
    while cursor < len(selected):
        for referenced in _referenced_types(selected[cursor]):
            select(referenced)

        cursor += 1

    return selected, root_elements


def _verify_enum(enum_type: xsd.SimpleType, name: Identifier) -> Optional[Error]:
    literal_map = dict()  # type: Dict[Identifier, str]
    for value in enum_type.restriction.enumeration:
        literal_name = python_naming.enum_literal_name(value)
        other = literal_map.get(literal_name, None)
        if other is not None and other != value:
            return Error(
                None,
                f"The Python name {literal_name!r} of the enumeration value "
                f"{value!r} collides with the Python name of the value {other!r} "
                f"in the enumeration {name!r}",
            )

        literal_map[literal_name] = value

    return None


def _verify_class(
    a_type: xsd.ComplexType, name: Identifier, config: config_mod.Config
) -> Optional[Error]:
    field_map = dict()  # type: Dict[Identifier, Field]
    for field in _all_fields(a_type, config):
        other = field_map.get(field.name, None)
        if other is not None:
            return Error(
                None,
                f"The Python name {field.name!r} of {field.origin} collides "
                f"with the Python name of {other.origin} in the class {name!r}",
            )

        field_map[field.name] = field

    return None


@ensure(lambda result: (result[0] is None) ^ (result[1] is None))
def verify(
    schemas: Sequence[xsd.Schema],
    namespaces: Sequence[str],
    config: config_mod.Config,
) -> Tuple[Optional[VerifiedTypes], Optional[List[Error]]]:
    """
    Select the types to be generated and verify that their Python names are unique.

    The names of the classes, enums and aliases must not collide with each
    other. The names of the properties must not collide within a class, and
    neither must the literals within an enum.
    """
    selected, root_elements = _select(schemas, namespaces, config)

    generated = [a_type for a_type in selected if not _is_inlined(a_type)]

    errors = []  # type: List[Error]

    names = dict()  # type: MutableMapping[int, Identifier]
    observed = dict()  # type: Dict[Identifier, GeneratedType]

    for a_type in generated:
        name = python_naming.class_name(a_type.name.local, config.replace_rules)

        if name in _MODULE_LEVEL_NAMES:
            errors.append(
                Error(
                    None,
                    f"The Python name {name!r} of the {_describe(a_type)} "
                    f"is reserved in the generated module",
                )
            )
            continue

        other = observed.get(name, None)
        if other is not None:
            errors.append(
                Error(
                    None,
                    f"The Python name {name!r} of the {_describe(a_type)} "
                    f"collides with the Python name of the {_describe(other)}",
                )
            )
            continue

        observed[name] = a_type
        names[id(a_type)] = name

    for a_type in generated:
        name = names.get(id(a_type), None)
        if name is None:
            continue

        error = None  # type: Optional[Error]
        kind = kind_of(a_type)
        if kind is Kind.ENUM:
            assert isinstance(a_type, xsd.SimpleType)
            error = _verify_enum(a_type, name)
        elif kind is Kind.CLASS:
            assert isinstance(a_type, xsd.ComplexType)
            error = _verify_class(a_type, name, config)
        elif kind is Kind.ALIAS:
            pass
        else:
            assert_never(kind)

        if error is not None:
            errors.append(
                Error(
                    None,
                    f"Failed to verify the {_describe(a_type)}",
                    underlying=[error],
                )
            )

    if len(errors) > 0:
        return None, errors

    # Aliases need to be defined before they are used in other aliases, and
    # base classes before the derived ones. The annotations are postponed.
    index_of = {id(a_type): i for i, a_type in enumerate(generated)}
    graph = dependency.Graph()
    for i, a_type in enumerate(generated):
        graph.add_node(i)

        kind = kind_of(a_type)
        if kind is Kind.CLASS:
            assert isinstance(a_type, xsd.ComplexType)
            if _inherits(a_type):
                graph.add(i, index_of[id(a_type.base)])

        elif kind is Kind.ALIAS:
            assert isinstance(a_type, xsd.SimpleType)
            for dependency_type in _alias_dependencies(a_type, names):
                graph.add(i, index_of[id(dependency_type)])

    ordered = []  # type: List[GeneratedType]
    graph.flatten(lambda i: ordered.append(generated[i]))

    documentation = "\n\n".join(
        schema.documentation
        for schema in schemas
        if schema.target_namespace in namespaces and schema.documentation != ""
    )

    return (
        VerifiedTypes(
            types=ordered,
            names=names,
            root_elements=root_elements,
            documentation=documentation,
            config=config,
        ),
        None,
    )


# endregion

# region Generation


def _alias_dependencies(
    a_type: xsd.SimpleType, names: Mapping[int, Identifier]
) -> List[GeneratedType]:
    """List the generated types the definition of the alias ``a_type`` refers to."""
    if len(a_type.union) > 0:
        return []

    base = a_type.base
    if isinstance(base, xsd.SimpleType):
        if id(base) in names:
            return [base]

        return _alias_dependencies(base, names)

    return []


def type_expression(a_type: xsd.Type, names: Mapping[int, Identifier]) -> str:
    """Generate the Python type expression for ``a_type``."""
    if isinstance(a_type, xsd.Builtin):
        return python_common.BUILTIN_TYPES[a_type]

    elif isinstance(a_type, xsd.SimpleType):
        name = names.get(id(a_type), None)
        if name is not None:
            return name

        return _definition_expression(a_type, names)

    elif isinstance(a_type, xsd.ComplexType):
        name = names.get(id(a_type), None)
        assert name is not None, f"Unexpected type without a name: {a_type.name}"
        return name

    elif isinstance(a_type, xsd.LinkedType):
        raise AssertionError(f"Unexpected unresolved type: {a_type.name}")

    else:
        assert_never(a_type)

    raise AssertionError("Unexpected execution path")


def _definition_expression(
    a_type: xsd.SimpleType, names: Mapping[int, Identifier]
) -> str:
    """Generate the expression an alias of ``a_type`` stands for."""
    if len(a_type.union) > 0:
        # The members of a union are all text in the document.
        return "str"

    base_expression = type_expression(a_type.base, names)
    if a_type.is_list:
        return f"List[{base_expression}]"

    return base_expression


def _generate_enum(enum_type: xsd.SimpleType, name: Identifier) -> Stripped:
    """Generate the Python code for the enumeration."""
    writer = io.StringIO()
    writer.write(f"class {name}(enum.Enum):\n")

    if enum_type.documentation != "":
        writer.write(
            textwrap.indent(python_common.docstring(enum_type.documentation), I)
        )
    else:
        writer.write(f"{I}# pylint: disable=missing-class-docstring")

    observed = set()  # type: Set[str]
    for value in enum_type.restriction.enumeration:
        if value in observed:
            continue

        observed.add(value)

        literal_name = python_naming.enum_literal_name(value)
        writer.write(
            f"\n\n{I}{literal_name} = {python_common.string_literal(value)}"
        )

    return Stripped(writer.getvalue())


def _generate_alias(
    alias_type: xsd.SimpleType, name: Identifier, names: Mapping[int, Identifier]
) -> Stripped:
    """Generate the Python code for a type alias."""
    writer = io.StringIO()
    if alias_type.documentation != "":
        writer.write(python_common.comment(alias_type.documentation))
        writer.write("\n")

    writer.write(f"{name} = {_definition_expression(alias_type, names)}")
    return Stripped(writer.getvalue())


def _field_annotation(field: Field, names: Mapping[int, Identifier]) -> str:
    expression = type_expression(field.type, names)
    if field.plural:
        return f"List[{expression}]"

    if field.optional:
        return f"Optional[{expression}]"

    return expression


def _field_argument(field: Field, names: Mapping[int, Identifier]) -> str:
    """Generate the constructor argument for the ``field``."""
    annotation = _field_annotation(field, names)

    if field.plural:
        return f"{field.name}: Optional[{annotation}] = None"

    if field.default is not None and annotation in ("str", "Optional[str]"):
        default = python_common.string_literal(field.default)
        return f"{field.name}: {annotation} = {default}"

    if field.optional:
        return f"{field.name}: {annotation} = None"

    return f"{field.name}: {annotation}"


def _generate_constructor(
    class_type: xsd.ComplexType,
    names: Mapping[int, Identifier],
    config: config_mod.Config,
) -> Stripped:
    """Generate the constructor accepting all the properties as keyword arguments."""
    all_fields = _all_fields(class_type, config)
    own_fields = _own_fields(class_type, config)
    own_names = set(field.name for field in own_fields)

    arg_codes = ["self", "*"] + [
        _field_argument(field, names) for field in all_fields
    ]

    writer = io.StringIO()
    arg_block = ",\n".join(arg_codes)
    writer.write(f"def __init__(\n{textwrap.indent(arg_block, II)}\n) -> None:\n")
    writer.write(f'{I}"""Initialize with the given values."""')

    inherited_fields = [field for field in all_fields if field.name not in own_names]
    if _inherits(class_type):
        base_name = names[id(class_type.base)]
        if len(inherited_fields) == 0:
            writer.write(f"\n{I}{base_name}.__init__(self)")
        else:
            writer.write(f"\n{I}{base_name}.__init__(\n{II}self,\n")
            for field in inherited_fields:
                writer.write(f"{II}{field.name}={field.name},\n")
            writer.write(f"{I})")

    for field in own_fields:
        if field.plural:
            writer.write(
                f"\n{I}self.{field.name} = "
                f"{field.name} if {field.name} is not None else []"
            )
        else:
            writer.write(f"\n{I}self.{field.name} = {field.name}")

    return Stripped(writer.getvalue())


def _generate_class(
    class_type: xsd.ComplexType,
    name: Identifier,
    names: Mapping[int, Identifier],
    config: config_mod.Config,
) -> Stripped:
    """Generate the Python code for the class."""
    blocks = []  # type: List[Stripped]

    if class_type.documentation != "":
        blocks.append(python_common.docstring(class_type.documentation))

    own_fields = _own_fields(class_type, config)
    for field in own_fields:
        field_writer = io.StringIO()
        if field.documentation != "":
            field_writer.write(python_common.comment(field.documentation))
            field_writer.write("\n")

        field_writer.write(f"{field.name}: {_field_annotation(field, names)}")
        blocks.append(Stripped(field_writer.getvalue()))

    if len(own_fields) > 0:
        blocks.append(_generate_constructor(class_type, names, config))

    if class_type.documentation == "":
        blocks.insert(0, Stripped("# pylint: disable=missing-class-docstring"))

    if len(blocks) == 1 and class_type.documentation == "":
        blocks.append(Stripped("pass"))

    base = names[id(class_type.base)] if _inherits(class_type) else None

    writer = io.StringIO()
    if base is not None:
        writer.write(f"class {name}({base}):\n")
    else:
        writer.write(f"class {name}:\n")

    for i, block in enumerate(blocks):
        if i > 0:
            writer.write("\n\n")
        writer.write(textwrap.indent(block, I))

    return Stripped(writer.getvalue())


def _generate_root_elements(verified: VerifiedTypes) -> Stripped:
    """Map the Clark names of the top-level elements to their Python types."""
    if len(verified.root_elements) == 0:
        return Stripped("ROOT_ELEMENTS = dict()  # type: Mapping[str, Any]")

    writer = io.StringIO()
    writer.write("ROOT_ELEMENTS = {\n")
    for name, a_type in verified.root_elements:
        key = python_common.string_literal(str(name))
        writer.write(f"{I}{key}: {type_expression(a_type, verified.names)},\n")

    writer.write("}  # type: Mapping[str, Any]")
    return Stripped(writer.getvalue())


@require(lambda verified: len(verified.names) >= len(verified.types))
def generate(verified: VerifiedTypes) -> str:
    """Generate the Python code of the structures based on the verified types."""
    docstring = "Provide the data structures generated from the XML schemas."
    if verified.documentation != "":
        docstring = f"{docstring}\n\n{verified.documentation}"

    blocks = [
        python_common.docstring(docstring),
        python_common.WARNING,
        Stripped(
            f"""\
from __future__ import annotations

import datetime
import decimal
import enum
from typing import (
{I}Any,
{I}List,
{I}Mapping,
{I}Optional,
)"""
        ),
        Stripped("# pylint: disable=redefined-builtin,line-too-long"),
    ]  # type: List[Stripped]

    for a_type in verified.types:
        name = verified.names[id(a_type)]
        kind = kind_of(a_type)

        if kind is Kind.ENUM:
            assert isinstance(a_type, xsd.SimpleType)
            blocks.append(_generate_enum(a_type, name))
        elif kind is Kind.ALIAS:
            assert isinstance(a_type, xsd.SimpleType)
            blocks.append(_generate_alias(a_type, name, verified.names))
        elif kind is Kind.CLASS:
            assert isinstance(a_type, xsd.ComplexType)
            blocks.append(
                _generate_class(a_type, name, verified.names, verified.config)
            )
        else:
            assert_never(kind)

    blocks.append(_generate_root_elements(verified))
    blocks.append(python_common.WARNING)

    out = io.StringIO()
    for i, block in enumerate(blocks):
        if i > 0:
            out.write("\n\n\n")

        out.write(block)

    out.write("\n")

    return out.getvalue()


# endregion
