"""Normalize XML schemas and resolve them into an object model of types."""

from xsd_codegen.xsd import (
    _types,
    _query,
    _index,
    _standard,
    _normalize,
    _translate,
    _stringify,
)

SCHEMA_NS = _types.SCHEMA_NS
SOAPENC_NS = _types.SOAPENC_NS
WSDL_NS = _types.WSDL_NS
XLINK_NS = _types.XLINK_NS
Builtin = _types.Builtin
parse_builtin = _types.parse_builtin
LinkedType = _types.LinkedType
Restriction = _types.Restriction
SimpleType = _types.SimpleType
Element = _types.Element
Attribute = _types.Attribute
ComplexType = _types.ComplexType
Type = _types.Type
ResolvedType = _types.ResolvedType
xml_name = _types.xml_name
base_of = _types.base_of
builtin_root = _types.builtin_root
Schema = _types.Schema
find_type = _types.find_type
builtin_schema = _types.builtin_schema

ANONYMOUS_MARKER = _query.ANONYMOUS_MARKER

SchemaIndex = _index.SchemaIndex
build_index = _index.build_index

STANDARD_SCHEMA_FILES = _standard.STANDARD_SCHEMA_FILES
standard_schemas = _standard.standard_schemas

NAMESPACE_MARKER = _normalize.NAMESPACE_MARKER
imports = _normalize.imports
target_namespaces = _normalize.target_namespaces
inject_default_types = _normalize.inject_default_types
name_anonymous_types_after_declarations = (
    _normalize.name_anonymous_types_after_declarations
)
name_anonymous_types_with_counter = _normalize.name_anonymous_types_with_counter
make_choice_branches_optional = _normalize.make_choice_branches_optional
expand_complex_type = _normalize.expand_complex_type
expand_complex_type_shorthand = _normalize.expand_complex_type_shorthand
flatten_references = _normalize.flatten_references
unpack_groups = _normalize.unpack_groups
check_acyclic = _normalize.check_acyclic
normalize_in_place = _normalize.normalize_in_place
normalize = _normalize.normalize

UNBOUNDED = _translate.UNBOUNDED
SELF_TYPE_LOCAL = _translate.SELF_TYPE_LOCAL
is_self_type = _translate.is_self_type
parse = _translate.parse

dump = _stringify.dump
