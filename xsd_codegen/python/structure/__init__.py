"""Generate the Python data structures from the resolved schemas."""

from xsd_codegen.python.structure import _generate

GeneratedType = _generate.GeneratedType
Kind = _generate.Kind
kind_of = _generate.kind_of
Field = _generate.Field
VerifiedTypes = _generate.VerifiedTypes
verify = _generate.verify
type_expression = _generate.type_expression
generate = _generate.generate
