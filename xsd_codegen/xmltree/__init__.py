"""Represent XML documents as trees which keep track of namespace declarations."""

from xsd_codegen.xmltree import _types, _parse, _marshal

XML_NS = _types.XML_NS
MAX_DEPTH = _types.MAX_DEPTH
QName = _types.QName
Attr = _types.Attr
Scope = _types.Scope
Predicate = _types.Predicate
Element = _types.Element

parse = _parse.parse

marshal = _marshal.marshal
