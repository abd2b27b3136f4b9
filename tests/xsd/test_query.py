# pylint: disable=missing-docstring

import unittest

from xsd_codegen import xmltree
from xsd_codegen.xsd import _query
from xsd_codegen.xsd._types import SCHEMA_NS

from tests import common as tests_common


def _schema_root(body: str) -> xmltree.Element:
    root, exception = xmltree.parse(tests_common.schema_document(body))
    assert exception is None, f"{exception}"
    assert root is not None
    return root


class Test_predicates(unittest.TestCase):
    def test_is_elem_and_has_attr_value(self) -> None:
        root = _schema_root(
            """\
            <xs:element name="a" type="xs:string"/>
            <xs:element name="b" type="xs:int"/>
            <xs:attribute name="a" type="xs:string"/>"""
        )

        found = root.search_func(
            _query.and_(
                _query.is_elem(SCHEMA_NS, "element"),
                _query.has_attr_value("name", "a"),
            )
        )

        self.assertEqual(1, len(found))
        self.assertEqual("xs:string", found[0].attr("type"))

    def test_or_and_not(self) -> None:
        root = _schema_root(
            """\
            <xs:complexType name="A"/>
            <xs:simpleType name="B">
              <xs:restriction base="xs:string"/>
            </xs:simpleType>
            <xs:element name="c" type="tns:A"/>"""
        )

        either = _query.or_(
            _query.has_attr_value("name", "A"), _query.has_attr_value("name", "c")
        )
        self.assertListEqual(
            ["A", "c"], [node.attr("name") for node in root.search_func(either)]
        )

        neither = _query.and_(_query.has_attr("name"), _query.not_(either))
        self.assertListEqual(
            ["B"], [node.attr("name") for node in root.search_func(neither)]
        )

    def test_anonymous_types_and_groups(self) -> None:
        root = _schema_root(
            """\
            <xs:element name="named" type="xs:string"/>
            <xs:element name="inline">
              <xs:complexType>
                <xs:sequence>
                  <xs:group ref="tns:G"/>
                </xs:sequence>
                <xs:attributeGroup ref="tns:AG"/>
              </xs:complexType>
            </xs:element>"""
        )

        named, inline = root.children
        anonymous = inline.children[0]

        self.assertFalse(_query.has_anonymous_type(named))
        self.assertTrue(_query.has_anonymous_type(inline))
        self.assertTrue(_query.is_anonymous_type(anonymous))

        # Only the direct children are considered.
        self.assertTrue(_query.has_groups(anonymous))
        self.assertFalse(_query.has_groups(inline))
        self.assertTrue(_query.has_groups(anonymous.children[0]))

        self.assertTrue(_query.is_element_or_attribute(named))
        self.assertFalse(_query.is_element_or_attribute(anonymous))


if __name__ == "__main__":
    unittest.main()
