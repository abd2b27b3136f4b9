# pylint: disable=missing-docstring

import unittest
from typing import List

from xsd_codegen import xmltree, xsd
from xsd_codegen.common import most_underlying_messages
from xsd_codegen.xmltree import QName

from tests import common as tests_common


def _roots(*docs: bytes) -> List[xmltree.Element]:
    roots = []  # type: List[xmltree.Element]
    for doc in docs:
        root, exception = xmltree.parse(doc)
        if exception is not None:
            raise AssertionError(f"Unexpected parse error: {exception}")

        assert root is not None
        roots.append(root)

    return roots


class Test_build_index(unittest.TestCase):
    def test_lookup_by_name_and_kind(self) -> None:
        roots = _roots(
            tests_common.schema_document(
                """\
                <xs:element name="Widget" type="xs:string"/>
                <xs:complexType name="Widget"/>"""
            )
        )

        index, error = xsd.build_index(roots)
        assert error is None, f"{most_underlying_messages(error)}"
        assert index is not None

        element = index.lookup(
            QName(tests_common.TNS, "Widget"), QName(xsd.SCHEMA_NS, "element")
        )
        complex_type = index.lookup(
            QName(tests_common.TNS, "Widget"), QName(xsd.SCHEMA_NS, "complexType")
        )

        assert element is not None
        assert complex_type is not None
        self.assertEqual("element", element.name.local)
        self.assertEqual("complexType", complex_type.name.local)

        self.assertIsNone(
            index.lookup(
                QName(tests_common.TNS, "Widget"), QName(xsd.SCHEMA_NS, "group")
            )
        )

    def test_ids_are_stable(self) -> None:
        roots = _roots(
            tests_common.schema_document('<xs:element name="a" type="xs:int"/>')
        )

        index, error = xsd.build_index(roots)
        assert error is None, f"{most_underlying_messages(error)}"
        assert index is not None

        for node_id, node in enumerate(index.nodes):
            self.assertEqual(node_id, index.id_of(node))
            self.assertIs(node, index.node_by_id(node_id))
            self.assertEqual(tests_common.TNS, index.namespace_of(node_id))

    def test_duplicate_in_same_document(self) -> None:
        roots = _roots(
            tests_common.schema_document(
                """\
                <xs:element name="a" type="xs:int"/>
                <xs:element name="a" type="xs:string"/>"""
            )
        )

        index, error = xsd.build_index(roots)

        self.assertIsNone(index)
        assert error is not None
        self.assertIn("more than once", error.message)

    def test_later_document_overrides(self) -> None:
        roots = _roots(
            tests_common.schema_document('<xs:element name="a" type="xs:int"/>'),
            tests_common.schema_document('<xs:element name="a" type="xs:string"/>'),
        )

        index, error = xsd.build_index(roots)
        assert error is None, f"{most_underlying_messages(error)}"
        assert index is not None

        node = index.lookup(
            QName(tests_common.TNS, "a"), QName(xsd.SCHEMA_NS, "element")
        )
        assert node is not None
        self.assertEqual("xs:string", node.attr("type"))


if __name__ == "__main__":
    unittest.main()
