# pylint: disable=missing-docstring

import unittest

import xsd_codegen.common
from xsd_codegen import xmltree
from xsd_codegen.common import Error


def _node(local: str, **attributes: str) -> xmltree.Element:
    return xmltree.Element(
        name=xmltree.QName("urn:x", local),
        attrs=[
            xmltree.Attr(xmltree.QName("", key), value)
            for key, value in attributes.items()
        ],
    )


class Test_describe_node(unittest.TestCase):
    def test_named(self) -> None:
        self.assertEqual(
            "<element name='shipTo'>",
            xsd_codegen.common.describe_node(_node("element", name="shipTo")),
        )

    def test_reference(self) -> None:
        self.assertEqual(
            "<group ref='tns:address'>",
            xsd_codegen.common.describe_node(_node("group", ref="tns:address")),
        )

    def test_without_name(self) -> None:
        self.assertEqual(
            "<sequence>", xsd_codegen.common.describe_node(_node("sequence"))
        )


class Test_error_message(unittest.TestCase):
    def test_without_node(self) -> None:
        self.assertEqual(
            "Something went wrong",
            xsd_codegen.common.error_message(Error(None, "Something went wrong")),
        )

    def test_breadcrumbs(self) -> None:
        error = Error(
            _node("complexType", name="Foo"),
            "Failed to parse the complex type",
            underlying=[
                Error(_node("element", name="Bar"), "Expected a boolean"),
                Error(None, "Another problem"),
            ],
        )

        self.assertEqual(
            "In <complexType name='Foo'>: Failed to parse the complex type\n"
            "  In <element name='Bar'>: Expected a boolean\n"
            "  Another problem",
            xsd_codegen.common.error_message(error),
        )

    def test_most_underlying_messages(self) -> None:
        error = Error(
            None,
            "outer",
            underlying=[
                Error(None, "middle", underlying=[Error(None, "first leaf")]),
                Error(None, "second leaf"),
            ],
        )

        self.assertListEqual(
            ["first leaf", "second leaf"],
            xsd_codegen.common.most_underlying_messages(error),
        )


class Test_indent_but_first_line(unittest.TestCase):
    def test_single_line(self) -> None:
        self.assertEqual(
            "something", xsd_codegen.common.indent_but_first_line("something", "  ")
        )

    def test_empty_lines_are_not_indented(self) -> None:
        self.assertEqual(
            "first\n  second\n\n  fourth",
            xsd_codegen.common.indent_but_first_line(
                "first\nsecond\n\nfourth", "  "
            ),
        )


class Test_identifier(unittest.TestCase):
    def test_valid(self) -> None:
        self.assertEqual("ship_to", xsd_codegen.common.Identifier("ship_to"))


if __name__ == "__main__":
    unittest.main()
