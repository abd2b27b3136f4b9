# pylint: disable=missing-docstring

import unittest

from xsd_codegen import xmltree
from xsd_codegen.xmltree import QName


def _parse_or_fail(text: str) -> xmltree.Element:
    root, exception = xmltree.parse(text.encode("utf-8"))
    if exception is not None:
        raise AssertionError(f"Unexpected parse error: {exception}")

    assert root is not None
    return root


class Test_parse(unittest.TestCase):
    def test_names_are_qualified(self) -> None:
        root = _parse_or_fail(
            '<a:root xmlns:a="urn:a" xmlns="urn:default"><child/></a:root>'
        )

        self.assertEqual(QName("urn:a", "root"), root.name)
        self.assertEqual(QName("urn:default", "child"), root.children[0].name)

    def test_scope_tracks_nested_declarations(self) -> None:
        root = _parse_or_fail(
            '<root xmlns:p="urn:outer">'
            '<inner xmlns:p="urn:inner" value="p:x"/>'
            '<sibling value="p:y"/>'
            "</root>"
        )

        inner, sibling = root.children

        self.assertEqual(QName("urn:inner", "x"), inner.scope.resolve("p:x"))
        self.assertEqual(QName("urn:outer", "y"), sibling.scope.resolve("p:y"))

    def test_undeclared_prefix_is_taken_verbatim(self) -> None:
        root = _parse_or_fail("<root/>")
        self.assertEqual(QName("q", "x"), root.scope.resolve("q:x"))

    def test_xml_prefix_is_implicit(self) -> None:
        root = _parse_or_fail("<root/>")
        self.assertEqual(
            QName(xmltree.XML_NS, "lang"), root.scope.resolve("xml:lang")
        )

    def test_text_and_tail(self) -> None:
        root = _parse_or_fail("<root>before<b>bold</b>after</root>")

        self.assertEqual("before", root.text)
        self.assertEqual("bold", root.children[0].text)
        self.assertEqual("after", root.children[0].tail)
        self.assertEqual("beforeboldafter", "".join(root.itertext()))

    def test_malformed(self) -> None:
        root, exception = xmltree.parse(b"<root><unclosed></root>")

        self.assertIsNone(root)
        self.assertIsNotNone(exception)

    def test_too_deep(self) -> None:
        depth = xmltree.MAX_DEPTH + 1
        text = "<a>" * depth + "</a>" * depth

        root, exception = xmltree.parse(text.encode("utf-8"))

        self.assertIsNone(root)
        self.assertIsNotNone(exception)


class Test_element(unittest.TestCase):
    def test_search(self) -> None:
        root = _parse_or_fail(
            '<r xmlns="urn:x"><a><b id="1"/></a><b id="2"/><c/></r>'
        )

        self.assertListEqual(
            ["1", "2"], [node.attr("id") for node in root.search("urn:x", "b")]
        )

    def test_copy_is_deep(self) -> None:
        root = _parse_or_fail("<r><a><b/></a></r>")

        duplicate = root.copy()
        duplicate.children[0].children[0].set_attr("changed", "yes")

        self.assertIsNone(root.children[0].children[0].attr("changed"))
        self.assertEqual("yes", duplicate.children[0].children[0].attr("changed"))

    def test_set_and_delete_attribute(self) -> None:
        root = _parse_or_fail('<r a="1"/>')

        root.set_attr("a", "2")
        root.set_attr("b", "3")
        self.assertEqual("2", root.attr("a"))
        self.assertEqual("3", root.attr("b"))

        root.del_attr("a")
        self.assertIsNone(root.attr("a"))


class Test_scope(unittest.TestCase):
    def test_prefix_of_shadowed_binding(self) -> None:
        scope = xmltree.Scope([("p", "urn:a"), ("p", "urn:b")])

        self.assertIsNone(scope.prefix(QName("urn:a", "x")))
        self.assertEqual("p:x", scope.prefix(QName("urn:b", "x")))

    def test_unused_prefix(self) -> None:
        scope = xmltree.Scope([("ns0", "urn:a"), ("ns1", "urn:b")])
        self.assertEqual("ns2", scope.unused_prefix())

    def test_resolve_default(self) -> None:
        scope = xmltree.Scope([("", "urn:default")])

        self.assertEqual(
            QName("urn:target", "Widget"),
            scope.resolve_default("Widget", "urn:target"),
        )
        self.assertEqual(
            QName("urn:default", "Widget"), scope.resolve("Widget")
        )


class Test_marshal(unittest.TestCase):
    def test_declarations_are_written(self) -> None:
        root = _parse_or_fail(
            '<p:root xmlns:p="urn:p"><p:child attr="p:x">text</p:child></p:root>'
        )

        text = xmltree.marshal(root)

        self.assertEqual(
            '<p:root xmlns:p="urn:p"><p:child attr="p:x">text</p:child></p:root>',
            text,
        )

    def test_reparse_keeps_names(self) -> None:
        root = _parse_or_fail(
            '<root xmlns="urn:d" xmlns:o="urn:o"><o:a/><b o:attr="v"/></root>'
        )

        reparsed = _parse_or_fail(xmltree.marshal(root))

        self.assertEqual(QName("urn:d", "root"), reparsed.name)
        self.assertEqual(QName("urn:o", "a"), reparsed.children[0].name)
        self.assertEqual("v", reparsed.children[1].attr("attr", "urn:o"))

    def test_max_depth_truncates(self) -> None:
        root = _parse_or_fail("<a><b><c/></b></a>")

        text = xmltree.marshal(root, max_depth=1)

        self.assertIn("<b>", text)
        self.assertNotIn("<c", text)


if __name__ == "__main__":
    unittest.main()
