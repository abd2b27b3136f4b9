# pylint: disable=missing-docstring

import decimal
import re
import unittest
from typing import Any, Dict, List, Optional, Sequence, Tuple

from xsd_codegen import config as config_mod
from xsd_codegen.common import Error, most_underlying_messages
from xsd_codegen.python import structure as python_structure

from tests import common as tests_common


def _verify(
    docs: Sequence[bytes],
    namespaces: Sequence[str] = (tests_common.TNS,),
    replace_rules: Sequence[str] = (),
    only_types: Sequence[str] = (),
) -> Tuple[Optional[python_structure.VerifiedTypes], Optional[List[Error]]]:
    rules = []  # type: List[config_mod.ReplaceRule]
    for text in replace_rules:
        rule, error = config_mod.parse_replace_rule(text)
        assert error is None, error
        assert rule is not None
        rules.append(rule)

    config = config_mod.default_config().replace(
        namespaces=namespaces,
        replace_rules=rules,
        only_types=[re.compile(pattern) for pattern in only_types],
    )

    schemas = tests_common.parse_or_fail(docs)
    config_mod.apply_type_transforms(schemas, config)

    return python_structure.verify(
        schemas=schemas, namespaces=namespaces, config=config
    )


def _generate(
    docs: Sequence[bytes],
    namespaces: Sequence[str] = (tests_common.TNS,),
    replace_rules: Sequence[str] = (),
    only_types: Sequence[str] = (),
) -> str:
    verified, errors = _verify(docs, namespaces, replace_rules, only_types)
    assert errors is None, f"{[most_underlying_messages(error) for error in errors]}"
    assert verified is not None

    return python_structure.generate(verified)


def _execute(code: str) -> Dict[str, Any]:
    """Execute the generated ``code`` and give the resulting module namespace."""
    namespace = dict()  # type: Dict[str, Any]
    exec(compile(code, "<generated>", "exec"), namespace)  # pylint: disable=exec-used
    return namespace


_PURCHASE_ORDER = tests_common.schema_document(
    """\
    <xs:annotation>
      <xs:documentation>Purchase orders of a small shop.</xs:documentation>
    </xs:annotation>
    <xs:element name="purchaseOrder" type="tns:PurchaseOrderType"/>
    <xs:simpleType name="Color">
      <xs:annotation>
        <xs:documentation>Color of an item</xs:documentation>
      </xs:annotation>
      <xs:restriction base="xs:string">
        <xs:enumeration value="red"/>
        <xs:enumeration value="dark-blue"/>
      </xs:restriction>
    </xs:simpleType>
    <xs:complexType name="PurchaseOrderType">
      <xs:sequence>
        <xs:element name="orderDate" type="xs:date" minOccurs="0"/>
        <xs:element name="item" type="tns:Item" maxOccurs="unbounded"/>
      </xs:sequence>
      <xs:attribute name="number" type="xs:int" use="required"/>
      <xs:attribute name="href" type="xs:string"/>
    </xs:complexType>
    <xs:complexType name="Item">
      <xs:sequence>
        <xs:element name="name" type="xs:string"/>
        <xs:element name="price" type="xs:decimal" nillable="true"/>
        <xs:element name="color" type="tns:Color" default="red"/>
      </xs:sequence>
    </xs:complexType>"""
)


class Test_generate(unittest.TestCase):
    def test_purchase_order(self) -> None:
        code = _generate([_PURCHASE_ORDER])
        namespace = _execute(code)

        self.assertTrue(code.startswith('"""\nProvide the data structures'))
        self.assertIn("Purchase orders of a small shop.", code)

        color = namespace["Color"]
        self.assertEqual("red", color.RED.value)
        self.assertEqual("dark-blue", color.DARK_BLUE.value)
        self.assertEqual("Color of an item", color.__doc__)

        item_class = namespace["Item"]
        item = item_class(name="pen")
        self.assertEqual("pen", item.name)
        self.assertIsNone(item.price)
        self.assertIsNone(item.color)

        order_class = namespace["PurchaseOrderType"]
        order = order_class(number=7, item=[item])
        self.assertEqual(7, order.number)
        self.assertIsNone(order.order_date)
        self.assertListEqual([item], order.item)
        self.assertListEqual([], order_class(number=8).item)

        # The attribute is ignored by the default configuration.
        self.assertFalse(hasattr(order, "href"))

        with self.assertRaises(TypeError):
            order_class(7)

        self.assertDictEqual(
            {"{urn:test}purchaseOrder": order_class}, namespace["ROOT_ELEMENTS"]
        )

    def test_inheritance(self) -> None:
        code = _generate(
            [
                tests_common.schema_document(
                    """\
                    <xs:complexType name="Derived">
                      <xs:complexContent>
                        <xs:extension base="tns:Base">
                          <xs:sequence>
                            <xs:element name="label" type="xs:string"/>
                          </xs:sequence>
                        </xs:extension>
                      </xs:complexContent>
                    </xs:complexType>
                    <xs:complexType name="Base">
                      <xs:attribute name="version" type="xs:string"/>
                    </xs:complexType>
                    <xs:complexType name="Restricted">
                      <xs:complexContent>
                        <xs:restriction base="tns:Base"/>
                      </xs:complexContent>
                    </xs:complexType>"""
                )
            ]
        )

        # The base class is defined before the derived one.
        self.assertLess(code.index("class Base:"), code.index("class Derived(Base):"))

        namespace = _execute(code)
        base_class = namespace["Base"]
        derived_class = namespace["Derived"]

        self.assertTrue(issubclass(derived_class, base_class))

        derived = derived_class(version="1.0", label="something")
        self.assertEqual("1.0", derived.version)
        self.assertEqual("something", derived.label)

        # A restriction does not inherit the properties.
        self.assertFalse(issubclass(namespace["Restricted"], base_class))
        self.assertFalse(hasattr(namespace["Restricted"](), "version"))

    def test_simple_and_mixed_content(self) -> None:
        namespace = _execute(
            _generate(
                [
                    tests_common.schema_document(
                        """\
                        <xs:complexType name="Price">
                          <xs:simpleContent>
                            <xs:extension base="xs:decimal">
                              <xs:attribute name="currency" type="xs:string"
                                            default="EUR"/>
                            </xs:extension>
                          </xs:simpleContent>
                        </xs:complexType>
                        <xs:complexType name="Paragraph" mixed="true">
                          <xs:sequence>
                            <xs:element name="b" type="xs:string"
                                        minOccurs="0" maxOccurs="unbounded"/>
                            <xs:any minOccurs="0"/>
                          </xs:sequence>
                        </xs:complexType>"""
                    )
                ]
            )
        )

        price = namespace["Price"](value=decimal.Decimal("1.5"))
        self.assertEqual(decimal.Decimal("1.5"), price.value)
        self.assertEqual("EUR", price.currency)

        paragraph = namespace["Paragraph"]()
        self.assertEqual("", paragraph.text)
        self.assertListEqual([], paragraph.b)
        self.assertListEqual([], paragraph.any_elements)

    def test_aliases(self) -> None:
        code = _generate(
            [
                tests_common.schema_document(
                    """\
                    <xs:simpleType name="Codes">
                      <xs:list itemType="tns:Code"/>
                    </xs:simpleType>
                    <xs:simpleType name="Code">
                      <xs:annotation>
                        <xs:documentation>Three letters</xs:documentation>
                      </xs:annotation>
                      <xs:restriction base="xs:token">
                        <xs:length value="3"/>
                      </xs:restriction>
                    </xs:simpleType>
                    <xs:simpleType name="CodeOrNumber">
                      <xs:union memberTypes="tns:Code xs:int"/>
                    </xs:simpleType>
                    <xs:simpleType name="Sizes">
                      <xs:list>
                        <xs:simpleType>
                          <xs:restriction base="xs:int"/>
                        </xs:simpleType>
                      </xs:list>
                    </xs:simpleType>
                    <xs:complexType name="Box">
                      <xs:sequence>
                        <xs:element name="codes" type="tns:Codes"/>
                        <xs:element name="sizes" type="tns:Sizes"/>
                      </xs:sequence>
                    </xs:complexType>"""
                )
            ]
        )

        self.assertIn("#: Three letters\nCode = str", code)
        self.assertLess(code.index("Code = str"), code.index("Codes = List[Code]"))
        self.assertIn("CodeOrNumber = str", code)

        # The anonymous item type is inlined.
        self.assertIn("Sizes = List[int]", code)
        self.assertNotIn("Anon", code)

        namespace = _execute(code)
        self.assertEqual(List[str], namespace["Codes"])

        box = namespace["Box"](codes=["abc"], sizes=[1, 2])
        self.assertListEqual([1, 2], box.sizes)

    def test_referenced_types_of_other_namespaces(self) -> None:
        other = (
            f'<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema"\n'
            f'           targetNamespace="urn:other">\n'
            f'  <xs:complexType name="Used"/>\n'
            f'  <xs:complexType name="Unused"/>\n'
            f"</xs:schema>\n"
        ).encode("utf-8")

        code = _generate(
            [
                tests_common.schema_document(
                    """\
                    <xs:complexType name="Holder">
                      <xs:sequence>
                        <xs:element name="used" type="other:Used"/>
                      </xs:sequence>
                    </xs:complexType>""",
                    attributes='xmlns:other="urn:other"',
                ),
                other,
            ]
        )

        self.assertIn("class Used:", code)
        self.assertNotIn("class Unused:", code)


_SHOP = tests_common.schema_document(
    """\
    <xs:element name="order" type="tns:Order"/>
    <xs:element name="invoice" type="tns:Invoice"/>
    <xs:complexType name="Order">
      <xs:sequence>
        <xs:element name="lines" type="tns:ArrayOfLine"/>
      </xs:sequence>
      <xs:attribute name="orderNumber" type="xs:int"/>
    </xs:complexType>
    <xs:complexType name="ArrayOfLine">
      <xs:sequence>
        <xs:element name="line" type="tns:Line" maxOccurs="unbounded"/>
      </xs:sequence>
    </xs:complexType>
    <xs:complexType name="Line">
      <xs:attribute name="sku" type="xs:string"/>
    </xs:complexType>
    <xs:complexType name="Invoice">
      <xs:attribute name="total" type="xs:decimal"/>
    </xs:complexType>
    <xs:complexType name="Unrelated"/>"""
)


class Test_naming_and_selection(unittest.TestCase):
    def test_replace_rules(self) -> None:
        code = _generate(
            [_SHOP], replace_rules=[r"^ArrayOf(.*)$ -> \1List", "^order -> "]
        )

        self.assertIn("class LineList:", code)
        self.assertNotIn("class ArrayOfLine", code)

        # The class names are capitalized, so the second rule leaves them be.
        self.assertIn("class Order:", code)

        namespace = _execute(code)
        line = namespace["Line"](sku="x-1")
        lines = namespace["LineList"](line=[line])
        order = namespace["Order"](lines=lines, number=3)

        self.assertEqual(3, order.number)
        self.assertFalse(hasattr(order, "order_number"))
        self.assertListEqual([line], order.lines.line)

        # The XML names of the root elements stay as they are.
        self.assertIs(namespace["Order"], namespace["ROOT_ELEMENTS"]["{urn:test}order"])

    def test_replace_rules_cause_collision(self) -> None:
        verified, errors = _verify([_SHOP], replace_rules=["^Invoice$ -> Order"])

        self.assertIsNone(verified)
        assert errors is not None
        self.assertIn("'Order'", errors[0].message)
        self.assertIn("collides", errors[0].message)

    def test_only_types_with_dependencies(self) -> None:
        code = _generate([_SHOP], only_types=["^Order$"])

        self.assertIn("class Order:", code)
        self.assertIn("class ArrayOfLine:", code)
        self.assertIn("class Line:", code)
        self.assertNotIn("class Invoice", code)
        self.assertNotIn("class Unrelated", code)

        namespace = _execute(code)
        self.assertDictEqual(
            {"{urn:test}order": namespace["Order"]}, namespace["ROOT_ELEMENTS"]
        )

    def test_only_types_match_root_element_names(self) -> None:
        code = _generate([_SHOP], only_types=["^invoice$"])

        self.assertIn("class Invoice:", code)
        self.assertNotIn("class Order", code)
        self.assertNotIn("class Unrelated", code)

        namespace = _execute(code)
        self.assertDictEqual(
            {"{urn:test}invoice": namespace["Invoice"]}, namespace["ROOT_ELEMENTS"]
        )

    def test_only_types_match_nothing(self) -> None:
        code = _generate([_SHOP], only_types=["^Missing$"])

        self.assertNotIn("class ", code)

        namespace = _execute(code)
        self.assertDictEqual({}, namespace["ROOT_ELEMENTS"])


class Test_verify(unittest.TestCase):
    def test_type_names_collide(self) -> None:
        verified, errors = _verify(
            [
                tests_common.schema_document(
                    """\
                    <xs:complexType name="order-item"/>
                    <xs:complexType name="orderItem"/>"""
                )
            ]
        )

        self.assertIsNone(verified)
        assert errors is not None
        self.assertEqual(1, len(errors))
        self.assertIn("'OrderItem'", errors[0].message)
        self.assertIn("collides", errors[0].message)

    def test_reserved_name(self) -> None:
        verified, errors = _verify(
            [tests_common.schema_document('<xs:complexType name="optional"/>')]
        )

        self.assertIsNone(verified)
        assert errors is not None
        self.assertIn("reserved", errors[0].message)

    def test_property_names_collide(self) -> None:
        verified, errors = _verify(
            [
                tests_common.schema_document(
                    """\
                    <xs:complexType name="Thing">
                      <xs:sequence>
                        <xs:element name="shipTo" type="xs:string"/>
                      </xs:sequence>
                      <xs:attribute name="ship_to" type="xs:string"/>
                    </xs:complexType>"""
                )
            ]
        )

        self.assertIsNone(verified)
        assert errors is not None
        self.assertListEqual(
            [
                "The Python name 'ship_to' of the element shipTo collides with "
                "the Python name of the attribute ship_to in the class 'Thing'"
            ],
            most_underlying_messages(errors[0]),
        )

    def test_enum_literals_collide(self) -> None:
        verified, errors = _verify(
            [
                tests_common.schema_document(
                    """\
                    <xs:simpleType name="Status">
                      <xs:restriction base="xs:string">
                        <xs:enumeration value="in-progress"/>
                        <xs:enumeration value="in_progress"/>
                      </xs:restriction>
                    </xs:simpleType>"""
                )
            ]
        )

        self.assertIsNone(verified)
        assert errors is not None
        self.assertIn("'IN_PROGRESS'", most_underlying_messages(errors[0])[0])


if __name__ == "__main__":
    unittest.main()
