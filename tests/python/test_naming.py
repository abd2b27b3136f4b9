# pylint: disable=missing-docstring

import unittest

from xsd_codegen import config as config_mod
from xsd_codegen.python import naming as python_naming


def _rule(text: str) -> config_mod.ReplaceRule:
    rule, error = config_mod.parse_replace_rule(text)
    assert error is None, error
    assert rule is not None
    return rule


class Test_class_name(unittest.TestCase):
    def test_plain(self) -> None:
        self.assertEqual(
            "PurchaseOrderType", python_naming.class_name("PurchaseOrderType")
        )

    def test_synthetic(self) -> None:
        self.assertEqual("Anon12", python_naming.class_name("_anon12"))

    def test_leading_digit(self) -> None:
        self.assertEqual("T2DPoint", python_naming.class_name("2DPoint"))

    def test_only_punctuation(self) -> None:
        self.assertEqual("Type", python_naming.class_name("--"))

    def test_replace_rules_in_order(self) -> None:
        rules = [_rule(r"^ArrayOf(.*)$ -> \1List"), _rule("Int -> Integer")]

        self.assertEqual("IntegerList", python_naming.class_name("ArrayOfInt", rules))
        self.assertEqual("Order", python_naming.class_name("Order", rules))

    def test_replaced_to_nothing(self) -> None:
        self.assertEqual(
            "Type", python_naming.class_name("Impl", [_rule("^Impl$ -> ")])
        )


class Test_property_name(unittest.TestCase):
    def test_keyword(self) -> None:
        self.assertEqual("from_", python_naming.property_name("from"))
        self.assertEqual("import_", python_naming.property_name("Import"))

    def test_self(self) -> None:
        self.assertEqual("self_", python_naming.property_name("self"))

    def test_camel_case(self) -> None:
        self.assertEqual("order_date", python_naming.property_name("orderDate"))

    def test_replace_rules_before_snake_case(self) -> None:
        self.assertEqual(
            "date",
            python_naming.property_name("orderDate", [_rule("^order -> ")]),
        )

        # The rules see the name from the schema, not the Python one.
        self.assertEqual(
            "order_date",
            python_naming.property_name("orderDate", [_rule("^order_ -> ")]),
        )


class Test_enum_literal_name(unittest.TestCase):
    def test_plain(self) -> None:
        self.assertEqual("RED", python_naming.enum_literal_name("red"))

    def test_leading_digit(self) -> None:
        self.assertEqual("V_42", python_naming.enum_literal_name("42"))

    def test_keyword_upper_case_is_not_escaped(self) -> None:
        self.assertEqual("NONE", python_naming.enum_literal_name("none"))

    def test_empty(self) -> None:
        self.assertEqual("EMPTY", python_naming.enum_literal_name(""))


if __name__ == "__main__":
    unittest.main()
