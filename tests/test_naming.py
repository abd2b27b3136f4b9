# pylint: disable=missing-docstring

import unittest

from xsd_codegen import naming


class Test_split_words(unittest.TestCase):
    def test_empty(self) -> None:
        self.assertListEqual([], naming.split_words(""))

    def test_camel_case(self) -> None:
        self.assertListEqual(
            ["purchase", "Order", "Type"], naming.split_words("purchaseOrderType")
        )

    def test_acronym_followed_by_word(self) -> None:
        self.assertListEqual(["XML", "Schema"], naming.split_words("XMLSchema"))

    def test_punctuation_is_dropped(self) -> None:
        self.assertListEqual(
            ["ship", "to", "address"], naming.split_words("ship-to.address")
        )

    def test_digits(self) -> None:
        self.assertListEqual(["item", "2", "Price"], naming.split_words("item2Price"))


class Test_case_conversion(unittest.TestCase):
    def test_lower_snake_case(self) -> None:
        self.assertEqual("order_date", naming.lower_snake_case("orderDate"))
        self.assertEqual("xml_lang", naming.lower_snake_case("xml:lang"))

    def test_upper_snake_case(self) -> None:
        self.assertEqual("IN_PROGRESS", naming.upper_snake_case("in-progress"))

    def test_capitalized_camel_case(self) -> None:
        self.assertEqual("UsAddress", naming.capitalized_camel_case("usAddress"))
        self.assertEqual("USAddress", naming.capitalized_camel_case("USAddress"))


if __name__ == "__main__":
    unittest.main()
