"""Split the XML names into words and join them for the respective targets."""

import re
from typing import List

from icontract import ensure

_WORD_RE = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|[0-9]+")


@ensure(lambda result: all(len(word) > 0 for word in result))
def split_words(text: str) -> List[str]:
    """
    Split the ``text`` into words on case changes, digits and punctuation.

    >>> split_words("purchaseOrder")
    ['purchase', 'Order']

    >>> split_words("HTTPRequest-type_2")
    ['HTTP', 'Request', 'type', '2']

    >>> split_words("_anon12")
    ['anon', '12']
    """
    return _WORD_RE.findall(text)


def lower_snake_case(text: str) -> str:
    """
    Convert the ``text`` to a ``snake_case``.

    >>> lower_snake_case("purchaseOrder")
    'purchase_order'

    >>> lower_snake_case("ID")
    'id'
    """
    return "_".join(word.lower() for word in split_words(text))


def upper_snake_case(text: str) -> str:
    """
    Convert the ``text`` to a ``SNAKE_CASE``.

    >>> upper_snake_case("purchaseOrder")
    'PURCHASE_ORDER'
    """
    return "_".join(word.upper() for word in split_words(text))


def capitalized_camel_case(text: str) -> str:
    """
    Convert the ``text`` to a ``CamelCase``, keeping the acronyms.

    >>> capitalized_camel_case("purchase-order")
    'PurchaseOrder'

    >>> capitalized_camel_case("HTTPRequest")
    'HTTPRequest'
    """
    return "".join(
        word if word.upper() == word else word.capitalize()
        for word in split_words(text)
    )
