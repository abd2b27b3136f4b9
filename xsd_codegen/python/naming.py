"""Generate Python identifiers based on the names from the schemas."""
import keyword
from typing import Sequence

from icontract import ensure

from xsd_codegen import naming
from xsd_codegen.common import Identifier, IDENTIFIER_RE
from xsd_codegen.config import ReplaceRule

#: Names which must not be used as properties or arguments of generated classes
_RESERVED = frozenset(["self"])


def _rename(local: str, replace_rules: Sequence[ReplaceRule]) -> str:
    """Apply the ``replace_rules`` to the ``local`` name in order."""
    for rule in replace_rules:
        local = rule.apply(local)

    return local


def _escape(name: str, fallback: str, prefix: str) -> Identifier:
    """Make ``name`` a valid identifier which is no keyword."""
    if name == "":
        name = fallback

    if name[0].isdigit():
        name = f"{prefix}{name}"

    if keyword.iskeyword(name) or name in _RESERVED:
        name = f"{name}_"

    return Identifier(name)


# fmt: off
@ensure(
    lambda result:
    IDENTIFIER_RE.fullmatch(result) is not None
    and result[0].isupper()
)
# fmt: on
def class_name(local: str, replace_rules: Sequence[ReplaceRule] = ()) -> Identifier:
    """
    Generate a name for a class or an enum based on the local name of a type.

    The ``replace_rules`` are applied to the ``local`` name first.

    >>> class_name("purchaseOrderType")
    'PurchaseOrderType'

    >>> class_name("_anon3")
    'Anon3'

    >>> class_name("3DPoint")
    'T3DPoint'
    """
    return _escape(
        naming.capitalized_camel_case(_rename(local, replace_rules)), "Type", "T"
    )


def property_name(local: str, replace_rules: Sequence[ReplaceRule] = ()) -> Identifier:
    """
    Generate a name for a property based on the local name of an XML node.

    The ``replace_rules`` are applied to the ``local`` name first.

    >>> property_name("shipTo")
    'ship_to'

    >>> property_name("class")
    'class_'

    >>> property_name("2ndLine")
    'v_2_nd_line'
    """
    return _escape(
        naming.lower_snake_case(_rename(local, replace_rules)), "value", "v_"
    )


def enum_literal_name(value: str) -> Identifier:
    """
    Generate a name for an enum literal based on the enumerated ``value``.

    >>> enum_literal_name("in-progress")
    'IN_PROGRESS'

    >>> enum_literal_name("")
    'EMPTY'

    >>> enum_literal_name("1.0")
    'V_1_0'
    """
    return _escape(naming.upper_snake_case(value), "EMPTY", "V_")
