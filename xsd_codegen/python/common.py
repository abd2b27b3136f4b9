"""Provide common functions shared among different Python code generation modules."""
from typing import List, Mapping

from icontract import ensure

from xsd_codegen import xsd
from xsd_codegen.common import Stripped

# See: https://python-reference.readthedocs.io/en/latest/docs/str/escapes.html
_BASE_ESCAPING_IN_PYTHON = {
    "\\": "\\\\",
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
}

_ESCAPING_IN_PYTHON_INCLUDING_DOUBLE_QUOTES = {
    **_BASE_ESCAPING_IN_PYTHON,
    **{'"': '\\"'},
}

_ESCAPING_IN_PYTHON_INCLUDING_SINGLE_QUOTES = {
    **_BASE_ESCAPING_IN_PYTHON,
    **{"'": "\\'"},
}


# fmt: off
@ensure(
    lambda result:
    (result.startswith("'") and result.endswith("'"))
    or (result.startswith('"') and result.endswith('"'))
)
# fmt: on
def string_literal(text: str) -> Stripped:
    """
    Generate a string literal from the ``text``.

    Check which quotes occur more often (single-quotes or double-quotes), and
    enclose the literal such that we need to escape as little as possible.

    >>> string_literal("it's")
    '"it\\'s"'
    """
    if text.count("'") <= text.count('"'):
        mapping = _ESCAPING_IN_PYTHON_INCLUDING_SINGLE_QUOTES
        enclosing = "'"
    else:
        mapping = _ESCAPING_IN_PYTHON_INCLUDING_DOUBLE_QUOTES
        enclosing = '"'

    escaped = "".join(mapping.get(character, character) for character in text)

    return Stripped(f"{enclosing}{escaped}{enclosing}")


def docstring(text: str) -> Stripped:
    """
    Generate a docstring out of the documentation ``text``.

    The backslashes and the triple quotes are escaped so that the docstring
    can be embedded in the code as-is.
    """
    escaped = text.strip().replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    if "\n" not in escaped:
        return Stripped(f'"""{escaped}"""')

    return Stripped(f'"""\n{escaped}\n"""')


def comment(text: str) -> Stripped:
    """Generate a ``#:`` documentation comment out of the ``text``."""
    return Stripped(
        "\n".join(
            f"#: {line}".rstrip() for line in text.strip().splitlines()
        )
    )


#: Map the built-in types to the Python type expressions
BUILTIN_TYPES = {
    xsd.Builtin.ANY_TYPE: "Any",
    xsd.Builtin.ANY_SIMPLE_TYPE: "str",
    xsd.Builtin.ENTITIES: "List[str]",
    xsd.Builtin.ENTITY: "str",
    xsd.Builtin.ID: "str",
    xsd.Builtin.IDREF: "str",
    xsd.Builtin.IDREFS: "List[str]",
    xsd.Builtin.NC_NAME: "str",
    xsd.Builtin.NMTOKEN: "str",
    xsd.Builtin.NMTOKENS: "List[str]",
    xsd.Builtin.NOTATION: "str",
    xsd.Builtin.NAME: "str",
    xsd.Builtin.QNAME: "str",
    xsd.Builtin.ANY_URI: "str",
    xsd.Builtin.BASE64_BINARY: "bytes",
    xsd.Builtin.BOOLEAN: "bool",
    xsd.Builtin.BYTE: "int",
    xsd.Builtin.DATE: "datetime.date",
    xsd.Builtin.DATE_TIME: "datetime.datetime",
    xsd.Builtin.DECIMAL: "decimal.Decimal",
    xsd.Builtin.DOUBLE: "float",
    xsd.Builtin.DURATION: "str",
    xsd.Builtin.FLOAT: "float",
    xsd.Builtin.G_DAY: "str",
    xsd.Builtin.G_MONTH: "str",
    xsd.Builtin.G_MONTH_DAY: "str",
    xsd.Builtin.G_YEAR: "str",
    xsd.Builtin.G_YEAR_MONTH: "str",
    xsd.Builtin.HEX_BINARY: "bytes",
    xsd.Builtin.INT: "int",
    xsd.Builtin.INTEGER: "int",
    xsd.Builtin.LANGUAGE: "str",
    xsd.Builtin.LONG: "int",
    xsd.Builtin.NEGATIVE_INTEGER: "int",
    xsd.Builtin.NON_NEGATIVE_INTEGER: "int",
    xsd.Builtin.NON_POSITIVE_INTEGER: "int",
    xsd.Builtin.NORMALIZED_STRING: "str",
    xsd.Builtin.POSITIVE_INTEGER: "int",
    xsd.Builtin.SHORT: "int",
    xsd.Builtin.STRING: "str",
    xsd.Builtin.TIME: "datetime.time",
    xsd.Builtin.TOKEN: "str",
    xsd.Builtin.UNSIGNED_BYTE: "int",
    xsd.Builtin.UNSIGNED_INT: "int",
    xsd.Builtin.UNSIGNED_LONG: "int",
    xsd.Builtin.UNSIGNED_SHORT: "int",
}  # type: Mapping[xsd.Builtin, str]


def _assert_all_builtin_types_are_mapped() -> None:
    """Assert that we have explicitly mapped all the built-in types to Python."""
    all_builtin_types = set(xsd.Builtin)

    mapped_builtin_types = set(BUILTIN_TYPES.keys())

    all_diff = all_builtin_types.difference(mapped_builtin_types)
    mapped_diff = mapped_builtin_types.difference(all_builtin_types)

    messages = []  # type: List[str]
    if len(mapped_diff) > 0:
        messages.append(
            f"More built-in types were mapped than defined: "
            f"{sorted(literal.value for literal in mapped_diff)}"
        )

    if len(all_diff) > 0:
        messages.append(
            f"One or more built-in types were not mapped: "
            f"{sorted(literal.value for literal in all_diff)}"
        )

    if len(messages) > 0:
        raise AssertionError("\n\n".join(messages))


_assert_all_builtin_types_are_mapped()

INDENT = "    "
INDENT2 = INDENT * 2
INDENT3 = INDENT * 3

WARNING = Stripped(
    """\
# This code has been automatically generated by xsd-codegen.
# Do NOT edit or append."""
)
