"""Provide common functions and types for the normalization and code generation."""
import io
import re
import textwrap
from typing import (
    Optional,
    cast,
    List,
    NoReturn,
    TYPE_CHECKING,
)

from icontract import require, DBC

if TYPE_CHECKING:
    from xsd_codegen import xmltree


class Rstripped(str):
    """
    Represent a block of text without trailing whitespace.

    The block can be both single-line or multi-line.
    """

    @require(
        lambda block: not block.endswith("\n")
        and not block.endswith(" ")
        and not block.endswith("\t")
    )
    def __new__(cls, block: str) -> "Rstripped":
        return cast(Rstripped, block)


def is_stripped(text: str) -> bool:
    """Check that the ``text`` does not have leading and trailing whitespace."""
    return (
        not text.startswith("\n")
        and not text.startswith(" ")
        and not text.startswith("\t")
    ) and (
        not text.endswith("\n") and not text.endswith(" ") and not text.endswith("\t")
    )


class Stripped(Rstripped):
    """
    Represent a block of text without leading and trailing whitespace.

    The block of text can be both single-line and multi-line.
    """

    @require(lambda block: is_stripped(block))
    def __new__(cls, block: str) -> "Stripped":
        return cast(Stripped, block)


# noinspection RegExpSimplifiable
IDENTIFIER_RE = re.compile(r"[a-zA-Z_][a-zA-Z_0-9]*")


class Identifier(DBC, Stripped):
    """Represent an identifier."""

    @require(lambda value: IDENTIFIER_RE.fullmatch(value))
    def __new__(cls, value: str) -> "Identifier":
        return cast(Identifier, value)


class Error:
    """
    Represent an unexpected input.

    For example, a schema can be a well-formed XML document, but refer to
    a type which has not been declared anywhere.

    The ``underlying`` errors come from the declarations nested in the ``node``
    so that the chain of errors pin-points the offending location.
    """

    def __init__(
        self,
        node: Optional["xmltree.Element"],
        message: str,
        underlying: Optional[List["Error"]] = None,
    ) -> None:
        self.node = node
        self.message = message
        self.underlying = underlying

    def __repr__(self) -> str:
        return (
            f"Error("
            f"node={self.node!r}, "
            f"message={self.message!r}, "
            f"underlying={self.underlying!r})"
        )


def describe_node(node: "xmltree.Element") -> str:
    """
    Describe the ``node`` by its tag and, if available, by its name.

    >>> from xsd_codegen import xmltree
    >>> describe_node(
    ...     xmltree.Element(
    ...         name=xmltree.QName("urn:x", "complexType"),
    ...         attrs=[xmltree.Attr(xmltree.QName("", "name"), "Widget")],
    ...         scope=xmltree.Scope(),
    ...     )
    ... )
    "<complexType name='Widget'>"
    """
    name = node.attr("name")
    if name is None:
        name = node.attr("ref")
        if name is not None:
            return f"<{node.name.local} ref={name!r}>"

        return f"<{node.name.local}>"

    return f"<{node.name.local} name={name!r}>"


def error_message(error: Error) -> str:
    """Generate the error message based on the unexpected observation."""
    prefix = ""
    if error.node is not None:
        prefix = f"In {describe_node(error.node)}: "

    if error.underlying is None or len(error.underlying) == 0:
        return f"{prefix}{error.message}"
    else:
        writer = io.StringIO()
        writer.write(f"{prefix}{error.message}\n")
        for i, underlying_error in enumerate(error.underlying):
            if i > 0:
                writer.write("\n")
            indented = textwrap.indent(error_message(underlying_error), "  ")
            writer.write(indented)

        return writer.getvalue()


def most_underlying_messages(error: Error) -> List[str]:
    """Collect the messages of the "leaf" errors, depth-first."""
    if error.underlying is None or len(error.underlying) == 0:
        return [error.message]

    result = []  # type: List[str]
    for underlying_error in error.underlying:
        result.extend(most_underlying_messages(underlying_error))

    return result


def assert_never(value: NoReturn) -> NoReturn:
    """
    Signal to mypy to perform an exhaustive matching.

    Please see the following page for more details:
    https://hakibenita.com/python-mypy-exhaustive-checking
    """
    assert False, f"Unhandled value: {value} ({type(value).__name__})"


def indent_but_first_line(text: str, indention: str) -> str:
    """
    Indent all but the first of the given ``text`` by ``indention``.

    For example, this helps you insert indented blocks into formatted string literals.
    """
    indented_lines = []  # type: List[str]
    for i, line in enumerate(text.splitlines()):
        if i == 0:
            indented_lines.append(line)
        else:
            if len(line) > 0:
                indented_lines.append(indention + line)
            else:
                indented_lines.append(line)

    return "\n".join(indented_lines)
