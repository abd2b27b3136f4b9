"""Provide the well-known schemas which are always implicitly available."""
import os
import pathlib
from typing import List, Sequence

_STANDARD_DIR = pathlib.Path(os.path.realpath(__file__)).parent / "standard"

#: Files of the standard schemas bundled with the package, in order of loading
STANDARD_SCHEMA_FILES = (
    "xml.xsd",
    "soapenc.xsd",
    "wsdl.xsd",
    "xlink.xsd",
)  # type: Sequence[str]


def standard_schemas() -> List[bytes]:
    """
    Load the standard schemas.

    These are the schemas of the XML namespace, SOAP 1.1 encoding, WSDL 1.1 and
    XLink which schemas and service descriptions regularly refer to without
    shipping them.
    """
    return [(_STANDARD_DIR / name).read_bytes() for name in STANDARD_SCHEMA_FILES]
