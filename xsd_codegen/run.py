"""Encapsulate the entry point to different generators."""
import collections
import io
import pathlib
import textwrap
import urllib.parse
from typing import Sequence, TextIO, Tuple, Optional, List, Set

from icontract import require, ensure

from xsd_codegen import config as config_mod, xsd
from xsd_codegen.common import error_message


class Context:
    """Represent the context of a code generation."""

    @require(lambda schema_paths: all(pth.is_file() for pth in schema_paths))
    @require(lambda output_dir: output_dir.exists() and output_dir.is_dir())
    def __init__(
        self,
        schema_paths: Sequence[pathlib.Path],
        schemas: Sequence[xsd.Schema],
        namespaces: Sequence[str],
        config: config_mod.Config,
        output_dir: pathlib.Path,
    ) -> None:
        """Initialize with the given values."""
        self.schema_paths = schema_paths
        self.schemas = schemas
        self.namespaces = namespaces
        self.config = config
        self.output_dir = output_dir


# fmt: off
@require(
    lambda errors: all(
        len(error) > 0 and not error.startswith("\n")
        # This is necessary so that we do not have double bullet point.
        and not error.startswith("*") and not error.endswith("\n")
        for error in errors
    )
)
@require(lambda message: not message.endswith(":"))
@require(lambda message: not message.endswith("\n"))
@require(lambda message: not message.startswith("\n") and not message.startswith("*"))
# fmt: on
def write_error_report(message: str, errors: Sequence[str], stderr: TextIO) -> None:
    """
    Write the report (main ``message`` and details as ``errors``) to ``stderr``.

    This method helps us to have a unified way of showing errors.
    """
    stderr.write(f"{message}:\n")
    for error in errors:
        indented = textwrap.indent(error, "  ")
        indented = "* " + indented[2:]
        stderr.write(f"{indented}\n")


def _is_local(location: str) -> bool:
    """Check that the ``location`` refers to a relative path on the file system."""
    parsed = urllib.parse.urlparse(location)
    return (
        parsed.scheme == ""
        and parsed.netloc == ""
        and location != ""
        and not pathlib.PurePosixPath(parsed.path).is_absolute()
    )


@require(lambda schema_paths: len(schema_paths) > 0)
@ensure(lambda result: (result[0] is not None) ^ (result[1] is not None))
def load_documents(
    schema_paths: Sequence[pathlib.Path], follow_imports: bool
) -> Tuple[Optional[List[bytes]], Optional[str]]:
    """
    Read the schema documents from the file system.

    If ``follow_imports`` is set, the locations of ``<import>`` and ``<include>``
    are followed transitively as long as they are relative paths. Remote
    locations are ignored.

    :return:
        contents of the given documents followed by the discovered ones,
        or the error
    """
    result = []  # type: List[bytes]
    visited = set()  # type: Set[pathlib.Path]

    # NOTE: Breadth-first so that the given documents come before the imported ones.
    queue = collections.deque(pth.resolve() for pth in schema_paths)
    while len(queue) > 0:
        pth = queue.popleft()
        if pth in visited:
            continue

        visited.add(pth)

        try:
            doc = pth.read_bytes()
        except OSError as exception:
            return None, f"Failed to read the schema {pth}: {exception}\n"

        result.append(doc)

        if not follow_imports:
            continue

        dependencies, error = xsd.imports(doc)
        if error is not None:
            writer = io.StringIO()
            write_error_report(
                message=f"Failed to list the imports of {pth}",
                errors=[error_message(error)],
                stderr=writer,
            )
            return None, writer.getvalue()

        assert dependencies is not None

        for _, location in dependencies:
            if not _is_local(location):
                continue

            dependency_pth = (
                pth.parent / urllib.parse.unquote(urllib.parse.urlparse(location).path)
            ).resolve()

            if not dependency_pth.is_file():
                return None, (
                    f"The schema {pth} refers to {location!r}, "
                    f"but the file {dependency_pth} does not exist\n"
                )

            queue.append(dependency_pth)

    return result, None


@require(lambda docs: len(docs) > 0)
@ensure(lambda result: (result[0] is not None) ^ (result[1] is not None))
def default_namespaces(
    docs: Sequence[bytes],
) -> Tuple[Optional[List[str]], Optional[str]]:
    """List the target namespaces of ``docs``, without repetition, in order."""
    result = []  # type: List[str]
    for doc in docs:
        namespaces, error = xsd.target_namespaces(doc)
        if error is not None:
            writer = io.StringIO()
            write_error_report(
                message="Failed to determine the target namespaces",
                errors=[error_message(error)],
                stderr=writer,
            )
            return None, writer.getvalue()

        assert namespaces is not None

        for namespace in namespaces:
            if namespace not in result:
                result.append(namespace)

    return result, None


@require(lambda docs: len(docs) > 0)
@ensure(lambda result: (result[0] is not None) ^ (result[1] is not None))
def load_schemas(
    docs: Sequence[bytes], config: config_mod.Config
) -> Tuple[Optional[List[xsd.Schema]], Optional[str]]:
    """Parse and resolve the schemas, and apply the type transforms of ``config``."""
    schemas, error = xsd.parse(docs)
    if error is not None:
        writer = io.StringIO()
        write_error_report(
            message="Failed to parse the schemas",
            errors=[error_message(error)],
            stderr=writer,
        )
        return None, writer.getvalue()

    assert schemas is not None

    config_mod.apply_type_transforms(schemas, config)

    return schemas, None
