"""Generate Python data structures from XML schemas and WSDL documents."""

import argparse
import enum
import pathlib
import re
import sys
from typing import List, Optional, Pattern, Sequence, TextIO

import xsd_codegen
import xsd_codegen.python.main as python_main
from xsd_codegen import config as config_mod, run, xsd
from xsd_codegen.common import assert_never

assert xsd_codegen.__doc__ == __doc__


class Target(enum.Enum):
    """List available targets."""

    PYTHON = "python"
    DUMP = "dump"


class Parameters:
    """Represent the program parameters."""

    def __init__(
        self,
        schema_paths: Sequence[pathlib.Path],
        target: Target,
        output_dir: pathlib.Path,
        namespaces: Optional[Sequence[str]] = None,
        follow_imports: bool = False,
        replace_rules: Sequence[str] = (),
        only_types: Sequence[str] = (),
    ) -> None:
        """Initialize with the given values."""
        self.schema_paths = schema_paths
        self.target = target
        self.output_dir = output_dir
        self.namespaces = namespaces
        self.follow_imports = follow_imports
        self.replace_rules = replace_rules
        self.only_types = only_types


def _dump(context: run.Context, stdout: TextIO, stderr: TextIO) -> int:
    """Write the resolved schemas in a human-readable form."""
    selected = [
        schema
        for schema in context.schemas
        if schema.target_namespace in context.namespaces
    ]

    pth = context.output_dir / "schemas.txt"
    try:
        pth.write_text(
            "\n\n".join(xsd.dump(schema) for schema in selected) + "\n",
            encoding="utf-8",
        )
    except Exception as exception:
        run.write_error_report(
            message=f"Failed to write the dump to {pth}",
            errors=[str(exception)],
            stderr=stderr,
        )
        return 1

    stdout.write(f"Dumped {len(selected)} schema(s) to: {pth}\n")
    return 0


def execute(params: Parameters, stdout: TextIO, stderr: TextIO) -> int:
    """Run the program."""
    # region Basic checks
    if len(params.schema_paths) == 0:
        stderr.write("No --schemas were specified.\n")
        return 1

    for schema_path in params.schema_paths:
        if not schema_path.exists():
            stderr.write(f"The schema from --schemas does not exist: {schema_path}\n")
            return 1

        if not schema_path.is_file():
            stderr.write(
                f"The schema from --schemas does not point to a file: {schema_path}\n"
            )
            return 1

    if not params.output_dir.exists():
        params.output_dir.mkdir(parents=True, exist_ok=True)
    else:
        if not params.output_dir.is_dir():
            stderr.write(
                f"The --output_dir does not point to a directory: "
                f"{params.output_dir}\n"
            )
            return 1

    replace_rules = []  # type: List[config_mod.ReplaceRule]
    for text in params.replace_rules:
        rule, error_message = config_mod.parse_replace_rule(text)
        if error_message is not None:
            stderr.write(f"The --replace rule is invalid: {error_message}\n")
            return 1

        assert rule is not None
        replace_rules.append(rule)

    only_types = []  # type: List[Pattern[str]]
    for text in params.only_types:
        try:
            only_types.append(re.compile(text))
        except re.error as exception:
            stderr.write(
                f"The --only_types pattern {text!r} is invalid: {exception}\n"
            )
            return 1

    # endregion

    # region Parse and understand

    docs, error_message = run.load_documents(
        schema_paths=params.schema_paths, follow_imports=params.follow_imports
    )
    if error_message is not None:
        stderr.write(error_message)
        return 1

    assert docs is not None

    namespaces = None  # type: Optional[List[str]]
    if params.namespaces is not None and len(params.namespaces) > 0:
        namespaces = list(params.namespaces)
    else:
        # NOTE: Only the documents given explicitly are generated by default,
        # not the ones we discovered by following the imports.
        explicit_count = len(set(pth.resolve() for pth in params.schema_paths))
        namespaces, error_message = run.default_namespaces(docs[:explicit_count])
        if error_message is not None:
            stderr.write(error_message)
            return 1

    assert namespaces is not None

    config = config_mod.default_config().replace(
        namespaces=namespaces,
        follow_imports=params.follow_imports,
        replace_rules=replace_rules,
        only_types=only_types,
    )

    schemas, error_message = run.load_schemas(docs=docs, config=config)
    if error_message is not None:
        stderr.write(error_message)
        return 1

    assert schemas is not None

    # endregion

    # region Dispatch

    run_context = run.Context(
        schema_paths=params.schema_paths,
        schemas=schemas,
        namespaces=namespaces,
        config=config,
        output_dir=params.output_dir,
    )

    if params.target is Target.PYTHON:
        return python_main.execute(context=run_context, stdout=stdout, stderr=stderr)

    elif params.target is Target.DUMP:
        return _dump(context=run_context, stdout=stdout, stderr=stderr)

    else:
        assert_never(params.target)

    # endregion


def main(prog: str) -> int:
    """
    Execute the main routine.

    :param prog: name of the program to be displayed in the help
    :return: exit code
    """
    parser = argparse.ArgumentParser(prog=prog, description=__doc__)
    parser.add_argument(
        "--schemas",
        help="paths to the XML schemas or WSDL documents",
        nargs="+",
        required=True,
    )
    parser.add_argument(
        "--output_dir", help="path to the generated code", required=True
    )
    parser.add_argument(
        "--target",
        help="what to generate",
        required=True,
        choices=[literal.value for literal in Target],
    )
    parser.add_argument(
        "--namespaces",
        help=(
            "target namespaces whose types are generated; "
            "if not specified, the target namespaces of the --schemas are used"
        ),
        nargs="*",
    )
    parser.add_argument(
        "--follow_imports",
        help="load the schemas imported or included by relative paths as well",
        action="store_true",
    )
    parser.add_argument(
        "--replace",
        help=(
            "replacement rule of the form 'regex -> replacement' applied to "
            "the names before they become identifiers; can be repeated"
        ),
        metavar="RULE",
        action="append",
        default=[],
    )
    parser.add_argument(
        "--only_types",
        help=(
            "regular expressions of the local names of the types to generate; "
            "the types they depend on are generated as well"
        ),
        metavar="PATTERN",
        nargs="+",
        default=[],
    )
    parser.add_argument(
        "--version", help="show the current version and exit", action="store_true"
    )

    # NOTE:
    # The module ``argparse`` is not flexible enough to understand special options such
    # as ``--version`` so we manually hard-wire.
    if "--version" in sys.argv and "--help" not in sys.argv:
        print(xsd_codegen.__version__)
        return 0

    args = parser.parse_args()

    target_to_str = {literal.value: literal for literal in Target}

    params = Parameters(
        schema_paths=[pathlib.Path(pth) for pth in args.schemas],
        target=target_to_str[args.target],
        output_dir=pathlib.Path(args.output_dir),
        namespaces=args.namespaces,
        follow_imports=bool(args.follow_imports),
        replace_rules=args.replace,
        only_types=args.only_types,
    )

    return execute(params=params, stdout=sys.stdout, stderr=sys.stderr)


def entry_point() -> int:
    """Provide an entry point for a console script."""
    return main(prog="xsd-codegen")


if __name__ == "__main__":
    sys.exit(main(prog="xsd-codegen"))
