"""Generate Python data structures based on the resolved schemas."""
from typing import TextIO

from xsd_codegen import run
from xsd_codegen.common import error_message
from xsd_codegen.python import structure as python_structure


def execute(context: run.Context, stdout: TextIO, stderr: TextIO) -> int:
    """Generate the code."""
    verified, errors = python_structure.verify(
        schemas=context.schemas,
        namespaces=context.namespaces,
        config=context.config,
    )

    if errors is not None:
        run.write_error_report(
            message=(
                f"Failed to verify the schemas for generation of Python code "
                f"based on {', '.join(str(pth) for pth in context.schema_paths)}"
            ),
            errors=[error_message(error) for error in errors],
            stderr=stderr,
        )
        return 1

    assert verified is not None

    code = python_structure.generate(verified)

    pth = context.output_dir / "types.py"
    try:
        pth.write_text(code, encoding="utf-8")
    except Exception as exception:
        run.write_error_report(
            message=f"Failed to write the Python data structures to {pth}",
            errors=[str(exception)],
            stderr=stderr,
        )
        return 1

    stdout.write(f"Generated {len(verified.types)} type(s) to: {pth}\n")
    return 0
