#!/usr/bin/env python3

"""Run pre-commit checks on the repository."""
import argparse
import enum
import os
import pathlib
import shlex
import subprocess
import sys
from typing import Optional, Mapping, Sequence, Set


class Step(enum.Enum):
    """Enumerate different pre-commit steps."""

    REFORMAT = "reformat"
    MYPY = "mypy"
    PYLINT = "pylint"
    TEST = "test"
    DOCTEST = "doctest"
    CHECK_INIT_AND_SETUP_COINCIDE = "check-init-and-setup-coincide"


#: Packages and scripts checked by the static analysis
_TARGETS = ["xsd_codegen", "tests", "continuous_integration"]


def call_and_report(
    verb: str,
    cmd: Sequence[str],
    cwd: Optional[pathlib.Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> int:
    """
    Wrap a subprocess call with the reporting to STDERR if it failed.

    Return 1 if there is an error and 0 otherwise.
    """
    exit_code = subprocess.call(cmd, cwd=str(cwd) if cwd is not None else None, env=env)

    if exit_code != 0:
        cmd_str = " ".join(shlex.quote(part) for part in cmd)
        print(
            f"Failed to {verb} with exit code {exit_code}: {cmd_str}", file=sys.stderr
        )

    return exit_code


def _doctest(repo_root: pathlib.Path) -> int:
    """Run the doctests of the readme and of every module which has any."""
    exit_code = call_and_report(
        verb="doctest",
        cmd=[sys.executable, "-m", "doctest", "README.rst"],
        cwd=repo_root,
    )
    if exit_code != 0:
        return 1

    for pth in sorted((repo_root / "xsd_codegen").glob("**/*.py")):
        if pth.name == "__main__.py":
            continue

        # NOTE: The subprocess calls are expensive, call only if there is
        # an actual doctest.
        if ">>>" not in pth.read_text(encoding="utf-8"):
            continue

        exit_code = call_and_report(
            verb="doctest",
            cmd=[sys.executable, "-m", "doctest", str(pth)],
            cwd=repo_root,
        )
        if exit_code != 0:
            return 1

    return 0


def main() -> int:
    """Execute the main routine."""
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--overwrite",
        help="Try to automatically fix the offending files (e.g., by re-formatting).",
        action="store_true",
    )
    parser.add_argument(
        "--select",
        help=(
            "If set, only the selected steps are executed. "
            "The steps are given as a space-separated list of: "
            + " ".join(literal.value for literal in Step)
        ),
        metavar="",
        nargs="+",
        choices=[literal.value for literal in Step],
    )
    parser.add_argument(
        "--skip",
        help=(
            "If set, skips the specified steps. "
            "The steps are given as a space-separated list of: "
            + " ".join(literal.value for literal in Step)
        ),
        metavar="",
        nargs="+",
        choices=[literal.value for literal in Step],
    )

    args = parser.parse_args()

    overwrite = bool(args.overwrite)

    enabled = (
        set(Step(value) for value in args.select)
        if args.select is not None
        else set(Step)
    )  # type: Set[Step]
    if args.skip is not None:
        enabled.difference_update(Step(value) for value in args.skip)

    repo_root = pathlib.Path(os.path.realpath(__file__)).parent.parent

    if Step.REFORMAT in enabled:
        print("Re-formatting...")
        reformat_targets = _TARGETS + ["setup.py"]

        if overwrite:
            exit_code = call_and_report(
                verb="black", cmd=["black"] + reformat_targets, cwd=repo_root
            )
        else:
            exit_code = call_and_report(
                verb="check with black",
                cmd=["black", "--check"] + reformat_targets,
                cwd=repo_root,
            )

        if exit_code != 0:
            return 1
    else:
        print("Skipped re-formatting.")

    if Step.MYPY in enabled:
        print("Mypy'ing...")
        config_file = pathlib.Path("continuous_integration") / "mypy.ini"

        exit_code = call_and_report(
            verb="mypy",
            cmd=["mypy", "--strict", "--config-file", str(config_file)] + _TARGETS,
            cwd=repo_root,
        )
        if exit_code != 0:
            return 1
    else:
        print("Skipped mypy'ing.")

    if Step.PYLINT in enabled:
        print("Pylint'ing...")
        rcfile = pathlib.Path("continuous_integration") / "pylint.rc"

        exit_code = call_and_report(
            verb="pylint",
            cmd=["pylint", f"--rcfile={rcfile}"] + _TARGETS,
            cwd=repo_root,
        )
        if exit_code != 0:
            return 1
    else:
        print("Skipped pylint'ing.")

    if Step.TEST in enabled:
        print("Testing...")
        env = os.environ.copy()
        env["ICONTRACT_SLOW"] = "true"

        exit_code = call_and_report(
            verb="execute unit tests",
            cmd=[
                "coverage",
                "run",
                "--source",
                "xsd_codegen",
                "-m",
                "unittest",
                "discover",
            ],
            cwd=repo_root,
            env=env,
        )
        if exit_code != 0:
            return 1

        exit_code = call_and_report(
            verb="report the coverage", cmd=["coverage", "report"], cwd=repo_root
        )
        if exit_code != 0:
            return 1
    else:
        print("Skipped testing.")

    if Step.DOCTEST in enabled:
        print("Doctest'ing...")
        if _doctest(repo_root) != 0:
            return 1
    else:
        print("Skipped doctest'ing.")

    if Step.CHECK_INIT_AND_SETUP_COINCIDE in enabled:
        print("Checking that xsd_codegen/__init__.py and setup.py coincide...")
        exit_code = call_and_report(
            verb="check that xsd_codegen/__init__.py and setup.py coincide",
            cmd=[
                sys.executable,
                "continuous_integration/check_init_and_setup_coincide.py",
            ],
            cwd=repo_root,
        )
        if exit_code != 0:
            return 1
    else:
        print("Skipped checking that xsd_codegen/__init__.py and setup.py coincide.")

    return 0


if __name__ == "__main__":
    sys.exit(main())
