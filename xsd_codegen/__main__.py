"""Run xsd-codegen as Python module."""

import xsd_codegen.main

if __name__ == "__main__":
    # The ``prog`` needs to be set in the argparse.
    # Otherwise the program name in the help shown to the user will be ``__main__``.
    xsd_codegen.main.main(prog="xsd_codegen")
