"""A setuptools based setup module.

See:
https://packaging.python.org/en/latest/distributing.html
https://github.com/pypa/sampleproject
"""
import os

from setuptools import find_packages, setup

# pylint: disable=redefined-builtin

here = os.path.abspath(os.path.dirname(__file__))

with open(os.path.join(here, "README.rst"), encoding="utf-8") as fid:
    long_description = fid.read()

with open(os.path.join(here, "requirements.txt"), encoding="utf-8") as fid:
    install_requires = [line for line in fid.read().splitlines() if line.strip()]

setup(
    name="xsd-codegen",
    version="0.0.1",
    description="Generate Python data structures from XML schemas and WSDL documents.",
    long_description=long_description,
    url="https://github.com/aas-core-works/xsd-codegen",
    author="Marko Ristin, Nico Braunisch, Robert Lehmann",
    author_email="marko@ristin.ch",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    license="License :: OSI Approved :: MIT License",
    keywords="xml schema xsd wsdl soap code generation",
    packages=find_packages(exclude=["tests", "tests.*", "continuous_integration"]),
    install_requires=install_requires,
    extras_require={
        "dev": [
            "black==24.3.0",
            "mypy==1.5.1",
            "pylint==3.0.3",
            "coverage>=6.5.0,<7",
        ],
    },
    py_modules=["xsd_codegen"],
    package_data={"xsd_codegen": ["py.typed", "xsd/standard/*.xsd"]},
    data_files=[(".", ["LICENSE", "README.rst", "requirements.txt"])],
    entry_points={
        "console_scripts": [
            "xsd-codegen=xsd_codegen.main:entry_point",
        ]
    },
)
