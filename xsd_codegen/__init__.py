"""Generate Python data structures from XML schemas and WSDL documents."""

__version__ = "0.0.1"
__author__ = "Marko Ristin, Nico Braunisch, Robert Lehmann"
__license__ = "License :: OSI Approved :: MIT License"
__status__ = "Alpha"
