"""Generate Python data structures from the resolved XML schemas."""
