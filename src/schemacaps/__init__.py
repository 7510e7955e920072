"""schemacaps - derive data-access capabilities from entity-relationship schemas."""

__version__ = "0.1.0"
