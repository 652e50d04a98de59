"""Parametric EQ editor whose state is mirrored to a remote document store."""

__version__ = "1.0.0"
