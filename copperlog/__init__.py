"""Structured binary logging with interned strings, text log export, structure-of-arrays containers and identifier helpers."""

__version__ = "0.1.0"