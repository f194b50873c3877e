"""Pieces of a small shell: lexing, expansion, environment, builtins, command execution, here-documents and pipelines."""

__version__ = "0.1.0"