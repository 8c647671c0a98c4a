"""Atma-Chethana student counselling backend."""

__version__ = "0.1.0"
