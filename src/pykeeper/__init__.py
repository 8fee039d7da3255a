"""Keeper cost and draft-slot resolution for fantasy football keeper leagues."""

__version__ = "0.1.0"
