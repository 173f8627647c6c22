"""Cooperative kernel threads with a priority scheduler and synchronisation primitives."""

__version__ = "0.1.0"