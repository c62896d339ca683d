"""Discrete-event simulation of a dry-cleaning shop, with its simulation engine and random streams."""

__version__ = "0.1.0"
__all__ = ["lcgrand", "simlib", "dryclean"]