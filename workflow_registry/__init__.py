"""In-memory registry service for finite-state workflows."""

__version__ = "0.1.0"
