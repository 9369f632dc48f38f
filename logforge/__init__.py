"""Hierarchical loggers, filters, pattern and JSON encoders, and styled writers."""

__version__ = "1.3.0"