"""Library catalog and circulation engine."""

__version__ = "1.0.0"
