"""vCenter inventory collection and reporting."""

__version__ = "0.2.0"
