"""NDIS service invoice engine."""

__version__ = "1.0.0"
