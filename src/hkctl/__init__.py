"""Command line porcelain for a HomeKit automation service."""

__version__ = "0.3.0"
