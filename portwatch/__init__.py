"""Live view of the TCP services listening on this host."""

__version__ = "0.1.0"
