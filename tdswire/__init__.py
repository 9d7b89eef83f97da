"""Building blocks for the TDS protocol: packet framing, errors, batch splitting and bulk-copy statements."""

__version__ = "0.1.0"
__all__ = ["batch", "buffer", "bulk", "errors"]