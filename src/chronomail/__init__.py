"""Gmail push-notification archiver and mail automation API."""

__version__ = "0.1.0"
