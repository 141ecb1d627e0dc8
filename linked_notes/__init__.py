"""linked-notes: rich-text notes on local disk, linked by stable note ids."""

__version__ = "0.1.0"
