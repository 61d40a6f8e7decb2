"""Discover, order and read versioned up/down schema migrations from directories, assets, S3 or memory."""

__version__ = "4.0.0"