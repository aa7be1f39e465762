"""EPUB parsing pipeline stages."""
