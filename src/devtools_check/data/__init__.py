"""Bundled tool catalogs."""
