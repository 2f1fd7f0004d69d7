"""Packaged default templates."""
