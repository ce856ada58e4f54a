"""Guichet application layer."""
