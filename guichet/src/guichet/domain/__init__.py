"""Guichet domain layer."""
