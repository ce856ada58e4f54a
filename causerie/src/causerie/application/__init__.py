"""Causerie application layer."""
