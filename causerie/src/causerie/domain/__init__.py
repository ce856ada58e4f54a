"""Causerie domain layer."""
