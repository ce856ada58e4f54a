"""Causerie infrastructure layer."""
