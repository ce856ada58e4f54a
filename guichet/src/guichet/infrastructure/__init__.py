"""Guichet infrastructure layer."""
