"""Dependency injection."""

from guichet.di.container import Container

__all__ = ["Container"]
