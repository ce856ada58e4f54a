"""Dependency injection."""

from causerie.di.container import Container

__all__ = ["Container"]
