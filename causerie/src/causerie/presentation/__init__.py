"""Causerie presentation layer."""

from causerie.presentation.console import Console
from causerie.presentation.message_router import MessageRouter
from causerie.presentation.view import ChatView, ConsoleView

__all__ = ["ChatView", "Console", "ConsoleView", "MessageRouter"]
