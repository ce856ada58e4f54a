"""
Guichet - Credential issuer service

Orchestrates Clean Architecture components to answer credential
requests on the bus until interrupted.
"""

import asyncio
from typing import Optional

from guichet.config.settings import Settings
from guichet.di import Container
from shared.messaging import MessageBus
from shared.reporter import SystemReporter, parse_level
from shared.reporter.emojis import Emoji


class GuichetApp:
    """
    Guichet application orchestrator.

    Responsibilities:
        - Initialize DI container
        - Load the signing authority before touching the network
        - Connect to the bus and start the credential service
        - Drain the connection on SIGINT/SIGTERM
    """

    def __init__(
        self,
        settings: Settings,
        bus: Optional[MessageBus] = None,
        reporter: Optional[SystemReporter] = None,
    ):
        """
        Initialize Guichet application.

        Args:
            settings: Application settings
            bus: Optional message bus (default: NATS from settings)
            reporter: Optional reporter (default: built from settings)
        """
        self.settings = settings
        self.reporter = reporter or self._create_reporter()
        self.container = Container(settings, reporter=self.reporter, bus=bus)

        self.reporter.info(
            "Guichet initialized",
            context="Guichet",
            verbose_level=1,
        )

    def _create_reporter(self) -> SystemReporter:
        """
        Create SystemReporter instance.

        Returns:
            Configured SystemReporter
        """
        return SystemReporter(
            name="guichet",
            log_dir=self.settings.log_dir,
            level=parse_level(self.settings.log_level),
            verbose=self.settings.verbose,
        )

    async def start(self) -> None:
        """
        Load the authority, connect and start answering requests.

        Raises:
            AuthorityLoadError: If the account or signing key cannot be loaded
        """
        self.reporter.info(
            f"{Emoji.SYSTEM.STARTUP} Guichet starting...",
            context="Guichet",
            verbose_level=1,
        )

        # Fail before connecting if the authority is unusable
        authority = self.container.signing_authority

        await self.container.bus.connect()
        await self.container.credential_service.start()

        self.reporter.info(
            f"{Emoji.SYSTEM.READY} Issuing identities for account "
            f"{authority.account_id}",
            context="Guichet",
            verbose_level=1,
        )

    async def _drain_callback(self) -> None:
        """Stop taking requests and let in-flight replies complete."""
        self.reporter.info(
            f"{Emoji.NETWORK.DRAIN} Draining...",
            context="Guichet",
            verbose_level=1,
        )
        await self.container.bus.drain()

    async def serve(self) -> None:
        """Run until a shutdown signal is received and the bus is drained."""
        await self.start()

        shutdown_manager = self.container.shutdown_manager
        shutdown_manager.register_shutdown_callback(self._drain_callback)
        shutdown_manager.setup_signal_handlers()

        try:
            await shutdown_manager.wait_for_shutdown()
            await shutdown_manager.wait_for_shutdown_complete()
        finally:
            shutdown_manager.restore_signal_handlers()

        stats = self.container.credential_service.stats
        self.reporter.info(
            f"{Emoji.SYSTEM.SHUTDOWN} Guichet stopped "
            f"(issued={stats['issued']}, rejected={stats['rejected']}, "
            f"failed={stats['failed']})",
            context="Guichet",
            verbose_level=1,
        )

    def run(self) -> None:
        """Blocking entry point."""
        asyncio.run(self.serve())
