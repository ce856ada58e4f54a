"""
Dependency Injection container for Causerie.

Manages lifecycle and dependencies of all application components.
"""

import time
from typing import Callable, Optional

from causerie.application.session_state import SessionState
from causerie.application.use_cases import (
    ProcessChannelPostUseCase,
    ProcessDirectMessageUseCase,
    ProcessHeartbeatUseCase,
    SelectViewUseCase,
    SendPostUseCase,
    SweepPresenceUseCase,
)
from causerie.config.settings import Settings
from causerie.domain.entities import LocalIdentity
from causerie.domain.exceptions import CredentialsLoadError
from causerie.domain.services import IdentityResolver, PresenceTracker
from causerie.infrastructure.auth import ClaimValidator, load_local_identity
from causerie.infrastructure.dedup import SeenTokenSet
from causerie.infrastructure.presence import HeartbeatLoop
from causerie.infrastructure.presence.heartbeat_loop import TickCallback
from causerie.presentation import ChatView, ConsoleView, MessageRouter
from causerie.presentation.message_router import FatalCallback
from shared.identity import ClaimCodec, SubjectScheme
from shared.messaging import ClosedCallback, MessageBus, NatsMessageBus
from shared.reporter import SystemReporter


class Container:
    """
    Dependency Injection container.

    Creates and manages all application dependencies.
    Implements singleton pattern for shared resources.
    """

    def __init__(
        self,
        settings: Settings,
        reporter: Optional[SystemReporter] = None,
        bus: Optional[MessageBus] = None,
        view: Optional[ChatView] = None,
        clock: Callable[[], float] = time.time,
        on_fatal: Optional[FatalCallback] = None,
        on_closed: Optional[ClosedCallback] = None,
        on_tick: Optional[TickCallback] = None,
    ):
        """
        Initialize container with settings.

        Args:
            settings: Application settings
            reporter: Optional SystemReporter shared by all components
            bus: Optional message bus (default: NATS connection from settings)
            view: Optional chat view (default: ConsoleView)
            clock: Time source (epoch seconds)
            on_fatal: Called when the session can not continue
            on_closed: Coroutine called when the connection closes for good
            on_tick: Coroutine run after every regular heartbeat
        """
        self.settings = settings
        self.reporter = reporter
        self.clock = clock
        self.on_fatal = on_fatal
        self.on_closed = on_closed
        self.on_tick = on_tick

        self._bus: Optional[MessageBus] = bus
        self._view: Optional[ChatView] = view
        self._subject_scheme: Optional[SubjectScheme] = None
        self._codec: Optional[ClaimCodec] = None
        self._local_identity: Optional[LocalIdentity] = None
        self._identity_resolver: Optional[IdentityResolver] = None
        self._presence_tracker: Optional[PresenceTracker] = None
        self._seen_tokens: Optional[SeenTokenSet] = None
        self._session_state: Optional[SessionState] = None
        self._claim_validator: Optional[ClaimValidator] = None
        self._heartbeat_loop: Optional[HeartbeatLoop] = None
        self._message_router: Optional[MessageRouter] = None

        if bus is not None and on_closed is not None:
            bus.on_closed = on_closed

    @property
    def subject_scheme(self) -> SubjectScheme:
        if self._subject_scheme is None:
            self._subject_scheme = SubjectScheme(prefix=self.settings.subject_prefix)
        return self._subject_scheme

    @property
    def codec(self) -> ClaimCodec:
        if self._codec is None:
            self._codec = ClaimCodec()
        return self._codec

    @property
    def view(self) -> ChatView:
        if self._view is None:
            self._view = ConsoleView()
        return self._view

    @property
    def local_identity(self) -> LocalIdentity:
        """
        Get LocalIdentity singleton, loading the credentials on first access.

        Raises:
            CredentialsLoadError: If no credentials file is configured or it is invalid
            CredentialsExpiredError: If the credentials have expired
        """
        if self._local_identity is None:
            if not self.settings.creds_file:
                raise CredentialsLoadError("A credentials file must be configured")
            self._local_identity = load_local_identity(
                self.settings.creds_file,
                codec=self.codec,
                name_override=self.settings.name,
                clock=self.clock,
                reporter=self.reporter,
            )
        return self._local_identity

    @property
    def identity_resolver(self) -> IdentityResolver:
        if self._identity_resolver is None:
            self._identity_resolver = IdentityResolver()
        return self._identity_resolver

    @property
    def presence_tracker(self) -> PresenceTracker:
        if self._presence_tracker is None:
            self._presence_tracker = PresenceTracker(
                self.identity_resolver,
                eviction_seconds=self.settings.presence_eviction_seconds,
            )
        return self._presence_tracker

    @property
    def seen_tokens(self) -> SeenTokenSet:
        if self._seen_tokens is None:
            self._seen_tokens = SeenTokenSet(max_size=self.settings.seen_tokens_max)
        return self._seen_tokens

    @property
    def session_state(self) -> SessionState:
        if self._session_state is None:
            self._session_state = SessionState(
                identity=self.local_identity,
                channels=self.settings.channels,
                tracker=self.presence_tracker,
                seen_tokens=self.seen_tokens,
                dedup_direct_messages=self.settings.dedup_direct_messages,
                clock=self.clock,
            )
        return self._session_state

    @property
    def claim_validator(self) -> ClaimValidator:
        if self._claim_validator is None:
            self._claim_validator = ClaimValidator(
                self.codec, reporter=self.reporter, clock=self.clock
            )
        return self._claim_validator

    @property
    def bus(self) -> MessageBus:
        """
        Get message bus singleton.

        Returns:
            Injected bus, or a NatsMessageBus built from settings
        """
        if self._bus is None:
            self._bus = NatsMessageBus(
                servers=self.settings.server_url,
                credentials_file=self.settings.creds_file,
                name="Causerie Chat",
                reconnect_wait=self.settings.reconnect_wait,
                reconnect_total=self.settings.reconnect_total,
                reporter=self.reporter,
                on_closed=self.on_closed,
            )
        return self._bus

    @property
    def heartbeat_loop(self) -> HeartbeatLoop:
        if self._heartbeat_loop is None:
            self._heartbeat_loop = HeartbeatLoop(
                bus=self.bus,
                codec=self.codec,
                identity=self.local_identity,
                scheme=self.subject_scheme,
                interval=self.settings.heartbeat_interval,
                ttl_factor=self.settings.heartbeat_ttl_factor,
                reporter=self.reporter,
                on_tick=self.on_tick,
                clock=self.clock,
            )
        return self._heartbeat_loop

    def get_process_heartbeat_use_case(self) -> ProcessHeartbeatUseCase:
        return ProcessHeartbeatUseCase(
            self.session_state, clock=self.clock, reporter=self.reporter
        )

    def get_process_channel_post_use_case(self) -> ProcessChannelPostUseCase:
        return ProcessChannelPostUseCase(self.session_state, reporter=self.reporter)

    def get_process_direct_message_use_case(self) -> ProcessDirectMessageUseCase:
        return ProcessDirectMessageUseCase(self.session_state, reporter=self.reporter)

    def get_select_view_use_case(self) -> SelectViewUseCase:
        return SelectViewUseCase(self.session_state)

    def get_send_post_use_case(self) -> SendPostUseCase:
        return SendPostUseCase(
            self.session_state,
            bus=self.bus,
            codec=self.codec,
            scheme=self.subject_scheme,
            reporter=self.reporter,
        )

    def get_sweep_presence_use_case(self) -> SweepPresenceUseCase:
        return SweepPresenceUseCase(
            self.session_state, clock=self.clock, reporter=self.reporter
        )

    @property
    def message_router(self) -> MessageRouter:
        if self._message_router is None:
            self._message_router = MessageRouter(
                bus=self.bus,
                scheme=self.subject_scheme,
                own_public_key=self.local_identity.public_key,
                validator=self.claim_validator,
                process_heartbeat=self.get_process_heartbeat_use_case(),
                process_post=self.get_process_channel_post_use_case(),
                process_direct=self.get_process_direct_message_use_case(),
                view=self.view,
                announce=self.heartbeat_loop.reannounce,
                on_fatal=self.on_fatal,
                reporter=self.reporter,
            )
        return self._message_router
