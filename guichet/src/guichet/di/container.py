"""
Dependency Injection container for Guichet.

Manages lifecycle and dependencies of all application components.
"""

from typing import Optional

from guichet.application.use_cases import IssueCredentialUseCase
from guichet.config.settings import Settings
from guichet.domain.entities import SigningAuthority
from guichet.domain.exceptions import AuthorityLoadError
from guichet.domain.services import PermissionScoper
from guichet.infrastructure.authority import load_signing_authority
from guichet.infrastructure.shutdown import ShutdownManager
from guichet.presentation import CredentialService
from shared.identity import ClaimCodec, SubjectScheme
from shared.messaging import MessageBus, NatsMessageBus
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
    ):
        """
        Initialize container with settings.

        Args:
            settings: Application settings
            reporter: Optional SystemReporter shared by all components
            bus: Optional message bus (default: NATS connection from settings)
        """
        self.settings = settings
        self.reporter = reporter

        self._bus: Optional[MessageBus] = bus
        self._subject_scheme: Optional[SubjectScheme] = None
        self._codec: Optional[ClaimCodec] = None
        self._signing_authority: Optional[SigningAuthority] = None
        self._permission_scoper: Optional[PermissionScoper] = None
        self._credential_service: Optional[CredentialService] = None
        self._shutdown_manager: Optional[ShutdownManager] = None

    @property
    def subject_scheme(self) -> SubjectScheme:
        if self._subject_scheme is None:
            self._subject_scheme = SubjectScheme(
                prefix=self.settings.subject_prefix,
                request_subject=self.settings.request_subject,
                usage_subject=self.settings.usage_subject,
            )
        return self._subject_scheme

    @property
    def codec(self) -> ClaimCodec:
        if self._codec is None:
            self._codec = ClaimCodec()
        return self._codec

    @property
    def signing_authority(self) -> SigningAuthority:
        """
        Get SigningAuthority singleton, loading it on first access.

        Raises:
            AuthorityLoadError: If the files are not configured or invalid
        """
        if self._signing_authority is None:
            if not self.settings.account_file or not self.settings.signing_key_file:
                raise AuthorityLoadError(
                    "Account file and signing key file must be configured"
                )
            self._signing_authority = load_signing_authority(
                self.settings.account_file,
                self.settings.signing_key_file,
                codec=self.codec,
                reporter=self.reporter,
            )
        return self._signing_authority

    @property
    def permission_scoper(self) -> PermissionScoper:
        if self._permission_scoper is None:
            self._permission_scoper = PermissionScoper(self.subject_scheme)
        return self._permission_scoper

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
                name="Guichet Chat-Access",
                reconnect_wait=self.settings.reconnect_wait,
                reconnect_total=self.settings.reconnect_total,
                reporter=self.reporter,
            )
        return self._bus

    def get_issue_credential_use_case(self) -> IssueCredentialUseCase:
        return IssueCredentialUseCase(
            authority=self.signing_authority,
            scoper=self.permission_scoper,
            codec=self.codec,
            validity_hours=self.settings.validity_hours,
            max_payload=self.settings.max_payload,
            max_name_length=self.settings.max_name_length,
            reporter=self.reporter,
        )

    @property
    def credential_service(self) -> CredentialService:
        if self._credential_service is None:
            self._credential_service = CredentialService(
                bus=self.bus,
                use_case=self.get_issue_credential_use_case(),
                request_subject=self.settings.request_subject,
                queue_group=self.settings.queue_group,
                reporter=self.reporter,
            )
        return self._credential_service

    @property
    def shutdown_manager(self) -> ShutdownManager:
        if self._shutdown_manager is None:
            self._shutdown_manager = ShutdownManager(
                shutdown_timeout=self.settings.shutdown_timeout,
                reporter=self.reporter,
            )
        return self._shutdown_manager
