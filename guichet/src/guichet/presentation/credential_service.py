"""
Bus endpoint answering credential requests.
"""

from typing import Optional

from guichet.application.use_cases import IssueCredentialUseCase
from guichet.domain.exceptions import EmptyNameError, SigningError
from shared.identity import format_error
from shared.messaging import BusMessage, MessageBus
from shared.reporter import SystemReporter
from shared.reporter.emojis import Emoji

INTERNAL_ERROR = "Internal Error"


class CredentialService:
    """
    Queue-group subscriber on the request subject.

    Every request is answered on its reply subject with either the
    credentials document or an ``-ERR '<reason>'`` line. Instances share
    a queue group so exactly one of them answers a given request.
    """

    def __init__(
        self,
        bus: MessageBus,
        use_case: IssueCredentialUseCase,
        request_subject: str,
        queue_group: str,
        reporter: Optional[SystemReporter] = None,
    ):
        """
        Initialize CredentialService.

        Args:
            bus: Connected message bus
            use_case: Credential issuance use case
            request_subject: Subject requests arrive on
            queue_group: Queue group shared by issuer instances
            reporter: Optional SystemReporter for logging
        """
        self.bus = bus
        self.use_case = use_case
        self.request_subject = request_subject
        self.queue_group = queue_group
        self.reporter = reporter
        self._subscription = None

        self.stats = {
            "requests": 0,
            "issued": 0,
            "rejected": 0,
            "failed": 0,
        }

    async def start(self) -> None:
        """Subscribe to the request subject."""
        self._subscription = await self.bus.subscribe(
            self.request_subject, self.handle_request, queue=self.queue_group
        )
        if self.reporter:
            self.reporter.info(
                f"{Emoji.NETWORK.SUBSCRIPTION} Listening for requests on "
                f"{self.request_subject} (queue {self.queue_group})",
                context="CredentialService",
            )

    async def stop(self) -> None:
        if self._subscription is not None:
            await self._subscription.unsubscribe()
            self._subscription = None

    def build_reply(self, data: bytes) -> bytes:
        """
        Produce the reply for a request payload.

        Args:
            data: Raw request payload (the requested name)

        Returns:
            Reply payload
        """
        self.stats["requests"] += 1
        try:
            bundle = self.use_case.execute(data)
        except EmptyNameError as e:
            self.stats["rejected"] += 1
            self._log("warning", f"{Emoji.ERROR.INVALID_INPUT} Rejected request: {e}")
            return format_error(str(e)).encode()
        except SigningError as e:
            self.stats["failed"] += 1
            self._log("error", f"{Emoji.ERROR.ERROR} Error generating user JWT: {e}")
            return format_error(INTERNAL_ERROR).encode()

        self.stats["issued"] += 1
        return bundle.render().encode()

    async def handle_request(self, msg: BusMessage) -> None:
        """Answer one credential request."""
        if not msg.reply:
            self._log(
                "warning",
                f"{Emoji.MESSAGE.DROPPED} Request without reply subject dropped",
            )
            return

        await self.bus.publish(msg.reply, self.build_reply(msg.data))

    def _log(self, level: str, msg: str) -> None:
        if self.reporter:
            getattr(self.reporter, level)(msg, context="CredentialService")
