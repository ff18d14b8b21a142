"""Condenser commands: shorten, meta and delete.

Each invocation is validated on the listener thread, turned into a job that
owns everything it needs (request, channel, mention, credentials), and handed
to the worker pool. The job makes exactly one HTTP call and sends exactly one
reply.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar, Optional, Tuple, Type
from urllib.parse import SplitResult, urlsplit

from pydantic import BaseModel

from ..commands.base import BUSY, Command, CommandOptions, Invocation, Messenger
from ..errors import InvalidPathError, ProtocolError, TransportError, UsageError, WorkerPoolFull
from ..log import get_logger
from ..rendering.slack_format import format_timestamp, inline_code
from ..schemas.reply import COLOUR_CONDENSER, Reply, error_reply
from ..workers import WorkerPool, worker_pool
from .client import DELETE_PATH, META_PATH, SHORTEN_PATH, CondenserClient, RawResponse
from .schemas import (
    DeleteRequest,
    DeleteResponse,
    MetaResponse,
    ServiceCredentials,
    ShortenRequest,
    ShortenResponse,
)
from .translate import (
    CommandKind,
    ReplyContext,
    translate_parse_failure,
    translate_status,
    translate_transport_error,
)

logger = get_logger("condenser_commands")

ALLOWED_SCHEMES = ("http", "https")
DIRECT_MESSAGE_ORIGIN = "PM"


def parse_url(token: str) -> Optional[SplitResult]:
    """Returns the split URL if the token is an absolute URL, else None."""
    try:
        parts = urlsplit(token)
    except ValueError:
        return None
    if not parts.scheme or not (parts.netloc or parts.path):
        return None
    if parts.scheme in ALLOWED_SCHEMES and not parts.netloc:
        return None
    return parts


def split_shorten_args(args: Tuple[str, ...]) -> Tuple[str, Optional[str]]:
    """
    Splits `[CODE] URL` into (url, code). With two tokens, the first one that
    parses as a URL is the URL and the other is the code, in either order.
    """
    if len(args) == 1:
        if parse_url(args[0]) is None:
            raise UsageError("Unable to parse provided URL.")
        return args[0], None

    for index, token in enumerate(args):
        if parse_url(token) is not None:
            code = args[1 - index]
            return token, code.upper()
    raise UsageError("Unable to find a valid URL.")


# Jobs


@dataclass(frozen=True)
class CondenserJob(ABC):
    """One call to Condenser plus the one reply that reports it."""
    channel_id: str
    mention: str
    client: CondenserClient
    messenger: Messenger

    kind: ClassVar[CommandKind]
    response_model: ClassVar[Type[BaseModel]]

    def run(self) -> None:
        ctx = ReplyContext(command=self.kind, code=self.code, mention=self.mention)
        try:
            raw = self.call()
        except TransportError as err:
            reply = translate_transport_error(err, ctx)
        else:
            reply = self.handle_response(raw, ctx)
        self.messenger.send(self.channel_id, reply)

    def handle_response(self, raw: RawResponse, ctx: ReplyContext) -> Reply:
        if raw.status_code != 200:
            return translate_status(raw.status_code, ctx)
        try:
            parsed = raw.json(self.response_model)
        except ProtocolError as err:
            return translate_parse_failure(err, ctx)
        return self.success(parsed)

    @property
    @abstractmethod
    def code(self) -> Optional[str]:
        ...

    @abstractmethod
    def call(self) -> RawResponse:
        ...

    @abstractmethod
    def success(self, response) -> Reply:
        ...


@dataclass(frozen=True)
class ShortenJob(CondenserJob):
    request: ShortenRequest
    api_key: str

    kind: ClassVar[CommandKind] = CommandKind.SHORTEN
    response_model: ClassVar[Type[BaseModel]] = ShortenResponse

    @property
    def code(self) -> Optional[str]:
        return self.request.code

    def call(self) -> RawResponse:
        return self.client.post(SHORTEN_PATH, self.api_key, self.request.model_dump(mode="json"))

    def success(self, response: ShortenResponse) -> Reply:
        return Reply(
            title="URL Shortened",
            colour=COLOUR_CONDENSER,
            mention=self.mention,
        ).with_field(
            "Short URL", str(response.short_url)
        ).with_field(
            "Original URL", self.request.url
        )


@dataclass(frozen=True)
class MetaJob(CondenserJob):
    short_code: str
    path: str

    kind: ClassVar[CommandKind] = CommandKind.META
    response_model: ClassVar[Type[BaseModel]] = MetaResponse

    @property
    def code(self) -> Optional[str]:
        return self.short_code

    def call(self) -> RawResponse:
        return self.client.get(self.path)

    def success(self, response: MetaResponse) -> Reply:
        meta = response.meta
        reply = Reply(
            title="Link Metadata",
            colour=COLOUR_CONDENSER,
            mention=self.mention,
        ).with_field(
            "Short URL", self.client.short_url(self.short_code)
        ).with_field(
            "Full URL", str(response.full_url)
        ).with_field(
            "Owner", meta.owner, inline=True
        ).with_field(
            "Created", format_timestamp(meta.time), inline=True
        )
        if meta.user_meta:
            reply = reply.with_field("User Metadata", meta.user_meta)
        return reply


@dataclass(frozen=True)
class DeleteJob(CondenserJob):
    request: DeleteRequest
    api_key: str

    kind: ClassVar[CommandKind] = CommandKind.DELETE
    response_model: ClassVar[Type[BaseModel]] = DeleteResponse

    @property
    def code(self) -> Optional[str]:
        return self.request.code

    def call(self) -> RawResponse:
        return self.client.post(DELETE_PATH, self.api_key, self.request.model_dump(mode="json"))

    def success(self, response: DeleteResponse) -> Reply:
        return Reply(
            title="Link Deleted",
            description=f"Removed short code {inline_code(response.code.upper())}.",
            colour=COLOUR_CONDENSER,
            mention=self.mention,
        ).with_field(
            "Code", response.code.upper(), inline=True
        ).with_field(
            "Status", response.status, inline=True
        )


# Commands


class CondenserCommand(Command):
    def __init__(
        self,
        messenger: Messenger,
        credentials: ServiceCredentials,
        client: Optional[CondenserClient] = None,
        pool: Optional[WorkerPool] = None,
    ):
        super().__init__(messenger)
        self.credentials = credentials
        self.client = client or CondenserClient(credentials.base_url)
        self._pool = pool

    @property
    def pool(self) -> WorkerPool:
        return self._pool or worker_pool()

    def dispatch(self, invocation: Invocation, job: CondenserJob) -> None:
        try:
            self.pool.submit(job.run)
        except WorkerPoolFull as e:
            logger.warning(f"Rejected '{invocation.name}' from {invocation.origin.author_id}: {e}")
            self.reply(invocation, error_reply(BUSY, invocation.origin.mention))


class ShortenCommand(CondenserCommand):
    def __init__(self, messenger, credentials, client=None, pool=None, bot_name: str = "Condenser Bot"):
        super().__init__(messenger, credentials, client=client, pool=pool)
        self.bot_name = bot_name
        self.options = CommandOptions(
            description=f"Shorten a URL with the Condenser service at {credentials.base_url}",
            usage="[CODE] URL",
            example="google https://google.com/",
            min_args=1,
            max_args=2,
        )

    def execute(self, invocation: Invocation) -> None:
        url, code = split_shorten_args(invocation.args)

        scheme = urlsplit(url).scheme
        if scheme not in ALLOWED_SCHEMES:
            raise UsageError(f"Invalid URL scheme: {scheme}")

        origin = invocation.origin
        request = ShortenRequest(
            url=url,
            code=code,
            meta=f"Submitted via {self.bot_name} by {origin.author_tag} "
                 f"(via {origin.guild_name or DIRECT_MESSAGE_ORIGIN})",
        )

        self.dispatch(invocation, ShortenJob(
            channel_id=origin.channel_id,
            mention=origin.mention,
            client=self.client,
            messenger=self.messenger,
            request=request,
            api_key=self.credentials.api_key,
        ))


class MetaCommand(CondenserCommand):
    def __init__(self, messenger, credentials, client=None, pool=None):
        super().__init__(messenger, credentials, client=client, pool=pool)
        self.options = CommandOptions(
            description=f"Show who created a short code on the Condenser service at {credentials.base_url}, and where it points",
            usage="CODE",
            example="GOOGLE",
            min_args=1,
            max_args=1,
        )

    def execute(self, invocation: Invocation) -> None:
        code = invocation.args[0].upper()
        try:
            path = self.client.code_path(META_PATH, code)
        except InvalidPathError:
            raise UsageError(f"Invalid code: {code}")

        origin = invocation.origin
        self.dispatch(invocation, MetaJob(
            channel_id=origin.channel_id,
            mention=origin.mention,
            client=self.client,
            messenger=self.messenger,
            short_code=code,
            path=path,
        ))


class DeleteCommand(CondenserCommand):
    def __init__(self, messenger, credentials, client=None, pool=None):
        super().__init__(messenger, credentials, client=client, pool=pool)
        self.options = CommandOptions(
            description=f"Delete a short code from the Condenser service at {credentials.base_url}",
            usage="CODE",
            example="GOOGLE",
            min_args=1,
            max_args=1,
        )

    def execute(self, invocation: Invocation) -> None:
        origin = invocation.origin
        self.dispatch(invocation, DeleteJob(
            channel_id=origin.channel_id,
            mention=origin.mention,
            client=self.client,
            messenger=self.messenger,
            request=DeleteRequest(code=invocation.args[0]),
            api_key=self.credentials.api_key,
        ))
