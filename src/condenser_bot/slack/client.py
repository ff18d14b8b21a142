from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from ..log import get_logger
from ..schemas.reply import Reply
from .post_blocks import build_post_payload

logger = get_logger("slack_client")


def _is_rate_limited(exc: BaseException) -> bool:
    return isinstance(exc, SlackApiError) and exc.response.get("error") == "ratelimited"


class SlackMessenger:
    """Sends Reply objects to Slack channels. Safe to call from worker threads."""

    def __init__(self, client: WebClient):
        self.client = client

    def send(self, channel_id: str, reply: Reply) -> None:
        self.post_payload(build_post_payload(channel_id, reply))

    # A rate-limited post is never delivered, so retrying it cannot duplicate a message.
    @retry(
        retry=retry_if_exception(_is_rate_limited),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def post_payload(self, payload: dict) -> None:
        try:
            self.client.chat_postMessage(**payload)
        except SlackApiError as e:
            if e.response.get("error") == "ratelimited":
                logger.warning("Slack rate limited, retrying...")
                raise
            logger.error(f"Slack API error: {e.response.get('error')}")
            raise
