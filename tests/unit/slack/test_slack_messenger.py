from unittest.mock import patch

import pytest
from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError

from condenser_bot.schemas.reply import Reply
from condenser_bot.slack.client import SlackMessenger


@pytest.fixture
def slack_messenger():
    return SlackMessenger(WebClient(token="xoxb-test"))


def test_send_posts_attachment_payload(slack_messenger):
    """
    WHY: Verify that our wrapper correctly calls the official Slack SDK with the right parameters.
    HOW: Mock the underlying `chat_postMessage` method. Send a Reply with a mention and a field.
    EXPECTED: `chat_postMessage` is called once, with the mention as text and the card as an attachment.
    """
    reply = Reply(title="URL Shortened", mention="<@U1>").with_field("Short URL", "https://c.test/A")

    with patch.object(slack_messenger.client, "chat_postMessage") as mock_post:
        mock_post.return_value = {"ok": True}

        slack_messenger.send("C1", reply)

        mock_post.assert_called_once()
        kwargs = mock_post.call_args.kwargs
        assert kwargs["channel"] == "C1"
        assert kwargs["text"] == "<@U1>"
        assert kwargs["unfurl_links"] is False
        assert kwargs["attachments"][0]["fields"] == [
            {"title": "Short URL", "value": "https://c.test/A", "short": False}
        ]


def test_send_rate_limit_retry(slack_messenger):
    """
    WHY: Slack APIs often rate limit bots. We need to ensure we retry automatically.
    HOW: Mock `chat_postMessage` to fail once with 'ratelimited' and then succeed.
    EXPECTED: `chat_postMessage` is called twice.
    """
    with patch("time.sleep", return_value=None):
        with patch.object(slack_messenger.client, "chat_postMessage") as mock_post:
            err = SlackApiError("ratelimited", {"ok": False, "error": "ratelimited"})
            mock_post.side_effect = [err, {"ok": True}]

            slack_messenger.send("C1", Reply(title="Retry Me"))

            assert mock_post.call_count == 2


def test_send_gives_up_after_three_rate_limits(slack_messenger):
    with patch("time.sleep", return_value=None):
        with patch.object(slack_messenger.client, "chat_postMessage") as mock_post:
            mock_post.side_effect = SlackApiError("ratelimited", {"ok": False, "error": "ratelimited"})

            with pytest.raises(SlackApiError):
                slack_messenger.send("C1", Reply(title="Never"))

            assert mock_post.call_count == 3


def test_other_slack_errors_are_not_retried(slack_messenger):
    """
    WHY: Only rate limits are safe to retry; anything else could post twice or never succeed.
    HOW: Fail with 'channel_not_found'.
    EXPECTED: One call, error re-raised.
    """
    with patch.object(slack_messenger.client, "chat_postMessage") as mock_post:
        mock_post.side_effect = SlackApiError("nope", {"ok": False, "error": "channel_not_found"})

        with pytest.raises(SlackApiError):
            slack_messenger.send("C1", Reply(title="Lost"))

        assert mock_post.call_count == 1
