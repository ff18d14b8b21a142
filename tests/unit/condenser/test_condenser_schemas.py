from datetime import timedelta

import pytest
from pydantic import ValidationError

from condenser_bot.condenser.schemas import DeleteRequest, MetaResponse, ShortenRequest


def test_shorten_request_upper_cases_code():
    request = ShortenRequest(url="https://example.com/", code="mycode")
    assert request.code == "MYCODE"


def test_shorten_request_serializes_missing_code_as_null():
    request = ShortenRequest(url="https://example.com/")
    assert request.model_dump(mode="json") == {"url": "https://example.com/", "code": None, "meta": None}


def test_requests_are_immutable():
    request = ShortenRequest(url="https://example.com/", code="abc")
    with pytest.raises(ValidationError):
        request.code = "OTHER"
    with pytest.raises(ValidationError):
        DeleteRequest(code="abc").code = "x"


def test_delete_request_upper_cases_code():
    assert DeleteRequest(code="gone").code == "GONE"


def test_meta_response_keeps_offset():
    meta = MetaResponse.model_validate_json(
        b'{"full_url": "https://example.com/page", "meta": '
        b'{"owner": "bot", "time": "2018-06-01T12:30:45+01:00", "user_meta": "hello"}}'
    )
    assert meta.meta.owner == "bot"
    assert meta.meta.time.utcoffset() == timedelta(hours=1)
    assert meta.meta.user_meta == "hello"


def test_meta_response_user_meta_is_optional():
    meta = MetaResponse.model_validate(
        {"full_url": "https://example.com/", "meta": {"owner": "bot", "time": "2018-06-01T12:30:45Z"}}
    )
    assert meta.meta.user_meta is None


def test_meta_response_requires_offset():
    """
    WHY: Creation times are shown in the offset the service reported; a naive time has none.
    HOW: Validate a timestamp without offset.
    EXPECTED: ValidationError, which the job reports as an unparseable response.
    """
    with pytest.raises(ValidationError):
        MetaResponse.model_validate(
            {"full_url": "https://example.com/", "meta": {"owner": "bot", "time": "2018-06-01T12:30:45"}}
        )
