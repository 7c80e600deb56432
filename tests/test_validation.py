"""Tests for bento.validation."""

from __future__ import annotations

import pytest

from bento.errors import (
    InvalidBatchSizeError,
    InvalidContentError,
    InvalidEmailError,
    InvalidIpAddressError,
    InvalidNameError,
    InvalidRequestError,
    InvalidSegmentIdError,
    InvalidTagsError,
)
from bento.validation import (
    require_content,
    require_name,
    require_non_empty,
    require_segment_id,
    require_tags,
    require_text,
    validate_batch_size,
    validate_email,
    validate_ip,
)


class TestValidateEmail:
    @pytest.mark.parametrize("email", ["test@example.com", "first.last+tag@sub.example.co.uk"])
    def test_accepts_valid(self, email):
        assert validate_email(email) == email

    @pytest.mark.parametrize(
        "email",
        ["", "invalid-email", "@example.com", "user@", "user@example", "a b@example.com", "a@b@c.com",
         "a@example.com\n", " a@example.com", None],
    )
    def test_rejects_invalid(self, email):
        with pytest.raises(InvalidEmailError):
            validate_email(email)

    def test_error_carries_value(self):
        with pytest.raises(InvalidEmailError) as exc_info:
            validate_email("nope")
        assert exc_info.value.email == "nope"
        assert exc_info.value.kind == "InvalidEmail"


class TestValidateIp:
    @pytest.mark.parametrize("ip", ["127.0.0.1", "8.8.8.8", "::1", "2001:db8::ff00:42:8329"])
    def test_accepts_ipv4_and_ipv6(self, ip):
        assert validate_ip(ip) == ip

    @pytest.mark.parametrize("ip", ["999.999.999.999", "1.2.3", "localhost", "", None, 123, b"127.0.0.1"])
    def test_rejects_invalid(self, ip):
        with pytest.raises(InvalidIpAddressError):
            validate_ip(ip)


class TestRequiredStrings:
    def test_tags(self):
        assert require_tags("customer,lead") == "customer,lead"
        with pytest.raises(InvalidTagsError):
            require_tags("  ")

    def test_segment_id(self):
        with pytest.raises(InvalidSegmentIdError):
            require_segment_id("")

    def test_content(self):
        with pytest.raises(InvalidContentError):
            require_content("")

    def test_name(self):
        with pytest.raises(InvalidNameError):
            require_name(None)

    def test_text_message_names_parameter(self):
        with pytest.raises(InvalidRequestError, match="Report ID is required"):
            require_text("", "Report ID")


class TestCollections:
    def test_batch_size_at_limit(self):
        items = list(range(60))
        assert validate_batch_size(items, 60) is items

    def test_batch_size_over_limit(self):
        with pytest.raises(InvalidBatchSizeError, match="61"):
            validate_batch_size(list(range(61)), 60)

    def test_non_empty(self):
        with pytest.raises(InvalidRequestError, match="No events provided"):
            require_non_empty([], "events")
