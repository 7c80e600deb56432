"""Tests for bento.retry."""

from __future__ import annotations

import pytest

from bento.config import BentoConfig
from bento.errors import (
    HttpClientError,
    InvalidRequestError,
    RateLimitError,
    UnexpectedResponseError,
)
from bento.retry import is_rate_limit, is_transient, with_retry


class TestWithRetry:
    def test_succeeds_first_try(self, config: BentoConfig):
        call_count = 0

        @with_retry(config)
        def fn():
            nonlocal call_count
            call_count += 1
            return "ok"

        assert fn() == "ok"
        assert call_count == 1

    @pytest.mark.parametrize("failures", [1, 2])
    def test_rate_limited_then_succeeds(self, config: BentoConfig, failures):
        call_count = 0

        @with_retry(config)
        def fn():
            nonlocal call_count
            call_count += 1
            if call_count <= failures:
                raise RateLimitError()
            return "recovered"

        assert fn() == "recovered"
        assert call_count == failures + 1

    def test_always_rate_limited(self, config: BentoConfig):
        call_count = 0

        @with_retry(config)
        def fn():
            nonlocal call_count
            call_count += 1
            raise RateLimitError(retry_after=1)

        with pytest.raises(RateLimitError):
            fn()
        assert call_count == config.max_attempts

    def test_non_retryable_fails_immediately(self, config: BentoConfig):
        call_count = 0

        @with_retry(config)
        def fn():
            nonlocal call_count
            call_count += 1
            raise InvalidRequestError("bad", status_code=422)

        with pytest.raises(InvalidRequestError):
            fn()
        assert call_count == 1

    def test_custom_predicate(self, config: BentoConfig):
        call_count = 0

        @with_retry(config, retry_on=is_rate_limit)
        def fn():
            nonlocal call_count
            call_count += 1
            raise HttpClientError("timeout", is_transient=True)

        with pytest.raises(HttpClientError):
            fn()
        assert call_count == 1

    def test_before_sleep_called_between_attempts(self, config: BentoConfig):
        sleeps = []

        @with_retry(config, before_sleep=lambda state: sleeps.append(state.attempt_number))
        def fn():
            raise RateLimitError()

        with pytest.raises(RateLimitError):
            fn()
        assert sleeps == [1, 2]

    def test_backoff_doubles_and_is_bounded(self):
        config = BentoConfig(
            publishable_key="p", secret_key="s", site_uuid="u",
            max_attempts=5, retry_base_delay=0.1, retry_max_delay=0.3,
        )
        waits = []
        decorator = with_retry(config, before_sleep=lambda state: waits.append(state.next_action.sleep))

        @decorator
        def fn():
            raise RateLimitError()

        fn.retry.sleep = lambda seconds: None
        with pytest.raises(RateLimitError):
            fn()
        assert waits == pytest.approx([0.1, 0.2, 0.3, 0.3])


class TestIsTransient:
    def test_kinds(self):
        assert is_transient(RateLimitError())
        assert is_transient(HttpClientError("timeout", is_transient=True))
        assert not is_transient(HttpClientError("bad url"))
        assert is_transient(UnexpectedResponseError("boom", status_code=503))
        assert not is_transient(UnexpectedResponseError("bad shape"))
        assert not is_transient(InvalidRequestError("bad"))
        assert not is_transient(ValueError("plain"))
