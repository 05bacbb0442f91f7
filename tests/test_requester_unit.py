"""
Unit tests — Response classification and rate-limit wait computation.
"""

from unittest.mock import patch

import pytest
import requests

from purger.requester import (
    Outcome,
    OutcomeKind,
    RateLimitedRequester,
    RequestSpec,
    compute_wait_ms,
)

REQUEST = RequestSpec(method="DELETE", url="https://discord.test/api/v9/channels/1/messages/2")


@pytest.fixture
def requester():
    return RateLimitedRequester(min_delay_ms=1500, default_wait_ms=3000, timeout=5)


class TestComputeWait:
    """purger.requester.compute_wait_ms — header / body / default precedence."""

    def test_header_takes_precedence_over_body(self):
        assert compute_wait_ms({"retry-after": "2"}, {"retry_after": 10}, 3000, 1500) == 2000

    def test_header_result_floored_to_minimum(self):
        assert compute_wait_ms({"retry-after": "1"}, None, 3000, 1500) == 1500

    def test_body_fraction_rounds_up(self):
        assert compute_wait_ms({}, {"retry_after": 2.0001}, 3000, 1500) == 2001

    def test_default_when_nothing_reported(self):
        assert compute_wait_ms({}, {"message": "You are being rate limited."}, 3000, 1500) == 3000

    def test_zero_body_value_falls_back_to_default(self):
        assert compute_wait_ms({}, {"retry_after": 0}, 5000, 1200) == 5000

    def test_unparseable_header_falls_through_to_body(self):
        assert compute_wait_ms({"retry-after": "soon"}, {"retry_after": 4.5}, 3000, 1500) == 4500

    def test_fractional_header_keeps_whole_seconds(self):
        assert compute_wait_ms({"retry-after": "3.7"}, None, 3000, 1500) == 3000

    def test_infinite_header_falls_through_to_body(self):
        assert compute_wait_ms({"retry-after": "inf"}, {"retry_after": 2.5}, 3000, 1500) == 2500

    def test_infinite_body_value_uses_default(self):
        assert compute_wait_ms({}, {"retry_after": float("inf")}, 3000, 1500) == 3000

    def test_nan_and_negative_values_ignored(self):
        assert compute_wait_ms({"retry-after": "nan"}, {"retry_after": -4}, 5000, 1200) == 5000


class TestExecute:
    """purger.requester.RateLimitedRequester.execute — one attempt, classified."""

    @patch("purger.requester.requests.request")
    def test_204_is_ok_without_body(self, mock_request, requester, fake_response):
        mock_request.return_value = fake_response(204)
        outcome = requester.execute(REQUEST)
        assert outcome.kind is OutcomeKind.OK
        assert outcome.body is None
        assert mock_request.call_count == 1

    @patch("purger.requester.requests.request")
    def test_200_json_is_ok_with_body(self, mock_request, requester, fake_response):
        mock_request.return_value = fake_response(200, {"messages": [], "total_results": 0})
        outcome = requester.execute(REQUEST)
        assert outcome.kind is OutcomeKind.OK
        assert outcome.body == {"messages": [], "total_results": 0}

    @patch("purger.requester.requests.request")
    def test_200_unparseable_body_is_error(self, mock_request, requester, fake_response):
        mock_request.return_value = fake_response(200, text="<html>oops</html>")
        outcome = requester.execute(REQUEST)
        assert outcome.kind is OutcomeKind.ERROR
        assert outcome.status == 200

    @patch("purger.requester.requests.request")
    def test_429_reports_header_wait(self, mock_request, requester, fake_response):
        mock_request.return_value = fake_response(429, {"retry_after": 10}, headers={"retry-after": "2"})
        outcome = requester.execute(REQUEST)
        assert outcome.kind is OutcomeKind.RATE_LIMITED
        assert outcome.wait_ms == 2000

    @patch("purger.requester.requests.request")
    def test_429_without_json_uses_default(self, mock_request, requester, fake_response):
        mock_request.return_value = fake_response(429, text="slow down")
        outcome = requester.execute(REQUEST)
        assert outcome.kind is OutcomeKind.RATE_LIMITED
        assert outcome.wait_ms == 3000

    @patch("purger.requester.requests.request")
    def test_429_with_infinite_hints_uses_default(self, mock_request, requester, fake_response):
        mock_request.return_value = fake_response(429, {"retry_after": float("inf")}, headers={"retry-after": "inf"})
        outcome = requester.execute(REQUEST)
        assert outcome.kind is OutcomeKind.RATE_LIMITED
        assert outcome.wait_ms == 3000

    @patch("time.sleep")
    @patch("purger.requester.requests.request")
    def test_429_does_not_sleep(self, mock_request, mock_sleep, requester, fake_response):
        mock_request.return_value = fake_response(429, {"retry_after": 60})
        requester.execute(REQUEST)
        mock_sleep.assert_not_called()

    @patch("purger.requester.requests.request")
    def test_401_is_fatal(self, mock_request, requester, fake_response):
        mock_request.return_value = fake_response(401, text='{"message": "401: Unauthorized"}')
        outcome = requester.execute(REQUEST)
        assert outcome.kind is OutcomeKind.FATAL
        assert outcome.status == 401

    @pytest.mark.parametrize("status", [403, 404, 500, 502])
    @patch("purger.requester.requests.request")
    def test_other_statuses_are_errors_with_status(self, mock_request, status, requester, fake_response):
        mock_request.return_value = fake_response(status, text="nope")
        outcome = requester.execute(REQUEST)
        assert outcome.kind is OutcomeKind.ERROR
        assert outcome.status == status
        assert outcome.body == "nope"

    @patch("purger.requester.requests.request", side_effect=requests.exceptions.ConnectionError("reset"))
    def test_transport_failure_has_no_status(self, mock_request, requester):
        outcome = requester.execute(REQUEST)
        assert outcome.kind is OutcomeKind.ERROR
        assert outcome.status is None
        assert outcome.is_transport_error
        assert "reset" in outcome.body

    @patch("purger.requester.requests.request", side_effect=requests.exceptions.Timeout("timed out"))
    def test_timeout_is_transport_failure(self, mock_request, requester):
        assert requester.execute(REQUEST).is_transport_error

    @patch("purger.requester.requests.request")
    def test_request_passes_headers_params_and_timeout(self, mock_request, requester, fake_response):
        mock_request.return_value = fake_response(204)
        spec = RequestSpec("GET", "https://discord.test/x", headers={"authorization": "t"}, params={"a": 1})
        requester.execute(spec)
        mock_request.assert_called_once_with(
            "GET", "https://discord.test/x", headers={"authorization": "t"}, params={"a": 1}, timeout=5
        )


class TestOutcomeDescribe:
    def test_http_error_includes_status_and_snippet(self):
        text = Outcome.error(500, "x" * 500).describe()
        assert text.startswith("HTTP 500: ")
        assert len(text) == len("HTTP 500: ") + 200

    def test_transport_error(self):
        assert Outcome.error(None, "ConnectionError: reset").describe() == "transport error: ConnectionError: reset"
