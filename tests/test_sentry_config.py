"""
Tests for Sentry event scrubbing.
"""

from apps.core.sentry_config import before_send, scrub_sensitive_data


class TestScrubbing:
    """Test scrub_sensitive_data."""

    def test_sensitive_keys_redacted(self):
        data = scrub_sensitive_data(
            {"Authorization": "Bearer abc", "apikey": "anon", "note": "fine"}
        )

        assert data == {"Authorization": "[REDACTED]", "apikey": "[REDACTED]", "note": "fine"}

    def test_token_query_parameter_masked(self):
        assert scrub_sensitive_data("format=pdf&token=eyJhbGci") == "format=pdf&token=[REDACTED]"

    def test_phone_email_and_upi_masked(self):
        text = scrub_sensitive_data(
            "Call 9876543210 or mail owner@babujichaay.in, paid via ramesh@okaxis"
        )

        assert "9876543210" not in text
        assert "XXXXXX3210" in text
        assert "ow***@babujichaay.in" in text
        assert "ramesh@okaxis" not in text

    def test_nested_structures(self):
        data = scrub_sensitive_data({"entries": [{"reason": "call 9876543210"}]})

        assert data["entries"][0]["reason"] == "call XXXXXX3210"


class TestBeforeSend:
    """Test the before_send hook."""

    def test_request_scrubbed(self):
        event = {
            "request": {
                "url": "https://api.babujichaay.in/api/transactions/?token=secret",
                "headers": {"Authorization": "Bearer secret"},
                "cookies": {"sessionid": "abc"},
                "query_string": "token=secret",
            },
            "user": {"id": "u1", "email": "owner@babujichaay.in", "ip_address": "10.0.0.1"},
        }

        result = before_send(event, {})

        assert "secret" not in result["request"]["url"]
        assert result["request"]["headers"]["Authorization"] == "[REDACTED]"
        assert result["request"]["cookies"] == {"sessionid": "[REDACTED]"}
        assert result["request"]["query_string"] == "token=[REDACTED]"
        assert result["user"]["id"] == "u1"
        assert result["user"]["email"] == "ow***@babujichaay.in"
        assert result["user"]["ip_address"] == "XXX.XXX.XXX.XXX"

    def test_exception_values_scrubbed(self):
        event = {"exception": {"values": [{"value": "bad token=abc123 for 9876543210"}]}}

        result = before_send(event, {})

        assert result["exception"]["values"][0]["value"] == (
            "bad token=[REDACTED] for XXXXXX3210"
        )
