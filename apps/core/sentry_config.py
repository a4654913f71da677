"""
Sentry initialization with data scrubbing.

Platform access tokens travel in headers and, for invoice links, in the query
string. Both are masked before an event leaves the process, as are customer
phone numbers and UPI handles that show up in free-text refund reasons.
"""

import re
from typing import Any, Dict, Optional

import sentry_sdk
from sentry_sdk.integrations.celery import CeleryIntegration
from sentry_sdk.integrations.django import DjangoIntegration

SENSITIVE_KEYS = {
    "password",
    "secret",
    "token",
    "apikey",
    "api_key",
    "access_token",
    "refresh_token",
    "authorization",
    "cookie",
    "session",
    "service_role",
}

TOKEN_QUERY_PATTERN = re.compile(r"(token=)[^&\s]+", re.IGNORECASE)
EMAIL_PATTERN = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
UPI_PATTERN = re.compile(r"\b[A-Za-z0-9._-]{2,}@[A-Za-z]{2,}\b")
PHONE_PATTERN = re.compile(r"(?<!\d)(?:\+91[\s-]?)?[6-9]\d{9}(?!\d)")


def scrub_sensitive_data(data: Any) -> Any:
    """
    Recursively scrub sensitive data from dictionaries, lists, and strings.
    """
    if isinstance(data, dict):
        return {
            key: "[REDACTED]" if _is_sensitive_key(key) else scrub_sensitive_data(value)
            for key, value in data.items()
        }
    elif isinstance(data, list):
        return [scrub_sensitive_data(item) for item in data]
    elif isinstance(data, str):
        return _scrub_string(data)
    return data


def _is_sensitive_key(key) -> bool:
    key_lower = str(key).lower()
    return any(sensitive in key_lower for sensitive in SENSITIVE_KEYS)


def _scrub_string(text: str) -> str:
    text = TOKEN_QUERY_PATTERN.sub(r"\1[REDACTED]", text)
    text = EMAIL_PATTERN.sub(lambda m: _mask_email(m.group(0)), text)
    text = UPI_PATTERN.sub("[UPI]", text)
    text = PHONE_PATTERN.sub(lambda m: f"XXXXXX{m.group(0)[-4:]}", text)
    return text


def _mask_email(email: str) -> str:
    """
    Partially mask an email address (e.g. jo***@example.com).
    """
    try:
        local, domain = email.split("@")
        if len(local) <= 2:
            masked_local = local[:1] + "***"
        else:
            masked_local = local[:2] + "***"
        return f"{masked_local}@{domain}"
    except ValueError:
        return "REDACTED@EMAIL"


def before_send(event: Dict[str, Any], hint: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Sentry before_send hook to scrub sensitive data from events.
    """
    if "request" in event:
        request = event["request"]

        if "headers" in request:
            request["headers"] = scrub_sensitive_data(request["headers"])

        if "cookies" in request:
            request["cookies"] = {k: "[REDACTED]" for k in request["cookies"]}

        if "query_string" in request:
            request["query_string"] = scrub_sensitive_data(request["query_string"])

        if "url" in request:
            request["url"] = _scrub_string(request["url"])

        if "data" in request:
            request["data"] = scrub_sensitive_data(request["data"])

    if "extra" in event:
        event["extra"] = scrub_sensitive_data(event["extra"])

    # Keep the user id, mask email and IP
    if "user" in event:
        user = event["user"]
        if "email" in user:
            user["email"] = _mask_email(user["email"])
        if "ip_address" in user:
            user["ip_address"] = "XXX.XXX.XXX.XXX"

    if "exception" in event and "values" in event["exception"]:
        for exception in event["exception"]["values"]:
            if "value" in exception:
                exception["value"] = _scrub_string(exception["value"])

    if "breadcrumbs" in event and "values" in event["breadcrumbs"]:
        for breadcrumb in event["breadcrumbs"]["values"]:
            if "data" in breadcrumb:
                breadcrumb["data"] = scrub_sensitive_data(breadcrumb["data"])
            if "message" in breadcrumb:
                breadcrumb["message"] = _scrub_string(breadcrumb["message"])

    return event


def initialize_sentry(
    dsn: Optional[str],
    environment: str = "development",
    traces_sample_rate: float = 0.1,
    release: Optional[str] = None,
) -> None:
    """
    Initialize Sentry SDK with Django and Celery integrations.

    Does nothing when ``dsn`` is empty.
    """
    if not dsn:
        return

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=release,
        traces_sample_rate=traces_sample_rate,
        integrations=[
            DjangoIntegration(transaction_style="url"),
            CeleryIntegration(monitor_beat_tasks=True),
        ],
        before_send=before_send,
        send_default_pii=False,
        attach_stacktrace=True,
        max_breadcrumbs=50,
        debug=environment == "development",
    )
