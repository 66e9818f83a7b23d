"""Webhook notifications for job lifecycle events, delivered with curl."""

from __future__ import annotations

import math
import subprocess
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

_JSON_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}
_U16_MAX = 65535


class WebhookError(Exception):
    """Raised when a webhook cannot be delivered."""

    def __init__(self, message: str, http_status: int | None = None) -> None:
        super().__init__(message)
        self.http_status = http_status


@dataclass
class WebhookConfig:
    """Where and how webhook notifications are sent."""

    url: str = ""
    secret: str = ""
    event_filter: str = ""
    timeout_seconds: int = 10
    max_retries: int = 3
    verify_ssl: bool = True


@dataclass
class WebhookEvent:
    """A job lifecycle event; empty payload and timestamp are filled in when sent."""

    event_type: str
    job_id: str = ""
    payload_json: str = ""
    timestamp: str = ""


@dataclass
class WebhookResult:
    """Outcome of a delivery, including how many attempts it took."""

    success: bool = False
    http_status: int = 0
    error: str = ""
    attempts: int = 0


def _iso_timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _format_number(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    if float(value).is_integer():
        return str(int(value))
    return format(Decimal(repr(float(value))), "f")


def escape_json_string(s: str) -> str:
    """Escape quotes, backslashes, newlines, carriage returns and tabs for a JSON string."""
    return "".join(_JSON_ESCAPES.get(c, c) for c in s)


def build_event_body(event: WebhookEvent) -> str:
    """Build the JSON body sent for an event."""
    timestamp = event.timestamp or _iso_timestamp()
    payload = event.payload_json or "{}"
    return (
        f'{{"type":"{escape_json_string(event.event_type)}",'
        f'"job_id":"{escape_json_string(event.job_id)}",'
        f'"timestamp":"{escape_json_string(timestamp)}",'
        f'"data":{payload}}}'
    )


def _curl_command(config: WebhookConfig, event: WebhookEvent, body: str) -> list[str]:
    cmd = [
        "curl", "-s", "-o", "/dev/null", "-w", "%{http_code}", "-X", "POST",
        "-H", "Content-Type: application/json",
        "-H", f"X-Webhook-Event: {event.event_type}",
    ]
    if config.secret:
        cmd += ["-H", f"X-Webhook-Secret: {config.secret}"]
    if not config.verify_ssl:
        cmd.append("-k")
    cmd += ["--max-time", str(config.timeout_seconds), "-d", body, config.url]
    return cmd


def _parse_status(text: str) -> int | None:
    digits = text[1:] if text.startswith("+") else text
    if not digits or not (digits.isascii() and digits.isdigit()):
        return None
    value = int(digits)
    return value if value <= _U16_MAX else None


def send_webhook(config: WebhookConfig, event: WebhookEvent) -> WebhookResult:
    """POST an event, retrying up to ``config.max_retries`` times until a 2xx reply."""
    cmd = _curl_command(config, event, build_event_body(event))
    result = WebhookResult()

    for attempt in range(config.max_retries + 1):
        result.attempts = attempt + 1
        try:
            completed = subprocess.run(cmd, capture_output=True, check=False)
        except OSError as exc:
            result.error = f"Failed to execute curl: {exc}"
            continue

        code_str = completed.stdout.decode("utf-8", errors="replace")
        status = _parse_status(code_str.strip())
        if status is None:
            result.error = f"curl returned: {code_str}"
            continue
        result.http_status = status
        if 200 <= status < 300:
            result.success = True
            return result
        result.error = f"HTTP {status}"

    return result


def build_job_completed_payload(job_id: str, output_dir: Path, duration_seconds: float) -> str:
    """Build the JSON payload for a completed job."""
    return (
        f'{{"job_id":"{escape_json_string(job_id)}","status":"completed",'
        f'"output_dir":"{escape_json_string(str(output_dir))}",'
        f'"duration_seconds":{_format_number(duration_seconds)}}}'
    )


def build_job_failed_payload(job_id: str, error: str) -> str:
    """Build the JSON payload for a failed job."""
    return (
        f'{{"job_id":"{escape_json_string(job_id)}","status":"failed",'
        f'"error":"{escape_json_string(error)}"}}'
    )


def build_validation_payload(package_dir: Path, valid: bool, errors: int, warnings: int) -> str:
    """Build the JSON payload for a package validation result."""
    return (
        f'{{"package_dir":"{escape_json_string(str(package_dir))}",'
        f'"valid":{"true" if valid else "false"},'
        f'"errors":{errors},"warnings":{warnings}}}'
    )


def ping_webhook(config: WebhookConfig) -> WebhookResult:
    """Send a ping event to check that an endpoint is reachable."""
    event = WebhookEvent(
        event_type="ping",
        job_id="",
        payload_json='{"message":"postkit webhook test"}',
        timestamp=_iso_timestamp(),
    )
    return send_webhook(config, event)