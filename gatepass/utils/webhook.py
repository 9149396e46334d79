"""Fire-and-forget webhook notifications for gate pass events"""
import hashlib
import hmac
import json
import threading
from datetime import datetime, timezone
from typing import Any, Dict

from gatepass.config import settings
from gatepass.utils.logger import logger


def _deliver(url: str, body: bytes, headers: Dict[str, str]) -> None:
    """Deliver webhook payload in a daemon background thread (fire-and-forget)."""
    try:
        import requests
        resp = requests.post(url, data=body, headers=headers, timeout=5)
        logger.debug(
            "Webhook delivered",
            extra={"event": headers.get("X-GatePass-Event"), "status": resp.status_code},
        )
    except Exception as exc:
        logger.warning(
            f"Webhook delivery failed: {exc}",
            extra={"event": headers.get("X-GatePass-Event")},
        )


def _slack_body(event_type: str, payload: Dict[str, Any]) -> bytes:
    """Format a gate pass event as a Slack incoming-webhook message."""
    student = payload.get("student_name") or payload.get("student_id", "unknown")
    reason = payload.get("reason") or ""
    ts = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")

    if event_type == "gatepass.applied":
        text = (
            f"*Gate pass requested* :hourglass_flowing_sand:\n"
            f"*{student}* asked to leave campus.\n> {reason}"
        )
        color = "#F59E0B"
    elif event_type == "gatepass.approved":
        text = f"*Gate pass approved* :white_check_mark:\n*{student}* may leave campus."
        color = "#10B981"
    elif event_type == "gatepass.rejected":
        text = f"*Gate pass rejected* :x:\n*{student}*'s request was rejected."
        color = "#EF4444"
    else:  # gatepass.redeemed
        text = f"*Student left campus* :door:\n*{student}* passed the gate checkpoint."
        color = "#3B82F6"

    slack_payload = {
        "attachments": [{
            "color": color,
            "text": text,
            "footer": f"GatePass | {ts}",
        }]
    }
    return json.dumps(slack_payload).encode()


def send_webhook(event_type: str, payload: Dict[str, Any]) -> None:
    """
    Send a webhook notification for a gate pass event (non-blocking).

    Supported event types:
      - ``gatepass.applied``   - a student applied; the approver should review it
      - ``gatepass.approved``  - the approver approved the pass
      - ``gatepass.rejected``  - the approver rejected the pass
      - ``gatepass.redeemed``  - the checkpoint admitted the student (guardian notice)

    Configuration (.env):
      - ``WEBHOOK_URL``    - destination URL; Slack incoming webhooks are auto-detected
                             and formatted with Slack's attachment format automatically.
      - ``WEBHOOK_SECRET`` - if set, adds ``X-GatePass-Signature: sha256=<hex>`` header
                             so the receiver can verify authenticity.

    Payloads must never carry the redemption token. The call returns
    immediately; delivery happens in a daemon thread.
    """
    url = settings.WEBHOOK_URL
    if not url:
        return

    if "hooks.slack.com" in url:
        body = _slack_body(event_type, payload)
        headers: Dict[str, str] = {"Content-Type": "application/json"}
    else:
        body_dict: Dict[str, Any] = {
            "event": event_type,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **payload,
        }
        body = json.dumps(body_dict, default=str).encode()
        headers = {"Content-Type": "application/json"}

        if settings.WEBHOOK_SECRET:
            sig = hmac.new(
                settings.WEBHOOK_SECRET.encode(), body, hashlib.sha256
            ).hexdigest()
            headers["X-GatePass-Signature"] = f"sha256={sig}"

    headers["X-GatePass-Event"] = event_type
    threading.Thread(target=_deliver, args=(url, body, headers), daemon=True).start()
