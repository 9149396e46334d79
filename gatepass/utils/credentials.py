"""Redemption credentials - single-use tokens and the references that carry them"""
import base64
import io
import secrets
from typing import NamedTuple, Optional
from urllib.parse import urlparse

import qrcode
from qrcode.image.svg import SvgPathImage

from gatepass.config import settings

SCAN_PATH = "/security/scan"


class RedemptionReference(NamedTuple):
    """What the checkpoint presents back verbatim: the pass id and its token"""
    pass_id: str
    token: str


def generate_token() -> str:
    """Generate an unguessable token from a fixed 36-symbol alphabet"""
    alphabet = settings.TOKEN_ALPHABET
    return "".join(secrets.choice(alphabet) for _ in range(settings.TOKEN_LENGTH))


def build_scan_url(reference: RedemptionReference, base_url: Optional[str] = None) -> str:
    """Build the checkpoint URL that embeds a redemption reference"""
    base = (base_url or settings.PUBLIC_BASE_URL).rstrip("/")
    return f"{base}{SCAN_PATH}/{reference.pass_id}/{reference.token}"


def parse_scan_url(url: str) -> RedemptionReference:
    """
    Recover the redemption reference from a scanned checkpoint URL

    Raises:
        ValueError: if the URL is not a scan URL
    """
    path = urlparse(url).path.rstrip("/")
    _, found, tail = path.rpartition(SCAN_PATH + "/")
    parts = tail.split("/")
    if not found or len(parts) != 2 or not all(parts):
        raise ValueError("Not a gate pass scan URL")
    return RedemptionReference(pass_id=parts[0], token=parts[1])


def render_qr_data_url(url: str) -> str:
    """Encode a scan URL as an SVG QR code data URL for the pass holder"""
    image = qrcode.make(url, image_factory=SvgPathImage)
    buffer = io.BytesIO()
    image.save(buffer)
    encoded = base64.b64encode(buffer.getvalue()).decode()
    return f"data:image/svg+xml;base64,{encoded}"
