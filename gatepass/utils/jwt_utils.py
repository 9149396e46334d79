"""JWT utilities - RS256 keypair management, token signing and verification.

Identities are issued by the campus identity service; this module only needs
to verify what it presents. Signing is kept for that service's shared key
setup and for tests.
"""
import uuid
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import HTTPException, status
from jose import JWTError, jwt

from gatepass.config import settings
from gatepass.utils.logger import logger

# ---------------------------------------------------------------------------
# Keypair management
# ---------------------------------------------------------------------------

_private_key: Any = None   # cryptography RSAPrivateKey object
_public_key: Any = None    # cryptography RSAPublicKey object


def _load_keypair() -> None:
    """Load or auto-generate the RSA keypair.

    Reads JWT_PRIVATE_KEY from settings (PEM string).
    If absent, generates a fresh RSA-2048 keypair for this process; tokens
    signed with it stop verifying after a restart.
    """
    global _private_key, _public_key

    from cryptography.hazmat.primitives import serialization
    from cryptography.hazmat.primitives.asymmetric import rsa

    if settings.JWT_PRIVATE_KEY:
        pem = settings.JWT_PRIVATE_KEY.encode()
        _private_key = serialization.load_pem_private_key(pem, password=None)
        _public_key = _private_key.public_key()
        logger.info("JWT keypair loaded from JWT_PRIVATE_KEY setting")
    else:
        _private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        _public_key = _private_key.public_key()
        logger.warning(
            "JWT_PRIVATE_KEY not set; auto-generated RSA-2048 keypair for this session. "
            "All tokens will be invalidated on restart."
        )


def get_private_key() -> Any:
    """Return the loaded private key, initialising on first call."""
    if _private_key is None:
        _load_keypair()
    return _private_key


def get_public_key() -> Any:
    """Return the loaded public key, initialising on first call."""
    if _public_key is None:
        _load_keypair()
    return _public_key


# ---------------------------------------------------------------------------
# Token creation
# ---------------------------------------------------------------------------

def create_access_token(subject: str, role: str) -> str:
    """Sign and return a JWT access token.

    Args:
        subject: Value for the 'sub' claim (the user id).
        role:    Value for the 'role' claim (STUDENT, APPROVER, CHECKPOINT, ADMIN).

    Returns:
        Signed JWT string.
    """
    now = int(datetime.now(timezone.utc).timestamp())

    payload: Dict[str, Any] = {
        "sub": subject,
        "role": role,
        "jti": str(uuid.uuid4()),
        "iat": now,
        "exp": now + settings.JWT_EXPIRE_SECONDS,
    }

    headers = {"kid": settings.JWT_KEY_ID} if settings.JWT_KEY_ID else None

    return jwt.encode(
        payload,
        get_private_key(),
        algorithm=settings.JWT_ALGORITHM,
        headers=headers,
    )


# ---------------------------------------------------------------------------
# Token verification
# ---------------------------------------------------------------------------

def decode_access_token(token: str) -> Dict[str, Any]:
    """Verify a JWT and return its payload.

    Raises:
        HTTPException 401: bad signature, expired, or missing 'sub'.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(
            token,
            get_public_key(),
            algorithms=[settings.JWT_ALGORITHM],
        )
    except JWTError as exc:
        logger.debug(f"JWT decode failed: {exc}")
        raise credentials_exception

    if not payload.get("sub"):
        raise credentials_exception

    return payload
