"""API dependencies for authentication and authorization.

Every dependency accepts EITHER
  - Authorization: Bearer <JWT>   (issued by the campus identity service)
  - X-Admin-Key                   (static administrator key)

JWT path is checked first; the admin key is used if no Bearer token is present.

Roles
-----
Roles are a closed set (:class:`~gatepass.models.user.Role`). There is no
hierarchy: each route names the roles it accepts, and UNASSIGNED is never
accepted anywhere.
"""
from typing import Callable, NamedTuple, Optional

from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from gatepass.config import settings
from gatepass.database import get_db
from gatepass.middleware.monitoring import record_auth_failure
from gatepass.models.user import Role
from gatepass.services.directory import Directory
from gatepass.services.lifecycle import LifecycleController
from gatepass.services.redemption import RedemptionGate
from gatepass.services.store import GatePassStore
from gatepass.utils.jwt_utils import decode_access_token

_bearer_scheme = HTTPBearer(auto_error=False)


class Actor(NamedTuple):
    """Authenticated caller, passed explicitly into the service layer."""
    sub: str      # user id, or "admin" for the static admin key
    role: Role


def _resolve_actor(
    credentials: Optional[HTTPAuthorizationCredentials],
    x_admin_key: Optional[str],
) -> Actor:
    """Extract the Actor from a JWT or the admin header. Raises 401/403 on failure."""
    if credentials:
        try:
            payload = decode_access_token(credentials.credentials)
        except HTTPException:
            record_auth_failure("bearer")
            raise
        return Actor(sub=payload["sub"], role=Role.parse(payload.get("role")))

    if x_admin_key:
        if x_admin_key == settings.ADMIN_API_KEY:
            return Actor(sub="admin", role=Role.ADMIN)
        record_auth_failure("admin_key")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid admin key",
        )

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Authentication required. Provide Authorization: Bearer <token> or X-Admin-Key header.",
    )


def require_role(*roles: Role) -> Callable:
    """Return a FastAPI dependency that admits only the given roles.

    Usage::

        @router.post("/apply")
        def endpoint(actor: Actor = Depends(require_role(Role.STUDENT))):
            ...

    The resolved actor is also stored on ``request.state.actor`` so the rate
    limiter can key on it.
    """
    allowed = frozenset(roles)

    def _role_dep(
        request: Request,
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
        x_admin_key: Optional[str] = Header(None),
    ) -> Actor:
        actor = _resolve_actor(credentials, x_admin_key)
        if actor.role not in allowed:
            record_auth_failure("role")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role {' or '.join(sorted(r.value for r in allowed))} required (your role: '{actor.role.value}')",
            )
        request.state.actor = actor
        return actor

    # Give FastAPI a unique name so it doesn't collapse distinct dependencies
    _role_dep.__name__ = "require_role_" + "_".join(sorted(r.value.lower() for r in allowed))
    return _role_dep


# ---------------------------------------------------------------------------
# Service wiring
# ---------------------------------------------------------------------------

def get_store(db: Session = Depends(get_db)) -> GatePassStore:
    return GatePassStore(db)


def get_directory(db: Session = Depends(get_db)) -> Directory:
    return Directory(db)


def get_lifecycle(
    store: GatePassStore = Depends(get_store),
    directory: Directory = Depends(get_directory),
) -> LifecycleController:
    return LifecycleController(store, directory)


def get_redemption_gate(store: GatePassStore = Depends(get_store)) -> RedemptionGate:
    return RedemptionGate(store)
