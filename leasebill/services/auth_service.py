"""Authorization for billing endpoints.

Two callers are accepted:
- The scheduler, presenting the shared secret in X-Scheduler-Secret
- A signed-in user, presenting "Authorization: Bearer <jwt>" whose claims
  bind them to exactly one organization

The decision is made once per request and returned as a BillingScope.
"""

import hmac
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from leasebill.config import Settings
from leasebill.services.billing_service import BillingScope, OrganizationScope, SchedulerScope
from leasebill.services.errors import UnauthorizedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthContext:
    """Identity carried by a verified user token."""

    user_id: int
    organization_id: int


def verify_scheduler_secret(provided: str | None, expected: str | None) -> bool:
    """Constant-time comparison; an unconfigured secret never matches."""
    if not provided or not expected:
        return False
    return hmac.compare_digest(provided.encode(), expected.encode())


def _extract_bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def create_access_token(
    user_id: int,
    organization_id: int,
    settings: Settings,
    expires_in: timedelta = timedelta(days=7),
) -> str:
    """Issue a user token for the given organization."""
    now = datetime.now(timezone.utc)
    payload = {
        "userId": user_id,
        "organizationId": organization_id,
        "iat": now,
        "exp": now + expires_in,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_user_token(authorization: str | None, settings: Settings) -> AuthContext:
    """Verify a bearer token and extract the caller's organization.

    Args:
        authorization: Authorization header value
        settings: Application settings (JWT key and algorithm)

    Returns:
        AuthContext of the caller

    Raises:
        UnauthorizedError: Missing, malformed, expired or unscoped token
    """
    token = _extract_bearer_token(authorization)
    if not token:
        raise UnauthorizedError("Missing authorization header.")

    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError as e:
        logger.warning("Rejected user token: %s", e)
        raise UnauthorizedError("Invalid or expired token.") from e

    try:
        return AuthContext(
            user_id=int(payload["userId"]),
            organization_id=int(payload["organizationId"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        logger.warning("User token without organization claims")
        raise UnauthorizedError("Invalid or expired token.") from e


def resolve_billing_scope(
    scheduler_secret: str | None,
    authorization: str | None,
    settings: Settings,
) -> BillingScope:
    """Decide which organizations a billing request may touch.

    Priority:
    1) Matching scheduler secret -> every organization
    2) Valid user token -> the token's organization
    3) Otherwise -> UnauthorizedError

    Raises:
        UnauthorizedError: Neither credential is valid
    """
    if verify_scheduler_secret(scheduler_secret, settings.scheduler_secret):
        return SchedulerScope()

    if scheduler_secret:
        logger.warning("Scheduler secret mismatch; falling back to user authentication")

    if _extract_bearer_token(authorization):
        context = verify_user_token(authorization, settings)
        return OrganizationScope(organization_id=context.organization_id)

    raise UnauthorizedError("Missing auth context or invalid scheduler secret.")


__all__ = [
    "AuthContext",
    "create_access_token",
    "resolve_billing_scope",
    "verify_scheduler_secret",
    "verify_user_token",
]
