"""
API dependencies.

Provides dependency injection for services and the authorization gates:
authenticate_any, authenticate_staff_only, authenticate_user_only and the
role guards require_role / require_any_role.
"""

import logging
from typing import Optional, Annotated, Iterable
from dataclasses import dataclass

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from food_delivery.config import load_config, Config
from food_delivery.auth import (
    JWTHandler,
    TokenKind,
    PasswordHandler,
    UserStore,
    StaffStore,
    OTPLedger,
    Principal,
    principal_from_payload,
    has_any_role,
    role_set,
)
from food_delivery.auth.roles import RoleLike
from food_delivery.errors import ForbiddenError, TokenError, UnauthorizedError
from food_delivery.services import (
    SMSService,
    AuthService,
    StaffService,
    ProfileService,
)

logger = logging.getLogger(__name__)

# Security scheme
security = HTTPBearer(auto_error=False)


@dataclass
class Services:
    """Container for all services."""
    config: Config
    jwt: JWTHandler
    passwords: PasswordHandler
    users: UserStore
    staff: StaffStore
    otps: OTPLedger
    sms: SMSService
    auth: AuthService
    staff_admin: StaffService
    profiles: ProfileService


def build_services(config: Optional[Config] = None) -> Services:
    """
    Wire every store and service from a configuration.

    Args:
        config: Configuration (loads from env if not provided)
    """
    config = config or load_config()

    passwords = PasswordHandler(rounds=config.security.bcrypt_rounds)
    jwt = JWTHandler(config.tokens)
    users = UserStore(config.data_dir / "users.json", passwords)
    staff = StaffStore(config.data_dir / "staff.json", passwords)
    otps = OTPLedger(
        config.data_dir / "otps.json",
        length=config.otp.length,
        ttl_minutes=config.otp.ttl_minutes
    )
    sms = SMSService(config.sms, log_codes=not config.is_production)

    auth = AuthService(
        jwt,
        users,
        staff,
        otps,
        sms,
        password_handler=passwords,
        password_min_length=config.security.password_min_length
    )

    return Services(
        config=config,
        jwt=jwt,
        passwords=passwords,
        users=users,
        staff=staff,
        otps=otps,
        sms=sms,
        auth=auth,
        staff_admin=StaffService(staff),
        profiles=ProfileService(users)
    )


# Global services instance (singleton)
_services: Optional[Services] = None


def get_services() -> Services:
    """
    Get or create the services singleton.

    Validates the configuration on first call, so a production deployment
    without explicit secrets fails at startup.
    """
    global _services

    if _services is None:
        logger.info("Initializing services...")

        config = load_config()
        config.validate()
        _services = build_services(config)

        logger.info(f"Services initialized (environment: {config.environment})")

    return _services


def close_services():
    """Drop the services singleton."""
    global _services
    if _services:
        _services = None
        logger.info("Services closed")


# Dependency for getting services
def services_dep() -> Services:
    """FastAPI dependency for services."""
    return get_services()


ServicesDep = Annotated[Services, Depends(services_dep)]


# Authentication dependencies

async def authenticate_any(
    request: Request,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    services: ServicesDep
) -> Principal:
    """
    Authenticate a customer or staff member from the bearer token.

    Attaches the principal (and user_id or staff_id/role) to request.state.
    Signature and expiry failures share one message.
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Authentication required")

    try:
        payload = services.jwt.verify(credentials.credentials, TokenKind.ACCESS)
    except TokenError:
        raise UnauthorizedError("Invalid or expired token")

    principal = principal_from_payload(payload)

    request.state.principal = principal
    if principal.is_staff:
        request.state.staff_id = principal.staff_id
        request.state.role = principal.role
    else:
        request.state.user_id = principal.user_id

    return principal


async def authenticate_staff_only(
    principal: Annotated[Principal, Depends(authenticate_any)]
) -> Principal:
    """Like authenticate_any, but only staff tokens pass."""
    if not principal.is_staff:
        raise ForbiddenError("Staff access required")
    return principal


async def authenticate_user_only(
    principal: Annotated[Principal, Depends(authenticate_any)]
) -> Principal:
    """Like authenticate_any, but only customer tokens pass."""
    if not principal.is_user:
        raise ForbiddenError("User authentication required")
    return principal


def require_any_role(roles: Iterable[RoleLike]):
    """
    Build a guard that admits staff holding one of `roles`.

    Role names are checked here, when the route is declared.
    """
    allowed = role_set(roles)

    async def role_guard(
        principal: Annotated[Principal, Depends(authenticate_staff_only)]
    ) -> Principal:
        if not has_any_role(principal.role, allowed):
            logger.warning(
                f"Staff {principal.staff_id} ({principal.role.value}) denied, "
                f"needs one of {sorted(r.value for r in allowed)}"
            )
            raise ForbiddenError("Access denied - insufficient permissions")
        return principal

    return role_guard


def require_role(role: RoleLike):
    """Guard for a single role."""
    return require_any_role([role])


# Type aliases for dependencies
CurrentPrincipal = Annotated[Principal, Depends(authenticate_any)]
CurrentStaff = Annotated[Principal, Depends(authenticate_staff_only)]
CurrentUser = Annotated[Principal, Depends(authenticate_user_only)]
