"""
Role-gated access control.

Routes declare who may call them with a RoleRequirement:

    @router.get("/scoreboard")
    def scoreboard(user: User = Depends(require_role(OneOf.of(Role.INTERVIEWER)))):
        ...

The dependency validates the bearer token, resolves the user against the
identity store and checks the role. Every authentication failure answers
401 "Not authenticated"; the distinct reason only goes to the log.
"""

import logging
from dataclasses import dataclass
from typing import Callable, FrozenSet, Optional, Union

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from config.settings import settings
from models.user import Role, User
from services.auth_service import AuthService, TokenError
from utils.database import get_db

logger = logging.getLogger(__name__)

# Bearer token security scheme for OpenAPI/Swagger; missing headers are handled below
bearer_scheme = HTTPBearer(auto_error=False)

NOT_AUTHENTICATED = "Not authenticated"
FORBIDDEN = "Forbidden: insufficient role"


@dataclass(frozen=True)
class AnyAuthenticated:
    """Any user with a valid session."""

    def allows(self, role: str) -> bool:
        return True


@dataclass(frozen=True)
class OneOf:
    """Only users whose role is in the set."""
    roles: FrozenSet[Role]

    @classmethod
    def of(cls, *roles: Role) -> "OneOf":
        return cls(frozenset(roles))

    def allows(self, role: str) -> bool:
        return role in {r.value for r in self.roles}


RoleRequirement = Union[AnyAuthenticated, OneOf]


def _unauthenticated(reason: str) -> HTTPException:
    logger.info("Authentication rejected: %s", reason)
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=NOT_AUTHENTICATED,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    return AuthService(db, settings)


def require_role(requirement: RoleRequirement) -> Callable[..., User]:
    """
    Build a dependency that returns the authenticated User meeting the requirement.

    Raises:
        HTTPException 401: missing header, malformed or expired token, unknown user
        HTTPException 403: authenticated but the role is not allowed
    """

    def dependency(
        credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
        auth_service: AuthService = Depends(get_auth_service),
    ) -> User:
        if credentials is None or not credentials.credentials:
            raise _unauthenticated("missing bearer token")

        try:
            claims = auth_service.decode_token(credentials.credentials)
        except TokenError as e:
            raise _unauthenticated(f"{e.reason} token")

        user = auth_service.get_user(claims["sub"])
        if user is None:
            raise _unauthenticated(f"unknown user {claims['sub']}")

        if not requirement.allows(user.role):
            logger.warning("User %s with role %s denied (%s)", user.id, user.role, requirement)
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=FORBIDDEN)

        return user

    return dependency


# Shared instances used by the routers
any_user = require_role(AnyAuthenticated())
candidate_only = require_role(OneOf.of(Role.CANDIDATE))
interviewer_only = require_role(OneOf.of(Role.INTERVIEWER))
