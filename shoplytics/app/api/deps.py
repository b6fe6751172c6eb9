"""Request dependencies: identity, role checks, the terminal's checkout session.

Usage in endpoints::

    @router.get("")
    async def view_cart(
        session: CheckoutSession = Depends(get_checkout_session),
        _user: TokenUser = Depends(require_role(*settings.POS_ROLES)),
    ):
        ...
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from shoplytics.app.core.security import InvalidTokenError, TokenUser, decode_access_token, has_role
from shoplytics.app.services.backend_client import BackendClient
from shoplytics.app.services.checkout import CheckoutSession

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")

# One cart per terminal process
_session = CheckoutSession()


def get_token(token: str = Depends(oauth2_scheme)) -> str:
    return token


def get_current_user(token: str = Depends(get_token)) -> TokenUser:
    try:
        return decode_access_token(token)
    except InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )


def require_role(*roles: str):
    """FastAPI dependency factory: the user must hold **one** of ``roles``."""

    def _checker(current_user: TokenUser = Depends(get_current_user)) -> TokenUser:
        if not has_role(current_user, roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires one of: {', '.join(roles)}",
            )
        return current_user

    return _checker


def get_checkout_session() -> CheckoutSession:
    return _session


def get_backend_client(token: str = Depends(get_token)) -> BackendClient:
    """Backend client acting with the cashier's own token."""
    return BackendClient(token=token)
