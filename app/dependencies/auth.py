import logging
from typing import Annotated, Any

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import PyJWKClient

from app.config import Settings, get_settings
from app.schemas.auth import AuthUser

logger = logging.getLogger(__name__)

# Supabase signs access tokens with the project's asymmetric JWKS keys
ALLOWED_ALGORITHMS = ("RS256", "RS384", "RS512", "ES256", "ES384", "ES512")
TOKEN_AUDIENCE = "authenticated"

_bearer_scheme = HTTPBearer(auto_error=False)
_jwks_clients: dict[str, PyJWKClient] = {}


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _get_jwks_client(jwks_url: str) -> PyJWKClient:
    client = _jwks_clients.get(jwks_url)
    if client is None:
        logger.debug("Initializing JWKS client with URL: %s", jwks_url)
        client = _jwks_clients[jwks_url] = PyJWKClient(jwks_url)
    return client


def decode_access_token(token: str, settings: Settings) -> dict[str, Any]:
    """Verify a Supabase access token and return its claims.

    Raises:
        jwt.InvalidTokenError: If the token is malformed, expired, signed with
            a symmetric algorithm, or issued for another audience.
    """
    algorithm = jwt.get_unverified_header(token).get("alg")
    if algorithm not in ALLOWED_ALGORITHMS:
        raise jwt.InvalidTokenError(f"Algorithm {algorithm} not allowed")

    signing_key = _get_jwks_client(settings.supabase_jwks_url).get_signing_key_from_jwt(token)
    return jwt.decode(
        token,
        signing_key.key,
        algorithms=[algorithm],
        audience=TOKEN_AUDIENCE,
    )


async def get_current_user_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer_scheme)],
) -> str:
    """Get the raw bearer token from the request.

    Raises HTTPException 401 if no token is provided.
    """
    if credentials is None:
        logger.warning("Authentication failed: missing authorization header")
        raise _unauthorized("Missing authorization header")
    return credentials.credentials


CurrentUserToken = Annotated[str, Depends(get_current_user_token)]


async def get_current_user(
    token: CurrentUserToken,
    settings: Annotated[Settings, Depends(get_settings)],
) -> AuthUser:
    try:
        claims = decode_access_token(token, settings)
    except jwt.ExpiredSignatureError:
        logger.warning("Authentication failed: token expired")
        raise _unauthorized("Token has expired")
    except jwt.PyJWTError as e:
        logger.warning("Authentication failed: invalid token - %s", e)
        raise _unauthorized(f"Invalid token: {e}")

    user_id = claims.get("sub")
    if not user_id:
        logger.warning("Authentication failed: token has no subject")
        raise _unauthorized("Invalid token: missing subject")

    user = AuthUser(id=user_id, email=claims.get("email"), role=claims.get("role"))
    logger.debug("JWT validated successfully for user: %s", user.id)
    return user


CurrentUser = Annotated[AuthUser, Depends(get_current_user)]
