"""Lightweight JWT verification middleware.

Rejects malformed or revoked bearer tokens before routing and attaches the
decoded payload to ``request.state.auth``. Route dependencies
(``get_current_user``) still enforce authentication and roles.
"""
from starlette.requests import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse
from hercycle.core.security import decode_token
from hercycle.core.database import SessionLocal
from hercycle.models.session import UserSession


def _unauthorized(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content={"success": False, "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


class JWTMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        auth_header = request.headers.get("authorization")
        if not auth_header:
            return await call_next(request)

        scheme, _, token = auth_header.partition(" ")
        if scheme.lower() != "bearer" or not token:
            return _unauthorized("Invalid authorization header")

        payload = decode_token(token)
        if not payload:
            return _unauthorized("Invalid token")

        jti = payload.get("jti")
        user_id = payload.get("sub")
        if not jti or not user_id or not str(user_id).isdigit():
            return _unauthorized("Invalid token payload")

        db = SessionLocal()
        try:
            session = db.query(UserSession).filter(
                UserSession.user_id == int(user_id),
                UserSession.token_jti == jti,
                UserSession.is_revoked == False,
            ).first()
            revoked = session is None
            expired = session is not None and session.access_expired()
        finally:
            db.close()

        if revoked:
            return _unauthorized("Token revoked or invalid")
        if expired:
            return _unauthorized("Token expired")

        request.state.auth = payload
        return await call_next(request)
