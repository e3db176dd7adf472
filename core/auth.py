from abc import ABC, abstractmethod
from dataclasses import dataclass

from fastapi import HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from utils.state import State


@dataclass(frozen=True)
class Identity:
    uid: str
    email: str | None = None
    anonymous: bool = False


ANONYMOUS_IDENTITY = Identity(uid="user123", email="user@example.com", anonymous=True)


class IdentityResolver(ABC):
    """Turns an (optional) bearer token into the caller's identity."""

    @abstractmethod
    def resolve(self, token: str | None, optional: bool = False) -> Identity:
        pass


class AnonymousIdentityResolver(IdentityResolver):
    """Every caller is the same fixed user. Local development only."""

    def __init__(self, identity: Identity = ANONYMOUS_IDENTITY):
        self.identity = identity

    def resolve(self, token: str | None, optional: bool = False) -> Identity:
        return self.identity


class JWTIdentityResolver(IdentityResolver):
    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        fallback: Identity = ANONYMOUS_IDENTITY,
    ):
        if not secret_key:
            raise ValueError("JWT_SECRET_KEY is required when AUTH_MODE=jwt")
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.fallback = fallback

    def resolve(self, token: str | None, optional: bool = False) -> Identity:
        if not token:
            if optional:
                return self.fallback
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated"
            )
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            State.logger.error("Invalid or expired token")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid token or expired token.",
            )
        subject = payload.get("sub")
        if isinstance(subject, dict):
            subject = subject.get("user_id") or subject.get("uid")
        if not subject:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED, detail="Token has no subject."
            )
        return Identity(uid=str(subject), email=payload.get("email"))


class IdentityBearer(HTTPBearer):
    """Resolves the caller through the resolver attached to the app.

    ``optional=True`` lets the resolver fall back to an anonymous identity
    when no token is sent.
    """

    def __init__(self, optional: bool = False):
        super(IdentityBearer, self).__init__(auto_error=False)
        self.optional = optional

    async def __call__(self, request: Request) -> Identity:
        credentials: HTTPAuthorizationCredentials | None = await super(
            IdentityBearer, self
        ).__call__(request)
        if credentials and credentials.scheme.lower() != "bearer":
            raise HTTPException(status_code=403, detail="Invalid authentication scheme.")
        token = credentials.credentials if credentials else None
        resolver: IdentityResolver = request.app.state.identity_resolver
        return resolver.resolve(token, optional=self.optional)


verify_token = IdentityBearer()
optional_verify_token = IdentityBearer(optional=True)


def build_identity_resolver(settings) -> IdentityResolver:
    if settings.AUTH_MODE == "jwt":
        return JWTIdentityResolver(settings.JWT_SECRET_KEY, settings.JWT_ALGORITHM)
    if settings.AUTH_MODE == "anonymous":
        return AnonymousIdentityResolver()
    raise ValueError(f"Unknown AUTH_MODE: {settings.AUTH_MODE}")
