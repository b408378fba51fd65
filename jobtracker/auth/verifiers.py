"""
JobTracker - Credential Verifiers

One verifier is built at startup from JOBTRACKER_AUTH_STRATEGY and used for
every request. A verifier knows how to:

    issue(user, db, response)   - hand the client a credential after login
    resolve(request, db)        - recover the user from an incoming request
    revoke(request, db, response) - invalidate the credential on logout

Strategies:
    bearer  - JWT signed with the app secret, sent as "Authorization: Bearer <token>"
    session - random session id stored in user_sessions, sent back in a signed cookie
"""
from datetime import datetime, timedelta
from typing import Optional, Tuple
import logging
import secrets

from fastapi import Request, Response
from fastapi.security.utils import get_authorization_scheme_param
from itsdangerous import URLSafeTimedSerializer, BadSignature
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from ..config import AuthSettings
from .models import User, UserSession
from .schemas import Token, TokenData

logger = logging.getLogger("jobtracker.auth")


class CredentialVerifier:
    """Interface shared by all credential strategies."""

    name = "base"

    def __init__(self, settings: AuthSettings):
        self.settings = settings

    def issue(self, user: User, db: Session, response: Response) -> Optional[Token]:
        raise NotImplementedError

    def resolve(self, request: Request, db: Session) -> Optional[User]:
        raise NotImplementedError

    def revoke(self, request: Request, db: Session, response: Response) -> None:
        raise NotImplementedError

    @property
    def challenge_headers(self) -> Optional[dict]:
        """Headers attached to 401 responses."""
        return None


# -----------------------------------------------------------------------------
# Bearer Tokens (JWT)
# -----------------------------------------------------------------------------

class BearerTokenVerifier(CredentialVerifier):
    """Stateless signed tokens carrying the user's id, email and name."""

    name = "bearer"

    def create_access_token(
        self,
        user: User,
        expires_delta: Optional[timedelta] = None
    ) -> Tuple[str, datetime]:
        """
        Create a JWT access token.

        Returns:
            Tuple of (token_string, expiration_datetime)
        """
        now = datetime.utcnow()
        expire = now + (expires_delta or timedelta(minutes=self.settings.access_token_expire_minutes))

        payload = {
            "sub": str(user.id),
            "email": user.email,
            "name": user.name,
            "exp": expire,
            "iat": now,
        }

        token = jwt.encode(payload, self.settings.secret_key, algorithm=self.settings.algorithm)
        logger.debug(f"Created access token for user {user.id}")
        return token, expire

    def verify_access_token(self, token: str) -> Optional[TokenData]:
        """
        Verify signature and expiry of an access token.

        Returns:
            TokenData if valid, None if invalid/expired
        """
        try:
            payload = jwt.decode(token, self.settings.secret_key, algorithms=[self.settings.algorithm])
        except JWTError as e:
            logger.debug(f"Token verification failed: {e}")
            return None

        user_id = payload.get("sub")
        email = payload.get("email")
        if not user_id or not email:
            logger.warning("Token missing required claims")
            return None

        try:
            return TokenData(
                user_id=int(user_id),
                email=email,
                name=payload.get("name"),
                exp=datetime.utcfromtimestamp(payload["exp"]),
            )
        except (KeyError, ValueError) as e:
            logger.warning(f"Token has malformed claims: {e}")
            return None

    def issue(self, user: User, db: Session, response: Response) -> Token:
        access_token, _ = self.create_access_token(user)
        return Token(
            access_token=access_token,
            expires_in=self.settings.access_token_expire_minutes * 60,
        )

    def resolve(self, request: Request, db: Session) -> Optional[User]:
        scheme, token = get_authorization_scheme_param(request.headers.get("Authorization"))
        if not token or scheme.lower() != "bearer":
            return None

        token_data = self.verify_access_token(token)
        if not token_data:
            return None

        user = db.query(User).filter(User.id == token_data.user_id).first()
        if not user:
            logger.warning(f"Token valid but user {token_data.user_id} not found")
        return user

    def revoke(self, request: Request, db: Session, response: Response) -> None:
        # Tokens are stateless; the client discards its copy.
        return None

    @property
    def challenge_headers(self) -> Optional[dict]:
        return {"WWW-Authenticate": "Bearer"}


# -----------------------------------------------------------------------------
# Server-side Sessions
# -----------------------------------------------------------------------------

class SessionVerifier(CredentialVerifier):
    """Session ids persisted in user_sessions and carried in a signed cookie."""

    name = "session"
    SALT = "session-cookie"

    def __init__(self, settings: AuthSettings):
        super().__init__(settings)
        self._serializer = URLSafeTimedSerializer(settings.secret_key, salt=self.SALT)

    @property
    def max_age(self) -> int:
        return self.settings.session_expire_days * 86400

    def issue(self, user: User, db: Session, response: Response) -> None:
        session = UserSession(
            id=secrets.token_urlsafe(32),
            user_id=user.id,
            expires_at=datetime.utcnow() + timedelta(seconds=self.max_age),
        )
        db.add(session)
        db.commit()

        response.set_cookie(
            key=self.settings.session_cookie_name,
            value=self._serializer.dumps(session.id),
            max_age=self.max_age,
            httponly=True,
            secure=self.settings.session_cookie_secure,
            samesite="lax",
        )
        logger.debug(f"Created session for user {user.id}")
        return None

    def _load_session(self, request: Request, db: Session) -> Optional[UserSession]:
        cookie = request.cookies.get(self.settings.session_cookie_name)
        if not cookie:
            return None

        try:
            session_id = self._serializer.loads(cookie, max_age=self.max_age)
        except BadSignature:
            logger.debug("Rejected session cookie with bad or expired signature")
            return None

        return db.query(UserSession).filter(UserSession.id == session_id).first()

    def resolve(self, request: Request, db: Session) -> Optional[User]:
        session = self._load_session(request, db)
        if not session:
            return None

        if session.expires_at <= datetime.utcnow():
            user_id = session.user_id
            db.delete(session)
            db.commit()
            logger.debug(f"Expired session removed for user {user_id}")
            return None

        return session.user

    def revoke(self, request: Request, db: Session, response: Response) -> None:
        session = self._load_session(request, db)
        if session:
            user_id = session.user_id
            db.delete(session)
            db.commit()
            logger.debug(f"Revoked session for user {user_id}")

        response.delete_cookie(self.settings.session_cookie_name)

    def cleanup_expired_sessions(self, db: Session) -> int:
        """Delete expired sessions from the store."""
        count = db.query(UserSession).filter(
            UserSession.expires_at < datetime.utcnow()
        ).delete()
        db.commit()
        logger.info(f"Cleaned up {count} expired sessions")
        return count


VERIFIERS = {
    BearerTokenVerifier.name: BearerTokenVerifier,
    SessionVerifier.name: SessionVerifier,
}


def build_verifier(settings: AuthSettings) -> CredentialVerifier:
    """Build the single verifier for this deployment."""
    try:
        verifier_cls = VERIFIERS[settings.auth_strategy]
    except KeyError:
        raise ValueError(f"Unknown auth strategy: {settings.auth_strategy!r}")
    logger.info(f"Using '{verifier_cls.name}' credential strategy")
    return verifier_cls(settings)
