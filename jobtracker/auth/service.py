"""
JobTracker - Authentication Service

Core authentication logic: password hashing, user creation, credential
checks and OAuth user linking. Issuing and resolving credentials is the job
of the configured verifier (see verifiers.py).

Features:
- Bcrypt password hashing
- User creation and authentication
- OAuth user linking with stored provider tokens
"""
from datetime import datetime
from typing import List, Optional
import logging

from passlib.context import CryptContext
from sqlalchemy.orm import Session

from ..config import AuthSettings
from ..errors import AuthenticationError, ValidationError
from .models import User, OAuthAccount

logger = logging.getLogger("jobtracker.auth")


class AuthService:
    """
    Authentication service for user management.

    Provides:
    - Password hashing with bcrypt
    - User creation and authentication
    - OAuth account linking
    """

    def __init__(self, settings: AuthSettings):
        """Initialize auth service with password context."""
        self.settings = settings
        self._pwd_context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=settings.bcrypt_rounds,
        )

    # -------------------------------------------------------------------------
    # Password Hashing
    # -------------------------------------------------------------------------

    def hash_password(self, password: str) -> str:
        """Hash a password using bcrypt."""
        return self._pwd_context.hash(password)

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash.

        Returns:
            True if password matches, False otherwise (including malformed hashes)
        """
        try:
            return self._pwd_context.verify(plain_password, hashed_password)
        except ValueError as e:
            logger.error(f"Password verification failed: {e}")
            return False

    def check_password(self, password: str) -> List[str]:
        """Return the list of problems with a candidate password (empty if acceptable)."""
        errors = []
        if len(password) < self.settings.min_password_length:
            errors.append(
                f"password: Password must be at least {self.settings.min_password_length} characters long"
            )
        # bcrypt only looks at the first 72 bytes
        if len(password.encode("utf-8")) > 72:
            errors.append("password: Password must be at most 72 bytes long")
        return errors

    # -------------------------------------------------------------------------
    # User Management
    # -------------------------------------------------------------------------

    def create_user(
        self,
        email: str,
        password: str,
        name: Optional[str],
        db: Session
    ) -> User:
        """
        Create a new user with email/password.

        Raises:
            ValidationError: If the email is taken or the password is too weak
        """
        errors = self.check_password(password)
        if self.get_user_by_email(email, db):
            errors.insert(0, "email: An account with this email already exists")
        if errors:
            raise ValidationError(errors)

        user = User(
            email=email,
            hashed_password=self.hash_password(password),
            name=name,
            is_active=True,
        )
        db.add(user)
        db.commit()
        db.refresh(user)

        logger.info(f"Created new user: {user.id} ({email})")
        return user

    def authenticate_user(
        self,
        email: str,
        password: str,
        db: Session
    ) -> Optional[User]:
        """
        Authenticate a user by email and password.

        Returns:
            User if credentials valid, None otherwise
        """
        user = self.get_user_by_email(email, db)

        if not user:
            logger.debug(f"User not found: {email}")
            return None

        if not user.hashed_password:
            logger.debug(f"User {email} is OAuth-only (no password)")
            return None

        if not self.verify_password(password, user.hashed_password):
            logger.debug(f"Invalid password for user: {email}")
            return None

        if not user.is_active:
            logger.warning(f"Inactive user attempted login: {email}")
            return None

        logger.info(f"User authenticated: {user.id} ({email})")
        return user

    def get_user_by_id(self, user_id: int, db: Session) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    def get_user_by_email(self, email: str, db: Session) -> Optional[User]:
        return db.query(User).filter(User.email == email).first()

    # -------------------------------------------------------------------------
    # OAuth Support
    # -------------------------------------------------------------------------

    def get_or_create_oauth_user(
        self,
        email: str,
        name: Optional[str],
        provider: str,
        provider_user_id: str,
        access_token: Optional[str],
        expires_at: Optional[datetime],
        db: Session,
        email_verified: bool = False
    ) -> User:
        """
        Get or create a user from OAuth login.

        If the provider identity is already linked, its stored token is
        refreshed. Otherwise the identity is linked to the user with the same
        email, creating that user (without a password) if needed.

        Raises:
            AuthenticationError: an account with this email exists but the
                provider has not verified that the caller owns the address
        """
        existing_oauth = db.query(OAuthAccount).filter(
            OAuthAccount.provider == provider,
            OAuthAccount.provider_user_id == provider_user_id
        ).first()

        if existing_oauth:
            if access_token:
                existing_oauth.access_token = access_token
                existing_oauth.expires_at = expires_at
                db.commit()
            logger.debug(f"OAuth login for existing user {existing_oauth.user_id}")
            return existing_oauth.user

        user = self.get_user_by_email(email, db)

        if user and not email_verified:
            logger.warning(f"Refused to link unverified {provider} email to existing user {user.id}")
            raise AuthenticationError(
                f"An account with this email already exists and {provider} has not verified "
                "the address. Sign in with your password instead."
            )

        if not user:
            user = User(email=email, name=name, is_active=True)
            db.add(user)
            db.commit()
            db.refresh(user)
            logger.info(f"Created new OAuth user: {user.id} ({email})")

        oauth_account = OAuthAccount(
            user_id=user.id,
            provider=provider,
            provider_user_id=provider_user_id,
            access_token=access_token,
            expires_at=expires_at,
        )
        db.add(oauth_account)
        db.commit()

        logger.info(f"Linked {provider} OAuth account to user {user.id}")
        return user

    def get_provider_token(self, user: User, provider: str, db: Session) -> Optional[str]:
        """Return the stored, unexpired provider access token for a user, if any."""
        account = db.query(OAuthAccount).filter(
            OAuthAccount.user_id == user.id,
            OAuthAccount.provider == provider
        ).first()

        if not account or not account.access_token:
            return None
        if account.expires_at and account.expires_at <= datetime.utcnow():
            logger.debug(f"{provider} token for user {user.id} has expired")
            return None
        return account.access_token
