import os
import threading
from typing import Any, Dict, Optional

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials
from firebase_admin.exceptions import FirebaseError
from fastapi import Depends, Request
from pydantic import BaseModel
from sqlalchemy.orm import Session

from finance4all.config import Settings
from finance4all.crud import crud_user
from finance4all.db.core import UserDB, UserRole, get_db
from finance4all.errors import UnauthenticatedError, ForbiddenError, NotFoundError
from finance4all.logging_config import get_logger


logger = get_logger(__name__)


# ===== CLAIMS =====

class Claims(BaseModel):
    """The verified identity attached to a request"""
    uid: str
    email: Optional[str] = None
    email_verified: bool = False
    role: UserRole = UserRole.USER

    @classmethod
    def from_token(cls, decoded: Dict[str, Any]) -> "Claims":
        role = decoded.get("role")
        try:
            role = UserRole(role) if role else UserRole.USER
        except ValueError:
            logger.warning("Ignoring unknown role claim %r for uid %s", role, decoded.get("uid"))
            role = UserRole.USER
        return cls(
            uid=decoded["uid"],
            email=decoded.get("email"),
            email_verified=bool(decoded.get("email_verified", False)),
            role=role,
        )


# ===== VERIFIERS =====

class InvalidTokenError(Exception):
    pass


class TokenVerifier:
    """Turns a bearer token into Claims or raises InvalidTokenError"""

    def verify(self, token: str) -> Claims:
        raise NotImplementedError


class FirebaseTokenVerifier(TokenVerifier):
    """
    Verifies Firebase ID tokens with the Admin SDK.

    Credentials come from the FIREBASE_* settings when a service account is
    configured, otherwise from application default credentials. The SDK app
    is initialized on first use so the service can boot without network
    access.
    """

    APP_NAME = "finance4all"

    def __init__(self, settings: Settings):
        self.settings = settings
        self._app: Optional[firebase_admin.App] = None
        self._lock = threading.Lock()

    def _get_app(self) -> firebase_admin.App:
        if self._app is not None:
            return self._app
        with self._lock:
            if self._app is None:
                self._app = self._initialize()
        return self._app

    def _initialize(self) -> firebase_admin.App:
        settings = self.settings
        if settings.FIREBASE_AUTH_EMULATOR_HOST:
            # The SDK reads the emulator host from the environment
            os.environ["FIREBASE_AUTH_EMULATOR_HOST"] = settings.FIREBASE_AUTH_EMULATOR_HOST
            logger.info("Using Firebase Auth emulator at %s", settings.FIREBASE_AUTH_EMULATOR_HOST)

        options = {"projectId": settings.FIREBASE_PROJECT_ID} if settings.FIREBASE_PROJECT_ID else None

        try:
            return firebase_admin.get_app(self.APP_NAME)
        except ValueError:
            pass

        if settings.FIREBASE_PRIVATE_KEY and settings.FIREBASE_CLIENT_EMAIL:
            cred = credentials.Certificate({
                "type": "service_account",
                "project_id": settings.FIREBASE_PROJECT_ID,
                "client_email": settings.FIREBASE_CLIENT_EMAIL,
                "private_key": settings.FIREBASE_PRIVATE_KEY.replace("\\n", "\n"),
                "token_uri": "https://oauth2.googleapis.com/token",
            })
            app = firebase_admin.initialize_app(cred, options, name=self.APP_NAME)
        else:
            app = firebase_admin.initialize_app(options=options, name=self.APP_NAME)

        logger.info("Firebase Admin SDK initialized")
        return app

    def verify(self, token: str) -> Claims:
        try:
            decoded = firebase_auth.verify_id_token(token, app=self._get_app())
        except (ValueError, FirebaseError) as e:
            raise InvalidTokenError(str(e)) from e
        return Claims.from_token(decoded)


# ===== DEPENDENCIES =====

def get_token_verifier(request: Request) -> TokenVerifier:
    return request.app.state.token_verifier


def get_claims(request: Request, verifier: TokenVerifier = Depends(get_token_verifier)) -> Optional[Claims]:
    """Resolve the caller's claims from the Authorization header, None when anonymous"""
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return None

    token = header[len("Bearer "):].strip()
    if not token:
        return None

    try:
        return verifier.verify(token)
    except InvalidTokenError as e:
        logger.warning("Invalid bearer token: %s", e)
        return None


def require_claims(claims: Optional[Claims] = Depends(get_claims)) -> Claims:
    if claims is None:
        raise UnauthenticatedError()
    return claims


def require_admin(claims: Claims = Depends(require_claims)) -> Claims:
    if claims.role != UserRole.ADMIN:
        raise ForbiddenError()
    return claims


def get_current_user(claims: Claims = Depends(require_claims), db: Session = Depends(get_db)) -> UserDB:
    """The registered user behind the request"""
    user = crud_user.read_db_user_by_firebase_uid(db, claims.uid)
    if user is None:
        raise NotFoundError("User not found")
    return user
