"""Admin Authentication Service - JWT-based authentication for intake admins."""

import logging
from datetime import datetime, timedelta
from typing import Dict

import bcrypt
import jwt
from pydantic import ValidationError
from sqlalchemy import select

from intake import db
from intake.models import AdminUser
from intake.schemas.auth_schema import admin_email_adapter
from intake.services.invitation_lifecycle import normalize_email
from config.settings import settings

logger = logging.getLogger(__name__)


class AdminAuthService:
    """Service for admin authentication operations."""

    TOKEN_TYPE = "admin"

    @staticmethod
    def hash_password(password: str) -> str:
        return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")

    @staticmethod
    def _verify_password(admin: AdminUser, password: str) -> bool:
        return bcrypt.checkpw(password.encode("utf-8"), admin.password_hash.encode("utf-8"))

    @staticmethod
    def _generate_access_token(admin: AdminUser) -> str:
        payload = {
            "user_id": admin.id,
            "email": admin.email,
            "name": admin.name,
            "type": AdminAuthService.TOKEN_TYPE,
            "exp": datetime.utcnow() + timedelta(hours=settings.admin_token_expiry_hours),
            "iat": datetime.utcnow(),
        }
        return jwt.encode(payload, settings.secret_key, algorithm="HS256")

    @staticmethod
    def create_admin(email: str, password: str, name: str) -> AdminUser:
        """
        Raises:
            ValueError: If the email is invalid or taken, or the password is too short
        """
        email = normalize_email(email)
        try:
            admin_email_adapter.validate_python(email)
        except ValidationError as e:
            raise ValueError(f"Invalid email address: {email}") from e
        if len(password) < 8:
            raise ValueError("Password must be at least 8 characters")
        if db.session.scalar(select(AdminUser).where(AdminUser.email == email)):
            raise ValueError(f"Admin {email} already exists")

        admin = AdminUser(
            email=email,
            name=name,
            password_hash=AdminAuthService.hash_password(password),
            is_active=True,
        )
        db.session.add(admin)
        db.session.commit()
        logger.info(f"Created admin {admin.id} ({email})")
        return admin

    @staticmethod
    def login(email: str, password: str) -> Dict:
        """
        Authenticate an admin and issue an access token.

        Raises:
            ValueError: If authentication fails or the account is inactive
        """
        admin = db.session.scalar(select(AdminUser).where(AdminUser.email == normalize_email(email)))

        if not admin or not AdminAuthService._verify_password(admin, password):
            raise ValueError("Invalid email or password")

        if not admin.is_active:
            raise ValueError("Account is inactive. Contact system administrator.")

        admin.last_login = datetime.utcnow()
        db.session.commit()

        logger.info(f"Admin logged in: {admin.id} ({admin.email})")
        return {
            "access_token": AdminAuthService._generate_access_token(admin),
            "token_type": "Bearer",
            "expires_in": settings.admin_token_expiry_hours * 3600,
            "admin": admin.to_dict(),
        }

    @staticmethod
    def validate_token(access_token: str) -> Dict:
        """
        Validate JWT access token and return payload.

        Raises:
            ValueError: If token is invalid, expired, or the admin is gone/inactive
        """
        try:
            payload = jwt.decode(access_token, settings.secret_key, algorithms=["HS256"])
        except jwt.ExpiredSignatureError:
            raise ValueError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise ValueError(f"Invalid token: {str(e)}")

        if payload.get("type") != AdminAuthService.TOKEN_TYPE:
            raise ValueError("Invalid token type")

        admin = db.session.get(AdminUser, payload.get("user_id"))
        if not admin:
            raise ValueError("Admin not found")
        if not admin.is_active:
            raise ValueError("Admin account is inactive")

        return payload
