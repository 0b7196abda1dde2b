# Overview: Service-layer operations for API tokens and users.

"""
API Token Service

Tokens are cryptographically secure random strings handed out once from the
CLI. Only their SHA-256 hash is stored; requests present the plaintext as a
Bearer token.
"""

import secrets
import hashlib

from ..extensions import db
from ..models import ApiToken, User
from ..models.auth import ROLES
from ..time_utils import utcnow


class UserError(Exception):
    """Raised for user/token management errors."""
    pass


def generate_token() -> str:
    """Return a 64-character hex string (32 bytes of entropy)."""
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    """
    Hash token for database storage using SHA-256.

    Tokens are already high-entropy, so a fast one-way hash is sufficient.
    """
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def create_user(*, email: str, role: str, name: str | None = None, phone: str | None = None) -> User:
    email = (email or "").strip().lower()
    if not email:
        raise UserError("email is required")
    role = (role or "").strip().upper()
    if role not in ROLES:
        raise UserError(f"role must be one of: {', '.join(ROLES)}")
    if db.session.query(User).filter_by(email=email).first():
        raise UserError(f"User {email} already exists")

    user = User(email=email, role=role, name=name, phone=phone)
    db.session.add(user)
    db.session.commit()
    return user


def issue_token(user_id: int) -> tuple[ApiToken, str]:
    """Create a token for the user. Returns (record, plaintext)."""
    user = db.session.get(User, user_id)
    if not user:
        raise UserError("User not found")
    if not user.is_active:
        raise UserError("User is deactivated")

    token = generate_token()
    record = ApiToken(user_id=user.id, token_hash=hash_token(token))
    db.session.add(record)
    db.session.commit()
    return record, token


def validate_token(token: str) -> User | None:
    """Resolve a plaintext token to its active user, or None."""
    if not token:
        return None

    record = db.session.query(ApiToken).filter_by(
        token_hash=hash_token(token),
        is_revoked=False,
    ).first()
    if not record:
        return None

    user = record.user
    if not user or not user.is_active:
        return None

    record.last_used_at = utcnow()
    db.session.commit()
    return user


def revoke_tokens(user_id: int) -> int:
    """Revoke every active token of a user. Returns how many were revoked."""
    tokens = db.session.query(ApiToken).filter_by(user_id=user_id, is_revoked=False).all()
    now = utcnow()
    for record in tokens:
        record.is_revoked = True
        record.revoked_at = now
    db.session.commit()
    return len(tokens)
