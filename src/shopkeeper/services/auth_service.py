from __future__ import annotations

from dataclasses import dataclass
import logging
import re

from shopkeeper.domain.errors import AuthorizationError, ValidationError
from shopkeeper.domain.models import ADMIN, ROLES, SUPER_ADMIN, AuthSession, User
from shopkeeper.repositories.contracts import UserRepository

log = logging.getLogger("shopkeeper.auth")

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass(frozen=True)
class PasswordPolicy:
    min_length: int = 8


def _validate_secret_strength(secret: str, *, min_len: int) -> None:
    if len(secret) < min_len:
        raise ValidationError(f"Password must have at least {min_len} characters.")
    if not re.search(r"[A-Za-z]", secret):
        raise ValidationError("Password must include at least one letter.")
    if not re.search(r"\d", secret):
        raise ValidationError("Password must include at least one number.")


def _validate_email(email: str) -> str:
    cleaned = email.strip().lower()
    if not _EMAIL_RE.match(cleaned):
        raise ValidationError("A valid email is required.")
    return cleaned


PERMISSIONS: dict[str, set[str]] = {
    "view_dashboard": {SUPER_ADMIN},
    "view_purchase_price": {SUPER_ADMIN},
    "manage_users": {SUPER_ADMIN},
    "manage_settings": {SUPER_ADMIN},
    "manage_products": {SUPER_ADMIN, ADMIN},
    "record_transaction": {SUPER_ADMIN, ADMIN},
}


class AuthService:
    def __init__(self, repo: UserRepository, policy: PasswordPolicy | None = None):
        self.repo = repo
        self.policy = policy or PasswordPolicy()

    def login(self, email: str, password: str) -> AuthSession:
        if not email.strip() or not password:
            raise ValidationError("Email and password are required.")
        session = self.repo.login(email.strip(), password)
        log.info("login_ok user=%s role=%s", session.user.id, session.user.role)
        return session

    def register(
        self,
        name: str,
        email: str,
        password: str,
        role: str = SUPER_ADMIN,
        shop_name: str | None = None,
        whatsapp_number: str | None = None,
        shop_id: str | None = None,
    ) -> AuthSession:
        """
        SuperAdmin registration opens a new shop (shop_name required);
        Admin registration joins an existing one (shop_id required).
        """
        name = name.strip()
        if not name:
            raise ValidationError("Name is required.")
        email = _validate_email(email)
        _validate_secret_strength(password, min_len=self.policy.min_length)
        if role not in ROLES:
            raise ValidationError(f"Role must be one of: {', '.join(ROLES)}.")
        if role == SUPER_ADMIN and not (shop_name or "").strip():
            raise ValidationError("Shop name is required to open a shop.")
        if role == ADMIN and not (shop_id or "").strip():
            raise ValidationError("Shop id is required to join a shop.")

        session = self.repo.register(
            name,
            email,
            password,
            role,
            shop_name=(shop_name or "").strip() or None,
            whatsapp_number=(whatsapp_number or "").strip() or None,
            shop_id=(shop_id or "").strip() or None,
        )
        log.info("registered user=%s role=%s", session.user.id, role)
        return session

    def can(self, user: User, action: str) -> bool:
        allowed_roles = PERMISSIONS.get(action)
        if not allowed_roles:
            return False
        return user.role in allowed_roles

    def require_action(self, user: User, action: str) -> None:
        if not self.can(user, action):
            raise AuthorizationError(f"Role '{user.role}' is not allowed to perform '{action}'.")

    def list_users(self, actor: User) -> list[User]:
        self.require_action(actor, "manage_users")
        return self.repo.list_users()

    def create_user(self, actor: User, name: str, email: str, password: str, role: str = ADMIN) -> User:
        self.require_action(actor, "manage_users")

        name = name.strip()
        if not name:
            raise ValidationError("Name is required.")
        email = _validate_email(email)
        _validate_secret_strength(password, min_len=self.policy.min_length)
        if role not in ROLES:
            raise ValidationError(f"Role must be one of: {', '.join(ROLES)}.")

        user = self.repo.create_user(name, email, password, role)
        log.info("user_created id=%s role=%s actor=%s", user.id, role, actor.id)
        return user

    def delete_user(self, actor: User, user_id: str) -> None:
        self.require_action(actor, "manage_users")
        if str(user_id) == str(actor.id):
            raise AuthorizationError("You cannot delete your own account.")
        self.repo.delete_user(user_id)
        log.info("user_deleted id=%s actor=%s", user_id, actor.id)
