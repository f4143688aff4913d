from __future__ import annotations

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.pagination import paginate
from ..common.validators import PasswordStrength, generate_password, password_strength, validate_registration
from ..core.constants import MAX_ADMINS, USERS_PAGE_SIZE
from ..core.enums import NotificationType, Role
from ..core.exceptions import AuthenticationError, AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..core.permissions import can_demote_from_admin, can_manage_users, can_promote_to_admin
from ..notifications.service import NotificationService
from .model import SessionUser, User
from .repository import UserRepository


def refresh_actor(users: UserRepository, actor: SessionUser) -> SessionUser:
    """Re-read the actor from the store so permission checks use the current role."""
    user = users.get_by_id(actor.user_id)
    if not user:
        raise AuthenticationError("Sesi berakhir, silakan login kembali")
    return SessionUser.from_user(user)


class AuthService:
    """Use case: register, login and session refresh."""

    def __init__(self, users: UserRepository, *, registration_code: str):
        self._users = users
        self._registration_code = registration_code

    def register(self, *, full_name: str, npm: str, password: str, code: str) -> int:
        errors = validate_registration(full_name=full_name, npm=npm, password=password, code=code)
        if errors:
            raise ValidationError("Periksa kembali data pendaftaran", field_errors=errors)

        if code.strip() != self._registration_code:
            raise ValidationError("Kode registrasi salah", field_errors={"code": "Kode registrasi salah"})

        npm = npm.strip()
        if self._users.get_by_npm(npm):
            raise ConflictError("NPM sudah terdaftar")

        try:
            return self._users.create_user(
                full_name=" ".join(full_name.split()),
                npm=npm,
                password_hash=generate_password_hash(password),
                role=Role.MEMBER,
            )
        except ConflictError as e:
            raise ConflictError("NPM sudah terdaftar") from e

    def authenticate(self, npm: str, password: str) -> SessionUser:
        npm = (npm or "").strip()
        if not npm:
            raise ValidationError("NPM harus diisi")
        if not (password or "").strip():
            raise ValidationError("Password harus diisi")
        if not npm.isdigit():
            raise ValidationError("NPM harus berupa angka")

        user = self._users.get_by_npm(npm)
        if not user:
            raise AuthenticationError("NPM atau password salah")

        try:
            ok = check_password_hash(user.password_hash, password)
        except ValueError:
            # unknown hash method, e.g. a legacy plaintext value
            ok = False

        if not ok:
            raise AuthenticationError("NPM atau password salah")
        return SessionUser.from_user(user)

    def refresh(self, actor: SessionUser) -> SessionUser:
        return refresh_actor(self._users, actor)

    @staticmethod
    def password_strength(password: str) -> PasswordStrength:
        return password_strength(password)

    @staticmethod
    def generate_password() -> str:
        return generate_password()


class UserService:
    """Use case: list users and change roles (super admin)."""

    def __init__(self, users: UserRepository, notifications: NotificationService):
        self._users = users
        self._notifications = notifications

    def _require_manager(self, actor: SessionUser) -> SessionUser:
        actor = refresh_actor(self._users, actor)
        if not can_manage_users(actor.role):
            raise AuthorizationError("Anda tidak memiliki akses")
        return actor

    def list_users(self, actor: SessionUser, *, query: str = "", page: int = 1) -> dict:
        actor = self._require_manager(actor)
        users = list(self._users.list_all())
        admin_count = sum(1 for u in users if u.role == Role.ADMIN)

        q = (query or "").strip().lower()
        filtered = [u for u in users if q in u.full_name.lower() or q in u.npm.lower()] if q else users
        result = paginate(filtered, page=page, per_page=USERS_PAGE_SIZE)

        return {
            "items": [self._to_row(actor, u, admin_count) for u in result.items],
            "pagination": result.to_dict(),
            "stats": {
                "total": len(filtered),
                "total_all": len(users),
                Role.MEMBER.value: sum(1 for u in users if u.role == Role.MEMBER),
                Role.ADMIN.value: admin_count,
                Role.SUPER_ADMIN.value: sum(1 for u in users if u.role == Role.SUPER_ADMIN),
            },
        }

    @staticmethod
    def _to_row(actor: SessionUser, u: User, admin_count: int) -> dict:
        return {
            "id": u.user_id,
            "full_name": u.full_name,
            "npm": u.npm,
            "role": u.role.value,
            "role_label": u.role.label,
            "is_self": u.user_id == actor.user_id,
            "can_promote": can_promote_to_admin(
                actor_role=actor.role,
                actor_id=actor.user_id,
                target_role=u.role,
                target_id=u.user_id,
                admin_count=admin_count,
            ),
            "can_demote": can_demote_from_admin(
                actor_role=actor.role,
                actor_id=actor.user_id,
                target_role=u.role,
                target_id=u.user_id,
            ),
        }

    def change_role(self, actor: SessionUser, *, target_id: int, new_role: Role) -> User:
        actor = self._require_manager(actor)

        if new_role == Role.SUPER_ADMIN:
            raise ValidationError("Role super admin tidak dapat diberikan")

        target = self._users.get_by_id(int(target_id))
        if not target:
            raise NotFoundError("Pengguna tidak ditemukan")
        if target.user_id == actor.user_id:
            raise AuthorizationError("Anda tidak dapat mengubah role sendiri")

        if new_role == Role.ADMIN:
            admin_count = self._users.count_by_role().get(Role.ADMIN, 0)
            allowed = can_promote_to_admin(
                actor_role=actor.role,
                actor_id=actor.user_id,
                target_role=target.role,
                target_id=target.user_id,
                admin_count=admin_count,
            )
            if not allowed:
                if target.role == Role.MEMBER:
                    raise ValidationError("Jumlah admin sudah maksimal")
                raise ValidationError("Hanya anggota yang dapat dijadikan admin")
        else:
            allowed = can_demote_from_admin(
                actor_role=actor.role,
                actor_id=actor.user_id,
                target_role=target.role,
                target_id=target.user_id,
            )
            if not allowed:
                raise ValidationError("Hanya admin yang dapat diturunkan menjadi anggota")

        changed = self._users.update_role(
            target.user_id,
            new_role,
            expected_role=target.role,
            max_admins=MAX_ADMINS if new_role == Role.ADMIN else None,
        )
        if not changed:
            current = self._users.get_by_id(target.user_id)
            if not current:
                raise NotFoundError("Pengguna tidak ditemukan")
            if current.role == target.role and new_role == Role.ADMIN:
                raise ValidationError("Jumlah admin sudah maksimal")
            raise ConflictError("Role pengguna sudah diubah, muat ulang data")

        self._notifications.notify(
            user_id=target.user_id,
            title="Perubahan Role",
            message=f"Role Anda telah diubah menjadi {new_role.label}",
            type=NotificationType.ROLE_CHANGE,
        )
        return User(
            user_id=target.user_id,
            full_name=target.full_name,
            npm=target.npm,
            password_hash=target.password_hash,
            role=new_role,
            created_at=target.created_at,
        )

