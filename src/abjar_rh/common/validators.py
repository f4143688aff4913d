from __future__ import annotations

import re
import secrets
import string
from dataclasses import dataclass, field

from ..core.constants import (
    GENERATED_PASSWORD_LENGTH,
    NAME_MIN_LENGTH,
    NPM_MAX_DIGITS,
    NPM_MIN_DIGITS,
    PASSWORD_MIN_LENGTH,
    PASSWORD_MIN_SCORE,
)
from ..core.exceptions import ValidationError

_NAME_RE = re.compile(r"^[a-zA-Z\s]+$")
_DIGITS_RE = re.compile(r"^\d+$")
_SYMBOL_RE = re.compile(r"[!@#$%^&*(),.?\":{}|<>]")

_STRENGTH_LABELS = {
    0: "Sangat Lemah",
    1: "Lemah",
    2: "Sedang",
    3: "Baik",
    4: "Kuat",
    5: "Sangat Kuat",
}


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} harus diisi")
    return value.strip()


@dataclass(frozen=True)
class PasswordStrength:
    score: int
    label: str
    feedback: list[str] = field(default_factory=list)


def password_strength(password: str) -> PasswordStrength:
    """Score a password 0-5: length, lowercase, uppercase, digit, symbol."""
    if not password:
        return PasswordStrength(score=0, label="", feedback=[])

    checks = [
        (len(password) >= PASSWORD_MIN_LENGTH, f"minimal {PASSWORD_MIN_LENGTH} karakter"),
        (re.search(r"[a-z]", password) is not None, "huruf kecil"),
        (re.search(r"[A-Z]", password) is not None, "huruf besar"),
        (re.search(r"\d", password) is not None, "angka"),
        (_SYMBOL_RE.search(password) is not None, "simbol"),
    ]
    score = sum(1 for ok, _ in checks if ok)
    feedback = [hint for ok, hint in checks if not ok]
    return PasswordStrength(score=score, label=_STRENGTH_LABELS[score], feedback=feedback)


def generate_password(length: int = GENERATED_PASSWORD_LENGTH) -> str:
    length = max(int(length), PASSWORD_MIN_LENGTH)
    alphabet = string.ascii_letters + string.digits + "!@#$%^&*"
    while True:
        candidate = "".join(secrets.choice(alphabet) for _ in range(length))
        # redraw until every character class is present
        if password_strength(candidate).score == 5:
            return candidate


def validate_full_name(value: str) -> str:
    v = (value or "").strip()
    if not v:
        return "Nama lengkap harus diisi"
    if len(v) < NAME_MIN_LENGTH:
        return f"Nama lengkap minimal {NAME_MIN_LENGTH} karakter"
    if not _NAME_RE.match(v):
        return "Nama lengkap hanya boleh mengandung huruf dan spasi"
    return ""


def validate_npm(value: str) -> str:
    v = (value or "").strip()
    if not v:
        return "NPM harus diisi"
    if not _DIGITS_RE.match(v):
        return "NPM harus berupa angka"
    if len(v) < NPM_MIN_DIGITS or len(v) > NPM_MAX_DIGITS:
        return f"NPM harus {NPM_MIN_DIGITS}-{NPM_MAX_DIGITS} digit"
    return ""


def validate_password(value: str) -> str:
    if not value:
        return "Password harus diisi"
    if len(value) < PASSWORD_MIN_LENGTH:
        return f"Password minimal {PASSWORD_MIN_LENGTH} karakter"
    if password_strength(value).score < PASSWORD_MIN_SCORE:
        return "Password terlalu lemah"
    return ""


def validate_registration(*, full_name: str, npm: str, password: str, code: str) -> dict[str, str]:
    """Validate the registration form; returns only the fields that failed."""
    errors = {
        "full_name": validate_full_name(full_name),
        "npm": validate_npm(npm),
        "password": validate_password(password),
        "code": "" if (code or "").strip() else "Kode registrasi harus diisi",
    }
    return {k: v for k, v in errors.items() if v}
