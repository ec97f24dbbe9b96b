"""
Local form validation.

Runs before any remote call. Each validator returns the first error message
(Vietnamese, shown as-is to the user) or None when the input is acceptable.
"""
import re
from typing import Optional

from ..schemas.auth import LoginRequest, SignupData

USERNAME_RE = re.compile(r"[a-zA-Z0-9_]+")
EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6
STRONG_PASSWORD_LENGTH = 8


def validate_signup(data: SignupData) -> Optional[str]:
    """
    Check signup fields in form order.

    The confirmation is only compared when it was supplied (HTTP clients must
    send it; Python callers may skip it).
    """
    if not data.displayName.strip():
        return "Vui lòng nhập họ tên"
    if not data.username.strip():
        return "Vui lòng nhập tên đăng nhập"
    if len(data.username) < MIN_USERNAME_LENGTH:
        return "Tên đăng nhập phải có ít nhất 3 ký tự"
    if not USERNAME_RE.fullmatch(data.username):
        return "Tên đăng nhập chỉ được chứa chữ cái, số và dấu gạch dưới"
    if not data.email.strip():
        return "Vui lòng nhập email"
    if not EMAIL_RE.fullmatch(data.email):
        return "Email không hợp lệ"
    if not data.password:
        return "Vui lòng nhập mật khẩu"
    if len(data.password) < MIN_PASSWORD_LENGTH:
        return "Mật khẩu phải có ít nhất 6 ký tự"
    if data.confirmPassword is not None and data.password != data.confirmPassword:
        return "Mật khẩu xác nhận không khớp"
    return None


def normalize_signup(data: SignupData) -> SignupData:
    """Trim fields and lower-case the username before it reaches storage."""
    return data.model_copy(update={
        "username": data.username.strip().lower(),
        "email": data.email.strip(),
        "displayName": data.displayName.strip(),
    })


def validate_login(data: LoginRequest) -> Optional[str]:
    if not data.username.strip():
        return "Vui lòng nhập tên đăng nhập"
    if not data.password:
        return "Vui lòng nhập mật khẩu"
    return None


def password_strength(password: str) -> str:
    """Rough strength hint: "weak" (< 6), "medium" (6-7) or "strong" (>= 8)."""
    if len(password) >= STRONG_PASSWORD_LENGTH:
        return "strong"
    if len(password) >= MIN_PASSWORD_LENGTH:
        return "medium"
    return "weak"
