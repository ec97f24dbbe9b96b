"""
Auth result types

Every account store / orchestrator operation returns a result object instead of
raising. The message is the short Vietnamese text shown to the user; the kind
lets Python callers tell failures apart without parsing messages.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..schemas.auth import AuthUser


class AuthErrorKind(str, Enum):
    NOT_CONFIGURED = "not_configured"  # No token / repository configured
    CONFIG_LOCKED = "config_locked"  # Deployment does not accept user configuration
    CONFIG_INVALID = "config_invalid"  # Repository not reachable with the given token
    VALIDATION = "validation"  # Local form validation
    USERNAME_TAKEN = "username_taken"
    NOT_FOUND = "not_found"  # Username has no account file
    WRONG_PASSWORD = "wrong_password"
    STORAGE = "storage"  # Write rejected by GitHub
    UNEXPECTED = "unexpected"  # Anything else (unreadable record, bug)
    INVALID_STATE = "invalid_state"  # Operation not valid in the current auth state


MESSAGES = {
    AuthErrorKind.NOT_CONFIGURED: "Hệ thống chưa được cấu hình GitHub. Vui lòng liên hệ quản trị viên.",
    AuthErrorKind.CONFIG_LOCKED: "Cấu hình GitHub được cố định cho bản triển khai này",
    AuthErrorKind.CONFIG_INVALID: "Không thể truy cập repository. Vui lòng kiểm tra lại thông tin và token.",
    AuthErrorKind.USERNAME_TAKEN: "Tên đăng nhập đã tồn tại",
    AuthErrorKind.NOT_FOUND: "Tên đăng nhập không tồn tại",
    AuthErrorKind.WRONG_PASSWORD: "Mật khẩu không đúng",
    AuthErrorKind.STORAGE: "Không thể lưu thông tin người dùng",
    AuthErrorKind.UNEXPECTED: "Đã xảy ra lỗi",
    AuthErrorKind.INVALID_STATE: "Bạn đã đăng nhập",
}

# Generic per-operation fallbacks
LOGIN_ERROR = "Đã xảy ra lỗi khi đăng nhập"
SIGNUP_ERROR = "Đã xảy ra lỗi khi đăng ký"


@dataclass
class AuthResult:
    """Outcome of an auth operation"""
    success: bool
    user: Optional[AuthUser] = None
    error: Optional[str] = None
    kind: Optional[AuthErrorKind] = None

    @classmethod
    def ok(cls, user: Optional[AuthUser] = None) -> "AuthResult":
        return cls(success=True, user=user)

    @classmethod
    def fail(cls, kind: AuthErrorKind, message: Optional[str] = None) -> "AuthResult":
        return cls(success=False, error=message or MESSAGES.get(kind, MESSAGES[AuthErrorKind.UNEXPECTED]), kind=kind)
