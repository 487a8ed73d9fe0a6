"""
API 인증 모듈
HTTP Basic 인증
"""

from .dependencies import (
    AuthContext,
    AuthMode,
    WWW_AUTHENTICATE,
    require_auth,
    verify_credentials,
)

__all__ = [
    "AuthContext",
    "AuthMode",
    "WWW_AUTHENTICATE",
    "require_auth",
    "verify_credentials",
]
