"""
인증 의존성
HTTP Basic 자격 증명으로 인증 (설정의 API_USERNAME / API_PASSWORD)
"""

import logging
import secrets
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from app.core.config import Settings
from app.exceptions import InternalServiceError, UnauthorizedError

logger = logging.getLogger(__name__)

AUTH_REALM = "Authorization Required"
WWW_AUTHENTICATE = f"Basic realm={AUTH_REALM}"

# auto_error=False: 401 응답은 서비스 에러 envelope 로 직접 생성
basic_scheme = HTTPBasic(auto_error=False, realm=AUTH_REALM)


@dataclass
class AuthContext:
    """인증 컨텍스트"""
    auth_type: str  # "basic" | "none"
    username: Optional[str] = None


class AuthMode:
    """인증 모드"""
    # "required": 모든 요청에 인증 필요
    # "disabled": 인증 비활성화 (개발용)
    REQUIRED = "required"
    DISABLED = "disabled"

    # 인증 제외 경로 (항상 인증 없이 접근 가능)
    EXEMPT_PATHS = [
        "/health",
    ]

    @classmethod
    def is_exempt(cls, path: str) -> bool:
        """인증 제외 경로 확인"""
        return any(path == exempt or path.startswith(exempt + "/") for exempt in cls.EXEMPT_PATHS)


def _settings(request: Request) -> Settings:
    return request.app.state.settings


def verify_credentials(settings: Settings, credentials: Optional[HTTPBasicCredentials]) -> bool:
    """
    자격 증명 확인
    timing attack 방지를 위해 secrets.compare_digest 사용
    """
    if credentials is None:
        return False

    username_ok = secrets.compare_digest(
        credentials.username.encode("utf-8"),
        settings.api_username.encode("utf-8")
    )
    password_ok = secrets.compare_digest(
        credentials.password.encode("utf-8"),
        settings.api_password.encode("utf-8")
    )
    return username_ok and password_ok


async def require_auth(
    request: Request,
    credentials: Optional[HTTPBasicCredentials] = Depends(basic_scheme)
) -> AuthContext:
    """
    인증 필수 의존성
    인증되지 않은 요청은 401 에러 (WWW-Authenticate 헤더 포함)
    """
    if AuthMode.is_exempt(request.url.path):
        return AuthContext(auth_type="none")

    settings = _settings(request)

    # 인증 모드가 disabled면 개발 환경에서만 통과
    if settings.auth_mode == AuthMode.DISABLED:
        if settings.is_production:
            logger.error("AUTH_MODE=disabled is not allowed in production")
            raise InternalServiceError("AUTH_MODE=disabled is not allowed in production")
        logger.warning("AUTH_MODE=disabled: 인증 우회 (개발 환경)")
        return AuthContext(auth_type="none")

    if not verify_credentials(settings, credentials):
        logger.info(f"Unauthorized request: {request.method} {request.url.path}")
        raise UnauthorizedError()

    return AuthContext(auth_type="basic", username=credentials.username)
