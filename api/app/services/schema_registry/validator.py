"""
Field Validator - 필드 정의 검증

스키마에 추가/수정할 필드 정의가 타입 화이트리스트와
예약 속성 규칙을 지키는지 검사하는 순수 함수들
"""

import logging
from typing import Any, Mapping, Optional

from app.exceptions import BadInputError
from .models import FieldDefinition, FieldType

logger = logging.getLogger(__name__)

VALID_FIELD_TYPES = FieldType.values()

TYPE_MISSING_MESSAGE = 'The mandatory field "type" is not present'
SYSTEM_LEVEL_MESSAGE = 'The field "systemLevel" is system level field and should not be used'
INVALID_TYPE_MESSAGE = (
    'The field "type" should have the one of the possible values '
    '"String", "Number", "Date", "Boolean", '
    '["String"], ["Number"], ["Date"], ["Boolean"]'
)


def coerce_flag(value: Any) -> bool:
    """required/hidden 플래그를 bool 로 정규화 (대소문자 무시 "true" 비교)"""
    return str(value).lower() == "true"


def _is_unset_flag(value: Any) -> bool:
    """누락 / null / false (bool 또는 "false" 문자열)"""
    if value is None or value is False:
        return True
    return isinstance(value, str) and value.lower() == "false"


def validate_field_definition(data: Optional[Mapping[str, Any]]) -> Optional[BadInputError]:
    """
    필드 정의 검증

    Args:
        data: 요청으로 받은 필드 정의

    Returns:
        검증 실패 시 BadInputError, 통과 시 None
    """
    # type 존재 확인
    if not isinstance(data, Mapping) or data.get("type") in (None, ""):
        return BadInputError(TYPE_MISSING_MESSAGE)

    # systemLevel 은 서버만 지정 가능 (명시적 false 는 허용)
    if not _is_unset_flag(data.get("systemLevel")):
        return BadInputError(SYSTEM_LEVEL_MESSAGE)

    type_spec = data["type"]

    if isinstance(type_spec, (list, tuple)):
        if len(type_spec) != 1 or type_spec[0] not in VALID_FIELD_TYPES:
            return BadInputError(INVALID_TYPE_MESSAGE, details={"type": list(type_spec)})
    elif not isinstance(type_spec, str) or type_spec not in VALID_FIELD_TYPES:
        return BadInputError(INVALID_TYPE_MESSAGE, details={"type": str(type_spec)})

    return None


def build_field_definition(data: Mapping[str, Any]) -> FieldDefinition:
    """
    검증 후 정규화된 FieldDefinition 생성

    Raises:
        BadInputError: 검증 실패 시
    """
    err = validate_field_definition(data)
    if err:
        raise err

    type_spec = data["type"]
    if isinstance(type_spec, (list, tuple)):
        type_spec = [type_spec[0]]

    return FieldDefinition(
        type=type_spec,
        required=coerce_flag(data["required"]) if "required" in data else False,
        hidden=coerce_flag(data["hidden"]) if "hidden" in data else False,
        systemLevel=False,
    )
