"""
Record Model - 스키마 기반 레코드 검증 모델

스키마가 바뀔 때마다 SchemaRegistry 가 refresh() 를 호출하면
현재 스키마로 pydantic 모델을 다시 만든다. 레코드 쓰기는 항상
가장 최근 모델로 검증된다.
"""

import logging
import threading
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError, create_model

from app.exceptions import InternalServiceError, RecordBadInputError
from app.services.schema_registry.models import FieldDefinition, FieldType, SchemaDocument

logger = logging.getLogger(__name__)

PYTHON_TYPES: Dict[FieldType, type] = {
    FieldType.STRING: str,
    FieldType.NUMBER: float,
    FieldType.DATE: datetime,
    FieldType.BOOLEAN: bool,
}


def python_type_for(definition: FieldDefinition) -> Any:
    """필드 정의 -> 파이썬 타입"""
    scalar = PYTHON_TYPES[definition.scalar_type]
    if definition.is_array:
        return List[scalar]
    return scalar


class RecordModel:
    """
    레코드 모델 어댑터

    systemLevel 필드는 서버가 채우므로 모델에 포함하지 않는다.
    따라서 호출자가 systemLevel 필드를 보내면 알 수 없는 필드로 거부된다.
    """

    def __init__(self, resource_name: str):
        self.resource_name = resource_name
        self._model: Optional[Type[BaseModel]] = None
        self._schema: Optional[SchemaDocument] = None
        self._lock = threading.Lock()
        self.refresh_count = 0

    @property
    def schema(self) -> Optional[SchemaDocument]:
        return self._schema

    @property
    def model(self) -> Type[BaseModel]:
        if self._model is None:
            raise InternalServiceError(f"Record model for {self.resource_name} is not initialised")
        return self._model

    def refresh(self, schema: SchemaDocument) -> None:
        """현재 스키마로 모델 재생성"""
        model = self._build_model(schema)
        with self._lock:
            self._model = model
            self._schema = schema
            self.refresh_count += 1
        logger.debug(
            f"Record model refreshed: resource={self.resource_name}, fields={len(model.model_fields)}"
        )

    def _build_model(self, schema: SchemaDocument) -> Type[BaseModel]:
        field_specs: Dict[str, Any] = {}
        # 필드 이름이 BaseModel 속성과 겹칠 수 있어 내부 이름 + alias 사용
        for index, (name, definition) in enumerate(schema.fields.items()):
            if definition.systemLevel:
                continue
            py_type = python_type_for(definition)
            if definition.required:
                field_specs[f"f{index}"] = (py_type, Field(..., alias=name))
            else:
                field_specs[f"f{index}"] = (Optional[py_type], Field(None, alias=name))

        model_name = f"{self.resource_name.capitalize()}Record"
        return create_model(
            model_name,
            __config__=ConfigDict(extra="forbid"),
            **field_specs
        )

    def validate(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """
        레코드 입력 검증

        Returns:
            검증/변환된 필드 값 (입력에 있던 필드만)

        Raises:
            RecordBadInputError: 검증 실패 시
        """
        if not isinstance(payload, Mapping):
            raise RecordBadInputError("The record body must be an object")

        try:
            instance = self.model.model_validate(dict(payload))
        except ValidationError as e:
            problems = [
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            ]
            raise RecordBadInputError(
                "Invalid record: " + "; ".join(problems),
                details={"errors": problems}
            ) from e

        return instance.model_dump(by_alias=True, exclude_unset=True)
