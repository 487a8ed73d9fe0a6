"""
Schema Registry - 런타임 편집 가능한 필드 스키마 관리

레코드 타입(finance, k12)별 필드 카탈로그를 저장하고,
HTTP 로 들어오는 필드 변경을 검증/영속화한 뒤 레코드 모델에 반영합니다.

주요 기능:
- 필드 추가/수정/삭제/조회
- 타입 화이트리스트 및 systemLevel 예약 속성 검증
- 원자적 스키마 저장 (파일 / MongoDB / 인메모리)

사용 예시:
    from app.services.schema_registry import (
        SchemaRegistry,
        JsonFileSchemaStore,
    )

    store = JsonFileSchemaStore("data/schemas/finance_schema.json", schema_name="finance")
    registry = SchemaRegistry(store, model_adapter=record_model)

    registry.add_field("price", {"type": "Number", "required": "true"})
    schema = registry.get_schema()
"""

# Models
from .models import (
    FieldType,
    FieldDefinition,
    SchemaDocument,
    SchemaSnapshot,
)

# Validator
from .validator import (
    VALID_FIELD_TYPES,
    validate_field_definition,
    build_field_definition,
    coerce_flag,
)

# Store
from .store import (
    SchemaStore,
    SchemaStoreError,
    InMemorySchemaStore,
    JsonFileSchemaStore,
    MongoSchemaStore,
    load_seed,
)

# Registry
from .registry import SchemaRegistry, RecordModelAdapter

__all__ = [
    # Models
    "FieldType",
    "FieldDefinition",
    "SchemaDocument",
    "SchemaSnapshot",
    # Validator
    "VALID_FIELD_TYPES",
    "validate_field_definition",
    "build_field_definition",
    "coerce_flag",
    # Store
    "SchemaStore",
    "SchemaStoreError",
    "InMemorySchemaStore",
    "JsonFileSchemaStore",
    "MongoSchemaStore",
    "load_seed",
    # Registry
    "SchemaRegistry",
    "RecordModelAdapter",
]
