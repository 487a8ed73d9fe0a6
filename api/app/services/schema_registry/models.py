"""
Schema Registry Models - 스키마 데이터 모델 정의

레코드 타입(finance, k12)별 필드 카탈로그와 필드 정의를 위한 핵심 모델들.
모델 객체는 불변으로 다루며, 변경은 항상 새 문서를 만들어 교체한다.
"""

import copy
from typing import Any, Dict, List, Optional, Union
from dataclasses import dataclass, field
from enum import Enum
import logging

logger = logging.getLogger(__name__)


class FieldType(str, Enum):
    """필드 스칼라 타입 (화이트리스트)"""
    STRING = "String"
    NUMBER = "Number"
    DATE = "Date"
    BOOLEAN = "Boolean"

    @classmethod
    def values(cls) -> List[str]:
        return [t.value for t in cls]


# 단일 스칼라 타입 또는 원소 하나짜리 리스트 ("배열" 타입)
TypeSpec = Union[str, List[str]]


@dataclass(frozen=True)
class FieldDefinition:
    """
    필드 정의

    type 은 "Number" 같은 스칼라 이름이거나 ["Number"] 처럼
    원소가 하나인 리스트(해당 스칼라의 배열)
    """
    type: TypeSpec
    required: bool = False
    hidden: bool = False
    systemLevel: bool = False

    @property
    def is_array(self) -> bool:
        return isinstance(self.type, (list, tuple))

    @property
    def scalar_type(self) -> FieldType:
        """배열 여부와 관계없이 스칼라 타입 반환"""
        name = self.type[0] if self.is_array else self.type
        return FieldType(name)

    def to_dict(self) -> Dict[str, Any]:
        """딕셔너리로 변환"""
        return {
            "type": list(self.type) if self.is_array else self.type,
            "required": self.required,
            "hidden": self.hidden,
            "systemLevel": self.systemLevel,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FieldDefinition":
        """저장된 딕셔너리에서 생성 (저장소에서 읽은 신뢰 가능한 데이터용)"""
        type_spec = data["type"]
        if isinstance(type_spec, (list, tuple)):
            type_spec = list(type_spec)
        return cls(
            type=type_spec,
            required=bool(data.get("required", False)),
            hidden=bool(data.get("hidden", False)),
            systemLevel=bool(data.get("systemLevel", False)),
        )


@dataclass
class SchemaDocument:
    """
    스키마 문서

    schemaName / collectionName / historyCollectionName 은 생성 후 변경되지 않음.
    fields 는 삽입 순서를 유지하는 필드명 -> FieldDefinition 매핑
    """
    schemaName: str
    collectionName: str
    historyCollectionName: str
    version: Any = "1"
    fields: Dict[str, FieldDefinition] = field(default_factory=dict)

    def has_field(self, name: str) -> bool:
        return name in self.fields

    def get_field(self, name: str) -> Optional[FieldDefinition]:
        """필드 이름으로 필드 정의 조회"""
        return self.fields.get(name)

    def field_names(self) -> List[str]:
        """필드 이름 목록 (삽입 순서)"""
        return list(self.fields.keys())

    def clone(self) -> "SchemaDocument":
        """깊은 복사본 생성"""
        return copy.deepcopy(self)

    def with_field(self, name: str, definition: FieldDefinition) -> "SchemaDocument":
        """필드를 추가/교체한 새 문서 반환 (기존 순서 유지)"""
        doc = self.clone()
        doc.fields[name] = definition
        return doc

    def without_field(self, name: str) -> "SchemaDocument":
        """필드를 제거한 새 문서 반환"""
        doc = self.clone()
        doc.fields.pop(name, None)
        return doc

    def to_dict(self) -> Dict[str, Any]:
        """딕셔너리로 변환 (저장 형식)"""
        return {
            "schemaName": self.schemaName,
            "collectionName": self.collectionName,
            "historyCollectionName": self.historyCollectionName,
            "version": self.version,
            "fields": {name: f.to_dict() for name, f in self.fields.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SchemaDocument":
        """딕셔너리에서 생성"""
        return cls(
            schemaName=data["schemaName"],
            collectionName=data["collectionName"],
            historyCollectionName=data.get("historyCollectionName", ""),
            version=data.get("version", "1"),
            fields={
                name: FieldDefinition.from_dict(f)
                for name, f in data.get("fields", {}).items()
            },
        )


@dataclass(frozen=True)
class SchemaSnapshot:
    """
    레지스트리가 소유하는 스키마 스냅샷

    revision 은 성공한 변경마다 1씩 증가 (compare-and-swap 용 토큰)
    """
    document: SchemaDocument
    revision: int = 1

    def __repr__(self) -> str:
        return (
            f"SchemaSnapshot({self.document.schemaName}, rev={self.revision}, "
            f"fields={len(self.document.fields)})"
        )
