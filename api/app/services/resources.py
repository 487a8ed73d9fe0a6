"""
리소스 카탈로그

API 가 관리하는 레코드 타입(finance, k12)별 이름, 식별 필드, 경로 정의
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple


VERSION_FIELD = "version"


@dataclass(frozen=True)
class ResourceDefinition:
    """레코드 타입 정의"""
    name: str               # 스키마 이름 (시드 파일 접두어)
    id_field: str           # 기본 키 필드
    resource_type: str      # 단일 레코드 resourceType
    plural: str             # 컬렉션 resourceType / 목록 키
    base_path: str          # 레코드 API 경로
    schema_path: str        # 스키마 API 경로

    @property
    def identity_fields(self) -> Tuple[str, str]:
        """최상위로 올라가는 식별 필드들"""
        return (self.id_field, VERSION_FIELD)

    def record_href(self, record_id) -> str:
        return f"{self.base_path}/{record_id}"

    def field_href(self, field_name: str) -> str:
        return f"{self.schema_path}/fields/{field_name}"

    @property
    def fields_href(self) -> str:
        return f"{self.schema_path}/fields"


FINANCE = ResourceDefinition(
    name="finance",
    id_field="financeID",
    resource_type="finance",
    plural="finances",
    base_path="/api/v1/finances",
    schema_path="/spi/v1/finance/schema",
)

K12 = ResourceDefinition(
    name="k12",
    id_field="k12ID",
    resource_type="k12",
    plural="k12s",
    base_path="/api/v1/k12",
    schema_path="/spi/v1/k12/schema",
)

RESOURCES: Dict[str, ResourceDefinition] = {
    FINANCE.name: FINANCE,
    K12.name: K12,
}


def list_resources() -> List[ResourceDefinition]:
    return list(RESOURCES.values())
