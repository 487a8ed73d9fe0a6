"""
Record Projector - 레코드 외부 표현 생성

저장된 레코드를 현재 스키마 기준으로 외부 표현(envelope)으로 변환한다.
출력 필드는 레코드의 키가 아니라 스키마 필드 순서로 결정되므로
스키마 변경(숨김/삭제)이 즉시 응답에 반영된다.

Envelope 형식:
    레코드:     {resourceType, <idField>, version, data: {...}, link}
    레코드 목록: {resourceType: <plural>, <plural>: [...], link}
    필드:       {resourceType: "field", data: {...}, link}
    스키마:     {resourceType: "schema", data: {..., fields: [...]}, link}
    에러:       {resourceType: "error", errors: [{version, status, message}]}
"""

from typing import Any, Dict, Mapping, Optional, Sequence, Union

from app.services.resources import ResourceDefinition, VERSION_FIELD
from app.services.schema_registry.models import SchemaDocument

API_VERSION = "v1"

RecordLike = Optional[Mapping[str, Any]]


def _self_link(href: str) -> Dict[str, str]:
    return {"rel": "self", "href": href}


def project_record(
    record: RecordLike,
    schema: SchemaDocument,
    resource: ResourceDefinition
) -> Dict[str, Any]:
    """
    단일 레코드 투영

    record 가 None 이면 빈 envelope({}) 반환 (에러 아님)
    """
    if record is None:
        return {}

    record_id = record.get(resource.id_field)
    output: Dict[str, Any] = {
        "resourceType": resource.resource_type,
        resource.id_field: record_id,
        VERSION_FIELD: record.get(VERSION_FIELD),
        "data": {},
    }

    identity = resource.identity_fields
    for name, definition in schema.fields.items():
        if definition.hidden or name in identity:
            continue
        output["data"][name] = record.get(name)

    output["link"] = _self_link(resource.record_href(record_id))
    return output


def project_collection(
    records: Sequence[RecordLike],
    schema: SchemaDocument,
    resource: ResourceDefinition
) -> Dict[str, Any]:
    """레코드 목록 투영"""
    return {
        "resourceType": resource.plural,
        resource.plural: [project_record(r, schema, resource) for r in records],
        "link": _self_link(resource.base_path),
    }


def project(
    records: Union[RecordLike, Sequence[RecordLike]],
    schema: SchemaDocument,
    resource: ResourceDefinition
) -> Dict[str, Any]:
    """단일 레코드 / 목록 구분하여 투영"""
    if isinstance(records, (list, tuple)):
        return project_collection(records, schema, resource)
    return project_record(records, schema, resource)


def field_envelope(
    field_name: str,
    schema: SchemaDocument,
    resource: ResourceDefinition
) -> Dict[str, Any]:
    """필드 envelope (필드가 없으면 {})"""
    definition = schema.get_field(field_name)
    if definition is None:
        return {}

    return {
        "resourceType": "field",
        "data": {
            "fieldName": field_name,
            "type": list(definition.type) if definition.is_array else definition.type,
            "hidden": definition.hidden,
            "required": definition.required,
            "systemLevel": definition.systemLevel,
        },
        "link": _self_link(resource.field_href(field_name)),
    }


def schema_envelope(schema: SchemaDocument, resource: ResourceDefinition) -> Dict[str, Any]:
    """스키마 전체 envelope"""
    return {
        "resourceType": "schema",
        "data": {
            "schemaName": schema.schemaName,
            "collectionName": schema.collectionName,
            "historyCollectionName": schema.historyCollectionName,
            "version": schema.version,
            "fields": [field_envelope(name, schema, resource) for name in schema.fields],
        },
        "link": _self_link(resource.fields_href),
    }


def error_envelope(status: Union[str, int], message: str) -> Dict[str, Any]:
    """에러 envelope"""
    return {
        "resourceType": "error",
        "errors": [{
            "version": API_VERSION,
            "status": status,
            "message": message,
        }],
    }
