"""
Record Projector Tests
레코드 / 스키마 envelope 생성 테스트
"""

from app.services.projection import (
    error_envelope,
    field_envelope,
    project,
    project_collection,
    project_record,
    schema_envelope,
)
from app.services.resources import FINANCE, K12
from app.services.schema_registry import FieldDefinition


RECORD = {
    "financeID": "f1",
    "version": 3,
    "accountName": "ops",
    "amount": 10.0,
    "ssn": "123-45-6789",
    "legacy": "dropped from schema",
}


class TestProjectRecord:
    """단일 레코드 투영"""

    def test_envelope_shape(self, finance_schema):
        """resourceType / id / version / data / link"""
        output = project_record(RECORD, finance_schema, FINANCE)

        assert output["resourceType"] == "finance"
        assert output["financeID"] == "f1"
        assert output["version"] == 3
        assert output["link"] == {"rel": "self", "href": "/api/v1/finances/f1"}

    def test_hidden_and_identity_fields_excluded(self, finance_schema):
        """숨김 필드와 식별 필드는 data 에 없음"""
        data = project_record(RECORD, finance_schema, FINANCE)["data"]
        assert "ssn" not in data
        assert "financeID" not in data
        assert "version" not in data

    def test_data_follows_schema_order(self, finance_schema):
        """data 키는 스키마 순서, 레코드에 없는 값은 None"""
        data = project_record(RECORD, finance_schema, FINANCE)["data"]
        assert list(data) == ["accountName", "amount", "currency", "transactionDate", "isPaid", "tags"]
        assert data["currency"] is None

    def test_fields_not_in_schema_dropped(self, finance_schema):
        """스키마에 없는 레코드 키는 출력 안 함"""
        assert "legacy" not in project_record(RECORD, finance_schema, FINANCE)["data"]

    def test_newly_hidden_field(self, finance_schema):
        """hidden 으로 바뀐 필드는 즉시 숨김"""
        schema = finance_schema.with_field("amount", FieldDefinition(type="Number", hidden=True))
        assert "amount" not in project_record(RECORD, schema, FINANCE)["data"]

    def test_none_record(self, finance_schema):
        """None -> 빈 envelope"""
        assert project_record(None, finance_schema, FINANCE) == {}
        assert project(None, finance_schema, FINANCE) == {}


class TestProjectCollection:
    """레코드 목록 투영"""

    def test_collection(self, finance_schema):
        """목록 envelope"""
        output = project_collection([RECORD, RECORD], finance_schema, FINANCE)
        assert output["resourceType"] == "finances"
        assert len(output["finances"]) == 2
        assert output["link"]["href"] == "/api/v1/finances"

    def test_project_dispatches_on_list(self, finance_schema):
        """리스트면 목록 envelope"""
        assert project([], finance_schema, FINANCE) == {
            "resourceType": "finances",
            "finances": [],
            "link": {"rel": "self", "href": "/api/v1/finances"},
        }


class TestSchemaEnvelopes:
    """필드 / 스키마 / 에러 envelope"""

    def test_field_envelope(self, finance_schema):
        """필드 envelope"""
        assert field_envelope("tags", finance_schema, FINANCE) == {
            "resourceType": "field",
            "data": {
                "fieldName": "tags",
                "type": ["String"],
                "hidden": False,
                "required": False,
                "systemLevel": False,
            },
            "link": {"rel": "self", "href": "/spi/v1/finance/schema/fields/tags"},
        }

    def test_missing_field_envelope(self, finance_schema):
        """없는 필드 -> {}"""
        assert field_envelope("nope", finance_schema, FINANCE) == {}

    def test_schema_envelope(self, k12_schema):
        """스키마 envelope (모든 필드 포함)"""
        output = schema_envelope(k12_schema, K12)
        assert output["resourceType"] == "schema"
        assert output["data"]["schemaName"] == "k12"
        assert output["data"]["collectionName"] == "k12"
        names = [f["data"]["fieldName"] for f in output["data"]["fields"]]
        assert names == k12_schema.field_names()
        assert output["link"]["href"] == "/spi/v1/k12/schema/fields"

    def test_error_envelope(self):
        """에러 envelope"""
        assert error_envelope(404, "gone") == {
            "resourceType": "error",
            "errors": [{"version": "v1", "status": 404, "message": "gone"}],
        }
