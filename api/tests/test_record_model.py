"""
Record Model Tests
스키마 기반 레코드 검증 테스트
"""

from datetime import datetime

import pytest

from app.exceptions import InternalServiceError, RecordBadInputError
from app.services.record_model import RecordModel


@pytest.fixture
def model(finance_schema):
    record_model = RecordModel("finance")
    record_model.refresh(finance_schema)
    return record_model


class TestRecordModel:
    """RecordModel 테스트"""

    def test_not_initialised(self):
        """refresh 전에는 모델 없음"""
        with pytest.raises(InternalServiceError):
            RecordModel("finance").model

    def test_valid_payload(self, model):
        """정상 입력 변환"""
        values = model.validate({
            "accountName": "ops",
            "amount": "12.5",
            "transactionDate": "2024-03-01T10:00:00",
            "isPaid": True,
            "tags": ["a", "b"],
        })
        assert values["accountName"] == "ops"
        assert values["amount"] == 12.5
        assert values["transactionDate"] == datetime(2024, 3, 1, 10, 0, 0)
        assert values["tags"] == ["a", "b"]

    def test_only_supplied_fields_returned(self, model):
        """입력에 없던 선택 필드는 결과에 없음"""
        values = model.validate({"accountName": "ops", "amount": 1})
        assert set(values) == {"accountName", "amount"}

    def test_missing_required(self, model):
        """필수 필드 누락"""
        with pytest.raises(RecordBadInputError) as exc_info:
            model.validate({"accountName": "ops"})
        assert "amount" in exc_info.value.message

    def test_unknown_field(self, model):
        """스키마에 없는 필드"""
        with pytest.raises(RecordBadInputError):
            model.validate({"accountName": "ops", "amount": 1, "color": "red"})

    def test_system_field_rejected(self, model):
        """systemLevel 필드는 입력 불가"""
        with pytest.raises(RecordBadInputError):
            model.validate({"accountName": "ops", "amount": 1, "financeID": "x"})

    def test_wrong_type(self, model):
        """타입 불일치"""
        with pytest.raises(RecordBadInputError):
            model.validate({"accountName": "ops", "amount": "lots"})

    def test_not_an_object(self, model):
        """객체가 아닌 본문"""
        with pytest.raises(RecordBadInputError):
            model.validate(["ops"])

    def test_refresh_tracks_schema_changes(self, model, finance_schema):
        """스키마 변경 반영"""
        schema = finance_schema.without_field("currency")
        model.refresh(schema)

        assert model.schema is schema
        assert model.refresh_count == 2
        with pytest.raises(RecordBadInputError):
            model.validate({"accountName": "ops", "amount": 1, "currency": "EUR"})

    def test_field_named_like_model_attribute(self, finance_schema):
        """BaseModel 속성과 같은 이름의 필드"""
        from app.services.schema_registry import FieldDefinition

        schema = finance_schema.with_field("schema", FieldDefinition(type="String"))
        record_model = RecordModel("finance")
        record_model.refresh(schema)

        values = record_model.validate({"accountName": "ops", "amount": 1, "schema": "s"})
        assert values["schema"] == "s"
