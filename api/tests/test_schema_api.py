"""
Schema API Tests
/spi/v1/{resource}/schema 엔드포인트 테스트
"""

import pytest
from lxml import etree

FIELDS_URL = "/spi/v1/finance/schema/fields"


class TestGetSchema:
    """스키마 조회"""

    def test_get_schema(self, client, auth_headers):
        """전체 스키마 + ETag"""
        response = client.get(FIELDS_URL, headers=auth_headers)
        assert response.status_code == 200
        assert response.headers["etag"] == '"1"'

        data = response.json()
        assert data["resourceType"] == "schema"
        assert data["data"]["schemaName"] == "finance"
        names = [f["data"]["fieldName"] for f in data["data"]["fields"]]
        assert names[:2] == ["financeID", "version"]

    def test_get_k12_schema(self, client, auth_headers):
        """k12 스키마"""
        response = client.get("/spi/v1/k12/schema/fields", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["data"]["schemaName"] == "k12"

    def test_get_field(self, client, auth_headers):
        """필드 조회"""
        response = client.get(f"{FIELDS_URL}/amount", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["resourceType"] == "field"
        assert data["data"] == {
            "fieldName": "amount",
            "type": "Number",
            "hidden": False,
            "required": True,
            "systemLevel": False,
        }
        assert data["link"]["href"] == f"{FIELDS_URL}/amount"

    def test_get_missing_field(self, client, auth_headers):
        """없는 필드 -> 404 에러 envelope"""
        response = client.get(f"{FIELDS_URL}/nope", headers=auth_headers)
        assert response.status_code == 404
        assert response.json() == {
            "resourceType": "error",
            "errors": [{
                "version": "v1",
                "status": 404,
                "message": "The request resource is not found",
            }],
        }


class TestMutations:
    """필드 추가 / 수정 / 삭제"""

    def test_add_field(self, client, auth_headers):
        """추가 -> 201"""
        response = client.post(
            f"{FIELDS_URL}/sku",
            json={"type": "String", "required": "true"},
            headers=auth_headers
        )
        assert response.status_code == 201
        assert response.json()["data"]["required"] is True

        schema = client.get(FIELDS_URL, headers=auth_headers)
        assert schema.headers["etag"] == '"2"'

    def test_add_duplicate(self, client, auth_headers):
        """중복 -> 409"""
        response = client.post(f"{FIELDS_URL}/amount", json={"type": "Number"}, headers=auth_headers)
        assert response.status_code == 409
        assert response.json()["errors"][0]["message"] == "The Field amount already exists."

    @pytest.mark.parametrize("body", [
        {"type": "Integer"},
        {"type": ["Number", "String"]},
        {"required": "true"},
        {"type": "String", "systemLevel": True},
    ])
    def test_add_invalid(self, client, auth_headers, body):
        """잘못된 정의 -> 400"""
        response = client.post(f"{FIELDS_URL}/score", json=body, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["resourceType"] == "error"

    def test_add_malformed_json(self, client, auth_headers):
        """잘못된 JSON 본문 -> 400"""
        response = client.post(
            f"{FIELDS_URL}/score",
            content=b"{not json",
            headers={**auth_headers, "Content-Type": "application/json"}
        )
        assert response.status_code == 400

    def test_update_field(self, client, auth_headers):
        """수정"""
        response = client.put(
            f"{FIELDS_URL}/currency",
            json={"type": "String", "hidden": "true"},
            headers=auth_headers
        )
        assert response.status_code == 200
        assert response.json()["data"]["hidden"] is True

    def test_update_system_field(self, client, auth_headers):
        """systemLevel 필드 수정 -> 400"""
        response = client.put(f"{FIELDS_URL}/financeID", json={"type": "Number"}, headers=auth_headers)
        assert response.status_code == 400

    def test_update_with_system_level(self, client, auth_headers):
        """일반 필드에 systemLevel true 지정 -> 400, 변경 없음"""
        response = client.put(
            f"{FIELDS_URL}/amount",
            json={"type": "Number", "systemLevel": True},
            headers=auth_headers
        )
        assert response.status_code == 400

        data = client.get(f"{FIELDS_URL}/amount", headers=auth_headers).json()["data"]
        assert data["systemLevel"] is False
        assert data["required"] is True

    def test_update_with_fetched_definition(self, client, auth_headers):
        """조회한 필드 data 를 그대로 PUT -> 200"""
        data = client.get(f"{FIELDS_URL}/currency", headers=auth_headers).json()["data"]
        data["hidden"] = True

        response = client.put(f"{FIELDS_URL}/currency", json=data, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["data"]["hidden"] is True

    def test_delete_field(self, client, auth_headers):
        """삭제 -> 204, 이후 404"""
        response = client.delete(f"{FIELDS_URL}/currency", headers=auth_headers)
        assert response.status_code == 204
        assert response.content == b""

        assert client.get(f"{FIELDS_URL}/currency", headers=auth_headers).status_code == 404

    def test_delete_missing(self, client, auth_headers):
        """없는 필드 삭제 -> 404"""
        assert client.delete(f"{FIELDS_URL}/nope", headers=auth_headers).status_code == 404


class TestIfMatch:
    """If-Match 리비전 확인"""

    def test_matching_revision(self, client, auth_headers):
        """현재 리비전 -> 적용"""
        etag = client.get(FIELDS_URL, headers=auth_headers).headers["etag"]
        response = client.post(
            f"{FIELDS_URL}/sku",
            json={"type": "String"},
            headers={**auth_headers, "If-Match": etag}
        )
        assert response.status_code == 201

    def test_stale_revision(self, client, auth_headers):
        """오래된 리비전 -> 409"""
        etag = client.get(FIELDS_URL, headers=auth_headers).headers["etag"]
        client.post(f"{FIELDS_URL}/a", json={"type": "String"}, headers=auth_headers)

        response = client.delete(f"{FIELDS_URL}/a", headers={**auth_headers, "If-Match": etag})
        assert response.status_code == 409

    def test_invalid_header(self, client, auth_headers):
        """숫자가 아닌 If-Match -> 400"""
        response = client.post(
            f"{FIELDS_URL}/sku",
            json={"type": "String"},
            headers={**auth_headers, "If-Match": "abc"}
        )
        assert response.status_code == 400


class TestXml:
    """XML 요청 / 응답"""

    def test_xml_response(self, client, auth_headers):
        """Accept: application/xml"""
        response = client.get(
            f"{FIELDS_URL}/tags",
            headers={**auth_headers, "Accept": "application/xml"}
        )
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/xml")

        root = etree.fromstring(response.content)
        assert root.tag == "root"
        assert root.findtext("data/fieldName") == "tags"
        assert root.findtext("data/type/item") == "String"

    def test_xml_request_body(self, client, auth_headers):
        """XML 본문으로 필드 추가"""
        response = client.post(
            f"{FIELDS_URL}/scores",
            content=b"<root><type><item>Number</item></type><required>true</required></root>",
            headers={**auth_headers, "Content-Type": "application/xml"}
        )
        assert response.status_code == 201
        assert response.json()["data"]["type"] == ["Number"]
        assert response.json()["data"]["required"] is True

    def test_xml_error(self, client, auth_headers):
        """XML 에러 envelope"""
        response = client.get(
            f"{FIELDS_URL}/nope",
            headers={**auth_headers, "Accept": "application/xml"}
        )
        assert response.status_code == 404
        root = etree.fromstring(response.content)
        assert root.findtext("resourceType") == "error"
        assert root.findtext("errors/error/status") == "404"

    def test_not_acceptable(self, client, auth_headers):
        """지원하지 않는 Accept -> 406"""
        response = client.get(FIELDS_URL, headers={**auth_headers, "Accept": "image/png"})
        assert response.status_code == 406
        assert response.json()["errors"][0]["status"] == 406


class TestSchemaPersistenceFailure:
    """저장 실패 시 HTTP 동작"""

    def test_persist_failure_returns_500(self, client, auth_headers, app, failing_store):
        """저장 실패 -> 500, 스키마 변경 없음"""
        from app.services.schema_registry import SchemaRegistry

        context = app.state.container.resource("finance")
        context._registry = SchemaRegistry(failing_store, model_adapter=context.record_model)

        response = client.post(f"{FIELDS_URL}/sku", json={"type": "String"}, headers=auth_headers)
        assert response.status_code == 500
        assert response.json()["resourceType"] == "error"

        assert client.get(f"{FIELDS_URL}/sku", headers=auth_headers).status_code == 404
