"""
API Tests
앱 공통 동작 (헬스체크, 라우팅, 요청 ID) 테스트
"""

from fastapi.testclient import TestClient

from app.exceptions import InternalServiceError
from app.main import create_app
from app.services.resources import FINANCE


class TestHealth:
    """헬스 체크"""

    def test_health(self, client):
        """리소스별 스키마 리비전 보고"""
        response = client.get("/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert data["components"]["schema:finance"]["details"]["revision"] == 1
        assert data["components"]["schema:k12"]["details"]["schemaName"] == "k12"
        assert "mongodb" not in data["components"]

    def test_health_reports_new_revision(self, client, auth_headers):
        """스키마 변경 후 리비전 증가"""
        client.post("/spi/v1/k12/schema/fields/nickname", json={"type": "String"}, headers=auth_headers)
        data = client.get("/health").json()
        assert data["components"]["schema:k12"]["details"]["revision"] == 2

    def test_health_unhealthy_registry(self, app):
        """스키마 로드 실패 -> 503"""
        class BrokenContext:
            resource = FINANCE

            @property
            def registry(self):
                raise InternalServiceError("Cannot load schema")

        with TestClient(app) as client:
            app.state.container.contexts["finance"] = BrokenContext()

            response = client.get("/health")
            assert response.status_code == 503
            assert response.json()["components"]["schema:finance"]["status"] == "unhealthy"


class TestRouting:
    """라우팅 / 에러 envelope"""

    def test_unknown_url(self, client, auth_headers):
        """없는 URL -> 404 에러 envelope"""
        response = client.get("/api/v1/payroll", headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["errors"][0]["message"] == "The request resource is not found"

    def test_method_not_allowed(self, client, auth_headers):
        """허용되지 않는 메서드 -> 405 에러 envelope"""
        response = client.patch("/api/v1/finances", headers=auth_headers)
        assert response.status_code == 405
        assert response.json()["resourceType"] == "error"


class TestRequestContext:
    """요청 / 상관관계 ID"""

    def test_generated_ids(self, client):
        """ID 생성"""
        response = client.get("/health")
        assert response.headers["x-request-id"]
        assert response.headers["x-correlation-id"]

    def test_propagated_ids(self, client):
        """전달된 ID 재사용"""
        response = client.get("/health", headers={"X-Request-ID": "req-1", "X-Correlation-ID": "corr-1"})
        assert response.headers["x-request-id"] == "req-1"
        assert response.headers["x-correlation-id"] == "corr-1"

    def test_oversized_id_replaced(self, client):
        """너무 긴 ID 는 새로 생성"""
        response = client.get("/health", headers={"X-Request-ID": "x" * 500})
        assert response.headers["x-request-id"] != "x" * 500


class TestFileBackedApp:
    """파일 스키마 저장소로 구동"""

    def test_schema_survives_restart(self, settings, tmp_path, auth_headers):
        """재시작 후에도 변경 유지"""
        settings.schema_store = "file"
        settings.schema_dir = str(tmp_path)

        with TestClient(create_app(settings)) as client:
            response = client.post(
                "/spi/v1/finance/schema/fields/sku",
                json={"type": "String"},
                headers=auth_headers
            )
            assert response.status_code == 201

        assert (tmp_path / "finance_schema.json").exists()

        with TestClient(create_app(settings)) as client:
            response = client.get("/spi/v1/finance/schema/fields/sku", headers=auth_headers)
            assert response.status_code == 200
