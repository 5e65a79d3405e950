from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from app.api import deps
from app.main import create_app


def test_healthcheck_returns_ok() -> None:
    client = TestClient(create_app())
    response = client.get("/v1/health/")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_readiness_reports_unavailable_store() -> None:
    class BrokenSession:
        async def execute(self, *args, **kwargs):
            raise OperationalError("SELECT 1", {}, Exception("unable to open database file"))

    application = create_app()
    application.dependency_overrides[deps.get_db_session] = lambda: BrokenSession()

    response = TestClient(application).get("/v1/health/ready")

    assert response.status_code == 503
    assert response.json() == {"detail": "database unavailable"}


def test_root_reports_service_metadata() -> None:
    response = TestClient(create_app()).get("/")
    assert response.status_code == 200
    assert response.json()["service"] == "TSK Directory API"
