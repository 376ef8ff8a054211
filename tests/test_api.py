import pytest
from httpx import ASGITransport, AsyncClient

from conftest import ADMIN, PROC_USER, TECH_CRITERIA, TECH_USER
from tenderflow.api.deps import analyzer_dependency, storage_dependency
from tenderflow.core.security import create_access_token
from tenderflow.main import app
from tenderflow.schemas.analysis import AnalysisResult
from tenderflow.services.storage_service import LocalStorage


class StaticAnalyzer:
    async def analyze(self, document, file_path):
        return AnalysisResult(
            document_type="RFQ", vendor_name="Initech", estimated_budget=1000.0, recommended_total=100.0,
            line_items=[{"name": "Cement", "unit": "bag", "quantity": 10, "estimatedUnitPrice": 5}],
        )


def auth(principal):
    return {"Authorization": f"Bearer {create_access_token(principal)}"}


@pytest.fixture
async def client(session_factory, tmp_path):
    app.dependency_overrides[storage_dependency] = lambda: LocalStorage(str(tmp_path / "files"))
    app.dependency_overrides[analyzer_dependency] = lambda: StaticAnalyzer()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


async def upload(client, principal=TECH_USER):
    response = await client.post(
        "/v1/documents/upload",
        files={"files": ("tender.pdf", b"%PDF-1.4 body", "application/pdf")},
        headers=auth(principal),
    )
    assert response.status_code == 200
    return response.json()["documents"][0]


async def test_health(client):
    response = await client.get("/v1/health/")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_requests_need_a_valid_token(client):
    assert (await client.get("/v1/documents/anything")).status_code == 401

    response = await client.get("/v1/documents/anything", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json() == {"detail": "Invalid access token"}


async def test_upload_processes_in_background(client):
    created = await upload(client)

    response = await client.get(f"/v1/documents/{created['id']}", headers=auth(ADMIN))
    body = response.json()
    assert response.status_code == 200
    assert body["status"] == "COMPLETED"
    assert body["workflowStage"] == "PRE_FEASIBILITY"
    assert body["vendorName"] == "Initech"
    assert body["techCriteria"] == []
    assert response.headers["ETag"] == str(body["version"])


async def test_unknown_document_is_404(client):
    response = await client.get("/v1/documents/missing/status", headers=auth(ADMIN))

    assert response.status_code == 404
    assert "missing" in response.json()["detail"]


async def test_evaluation_flow_over_http(client):
    document_id = (await upload(client))["id"]

    response = await client.post(
        f"/v1/documents/{document_id}/setup-criteria",
        json={"techCriteria": TECH_CRITERIA, "assigneeTechId": TECH_USER.id},
        headers=auth(ADMIN),
    )
    assert response.status_code == 200
    etag = response.headers["ETag"]

    response = await client.post(
        f"/v1/documents/{document_id}/pre-feasibility",
        json={"legalPass": True, "bidBondPass": True, "financePass": True, "overallPass": True},
        headers={**auth(TECH_USER), "If-Match": f'"{etag}"'},
    )
    assert response.status_code == 200

    response = await client.post(
        f"/v1/documents/{document_id}/technical-eval",
        json={"criteria": {"c1": 80, "c2": 80}, "lockScore": True},
        headers={**auth(TECH_USER), "If-Match": etag},
    )
    assert response.status_code == 409

    response = await client.post(
        f"/v1/documents/{document_id}/technical-eval",
        json={"criteria": {"c1": 80, "c2": 80}, "lockScore": True},
        headers=auth(TECH_USER),
    )
    assert response.status_code == 200
    assert response.json()["score"] == 80

    response = await client.post(
        f"/v1/documents/{document_id}/financial-eval",
        json={"priceScore": 90, "lockScore": True},
        headers=auth(PROC_USER),
    )
    assert response.status_code == 200

    response = await client.post(f"/v1/documents/{document_id}/approve", json={"status": "APPROVED"}, headers=auth(TECH_USER))
    assert response.status_code == 403

    response = await client.post(f"/v1/documents/{document_id}/approve", json={"status": "APPROVED"}, headers=auth(ADMIN))
    assert response.status_code == 200
    assert response.json()["approverId"] == ADMIN.id

    status = (await client.get(f"/v1/documents/{document_id}/status", headers=auth(PROC_USER))).json()
    assert status["workflowStage"] == "COMPLETED"
    assert status["isTechLocked"] is True
    assert status["isProcLocked"] is True


async def test_validation_errors_are_422(client):
    document_id = (await upload(client))["id"]
    await client.post(
        f"/v1/documents/{document_id}/pre-feasibility",
        json={"legalPass": True, "bidBondPass": True, "financePass": True, "overallPass": True},
        headers=auth(ADMIN),
    )

    response = await client.post(f"/v1/documents/{document_id}/technical-eval", json={"score": 120}, headers=auth(ADMIN))
    assert response.status_code == 422

    response = await client.post(
        f"/v1/documents/{document_id}/technical-eval", json={"criteria": {"unknown": 10}}, headers=auth(ADMIN)
    )
    assert response.status_code == 422
    assert response.json()["errors"][0]["field"] == "criteria.unknown"

    response = await client.post(f"/v1/documents/{document_id}/pre-feasibility", json={"legalPass": True}, headers=auth(ADMIN))
    assert response.status_code == 422


async def test_unlock_and_scoring_config(client):
    document_id = (await upload(client))["id"]
    await client.post(
        f"/v1/documents/{document_id}/pre-feasibility",
        json={"legalPass": True, "bidBondPass": True, "financePass": True, "overallPass": True},
        headers=auth(ADMIN),
    )
    await client.post(f"/v1/documents/{document_id}/technical-eval", json={"score": 70, "lockScore": True}, headers=auth(ADMIN))

    response = await client.post(f"/v1/documents/{document_id}/unlock", json={"evaluationType": "TECHNICAL"}, headers=auth(ADMIN))
    assert response.status_code == 200
    assert response.json()["isTechLocked"] is False
    assert response.json()["workflowStage"] == "TECHNICAL_EVALUATION"

    response = await client.put(
        f"/v1/documents/{document_id}/scoring-config", json={"techWeight": 0.5}, headers=auth(ADMIN)
    )
    assert response.status_code == 200
    assert response.json()["techWeight"] == 0.5


async def test_compare_sorts_by_total_score(client):
    low = (await upload(client))["id"]
    high = (await upload(client))["id"]
    for document_id, score in ((low, 20), (high, 90)):
        await client.post(
            f"/v1/documents/{document_id}/pre-feasibility",
            json={"legalPass": True, "bidBondPass": True, "financePass": True, "overallPass": True},
            headers=auth(ADMIN),
        )
        await client.post(f"/v1/documents/{document_id}/technical-eval", json={"score": score}, headers=auth(ADMIN))
        await client.post(f"/v1/documents/{document_id}/financial-eval", json={"score": score}, headers=auth(ADMIN))

    response = await client.get("/v1/compare", params={"ids": f"{low},missing,{high}"}, headers=auth(PROC_USER))

    body = response.json()
    assert response.status_code == 200
    assert body["total"] == 2
    assert [entry["id"] for entry in body["results"]] == [high, low]
    assert body["results"][0]["totalScore"] == pytest.approx(90)

    assert (await client.get("/v1/compare", params={"ids": " , "}, headers=auth(ADMIN))).status_code == 400


async def test_company_profile_missing_is_404(client):
    assert (await client.get("/v1/company/profile", headers=auth(ADMIN))).status_code == 404


async def test_delete_document(client):
    document_id = (await upload(client))["id"]

    assert (await client.delete(f"/v1/documents/{document_id}", headers=auth(PROC_USER))).status_code == 403
    assert (await client.delete(f"/v1/documents/{document_id}", headers=auth(ADMIN))).status_code == 200
    assert (await client.get(f"/v1/documents/{document_id}", headers=auth(ADMIN))).status_code == 404


async def test_list_and_rename_over_http(client):
    document_id = (await upload(client))["id"]
    await upload(client)

    response = await client.get("/v1/documents/list", params={"limit": 1, "documentType": "RFQ"}, headers=auth(TECH_USER))
    body = response.json()
    assert response.status_code == 200
    assert body["pagination"] == {"page": 1, "limit": 1, "total": 2, "totalPages": 2}
    assert body["documents"][0]["uploadedBy"] == TECH_USER.id
    assert (await client.get("/v1/documents/list", params={"limit": 500}, headers=auth(ADMIN))).status_code == 422

    version = (await client.get(f"/v1/documents/{document_id}/status", headers=auth(ADMIN))).json()["version"]
    response = await client.patch(
        f"/v1/documents/{document_id}", json={"title": "Harbour works"},
        headers={**auth(TECH_USER), "If-Match": str(version)},
    )
    assert response.status_code == 200
    assert response.json()["title"] == "Harbour works"
    assert response.headers["ETag"] == str(version + 1)

    response = await client.patch(
        f"/v1/documents/{document_id}", json={"title": "Again"},
        headers={**auth(TECH_USER), "If-Match": str(version)},
    )
    assert response.status_code == 409


async def test_line_items_and_bidding_config_over_http(client):
    document_id = (await upload(client))["id"]
    detail = (await client.get(f"/v1/documents/{document_id}", headers=auth(ADMIN))).json()
    [item] = detail["lineItems"]
    assert item["totalPrice"] == pytest.approx(50)

    path = f"/v1/documents/{document_id}/line-items/{item['id']}"
    assert (await client.put(path, json={"quantity": 12}, headers=auth(TECH_USER))).status_code == 403
    response = await client.put(path, json={"quantity": 12}, headers=auth(PROC_USER))
    assert response.status_code == 200
    assert response.json()["isManual"] is True
    assert response.json()["totalPrice"] == pytest.approx(60)
    assert (await client.put(f"/v1/documents/{document_id}/line-items/999", json={}, headers=auth(ADMIN))).status_code == 404

    response = await client.post(
        f"/v1/documents/{document_id}/bidding-config",
        json={"riskPremiumPercent": 10, "profitMarginPercent": 20},
        headers=auth(PROC_USER),
    )
    assert response.status_code == 200
    assert response.json()["totalAdjustedBid"] == pytest.approx(130)
    assert response.json()["updatedBy"] == PROC_USER.id

    response = await client.get("/v1/compare", params={"ids": document_id}, headers=auth(ADMIN))
    assert response.json()["results"][0]["biddingConfig"]["totalAdjustedBid"] == pytest.approx(130)


def test_main_serves_on_configured_port(monkeypatch):
    import runpy

    import uvicorn

    from tenderflow.core.config import settings

    calls = []
    monkeypatch.setattr(uvicorn, "run", lambda app, **kwargs: calls.append(kwargs))
    monkeypatch.setattr(settings, "APP_PORT", 9137)

    runpy.run_module("tenderflow.main", run_name="__main__")

    assert calls == [{"host": "0.0.0.0", "port": 9137}]
