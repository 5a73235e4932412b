"""
Assessment Routes Tests
=======================

Tests for the Assessment Service HTTP API.

Version: 0.1.0
"""

import json
import uuid

import pytest
from fastapi import status


PDF = b"%PDF-1.7\n%evidence\n"


def form(payload: dict) -> dict[str, str]:
    return {"data": json.dumps(payload)}


# =============================================================================
# Service Endpoints
# =============================================================================


class TestServiceEndpoints:
    """Tests for health and root endpoints."""

    @pytest.mark.asyncio
    async def test_root(self, assessment_client) -> None:
        response = await assessment_client.get("/")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["service"] == "Bastion Assessment Service"

    @pytest.mark.asyncio
    async def test_health_reports_evidence_store(self, assessment_client) -> None:
        response = await assessment_client.get("/api/v1/health")

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["components"]["evidence_store"]["backend"] == "memory"
        assert "X-Request-ID" in response.headers

    @pytest.mark.asyncio
    async def test_requires_authentication(self, assessment_client) -> None:
        response = await assessment_client.get("/api/v1/frameworks")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error_code"] == "unauthorized"


# =============================================================================
# Framework Endpoints
# =============================================================================


class TestFrameworkRoutes:
    """Tests for framework browsing."""

    @pytest.mark.asyncio
    async def test_list_frameworks(self, assessment_client, auth_headers, seeded_catalogue) -> None:
        response = await assessment_client.get("/api/v1/frameworks", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        assert {f["name"] for f in response.json()} == {"Test Framework", "Empty Framework"}

    @pytest.mark.asyncio
    async def test_controls_joined_and_paginated(self, assessment_client, auth_headers, seeded_catalogue) -> None:
        await assessment_client.post(
            "/api/v1/assessments",
            data=form({"control_id": str(seeded_catalogue.control_ids["AC-1"]), "status": "compliant"}),
            headers=auth_headers,
        )

        response = await assessment_client.get(
            f"/api/v1/frameworks/{seeded_catalogue.framework_id}/controls",
            params={"page": 1, "page_size": 2},
            headers=auth_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["total"] == 3
        assert body["pages"] == 2
        assert len(body["items"]) == 2
        first = body["items"][0]
        assert first["control"]["control_code"] == "AC-1"
        assert first["assessment"]["status"] == "compliant"
        assert body["items"][1]["assessment"] is None

    @pytest.mark.asyncio
    async def test_unknown_framework(self, assessment_client, auth_headers, seeded_catalogue) -> None:
        response = await assessment_client.get(
            f"/api/v1/frameworks/{uuid.uuid4()}/controls", headers=auth_headers
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        body = response.json()
        assert body["success"] is False
        assert body["error_code"] == "not_found"

    @pytest.mark.asyncio
    async def test_families(self, assessment_client, auth_headers, seeded_catalogue) -> None:
        response = await assessment_client.get(
            f"/api/v1/frameworks/{seeded_catalogue.framework_id}/families", headers=auth_headers
        )

        assert response.json() == ["Access Control", "Audit"]


# =============================================================================
# Assessment Endpoints
# =============================================================================


class TestAssessmentRoutes:
    """Tests for assessment submission and evidence."""

    @pytest.mark.asyncio
    async def test_submit_with_evidence(self, assessment_client, auth_headers, seeded_catalogue, org_id) -> None:
        control_id = seeded_catalogue.control_ids["AC-1"]

        response = await assessment_client.post(
            "/api/v1/assessments",
            data=form({"control_id": str(control_id), "status": "partially_compliant", "comments": "in progress"}),
            files={"evidence_file": ("policy.pdf", PDF, "application/pdf")},
            headers=auth_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        assessment = response.json()["assessment"]
        assert assessment["score"] == 50
        assert assessment["evidence_ref"].startswith(f"{org_id}/evidence/{control_id}/")

        url_response = await assessment_client.get(
            f"/api/v1/assessments/{assessment['id']}/evidence-url",
            params={"ttl_minutes": 5},
            headers=auth_headers,
        )
        assert url_response.status_code == status.HTTP_200_OK
        assert url_response.json()["expires_in_minutes"] == 5

        delete_response = await assessment_client.delete(
            f"/api/v1/assessments/{assessment['id']}/evidence", headers=auth_headers
        )
        assert delete_response.status_code == status.HTTP_200_OK
        assert delete_response.json()["evidence_ref"] is None

    @pytest.mark.asyncio
    async def test_storage_outage_is_retryable(
        self, assessment_client, auth_headers, seeded_catalogue, evidence_store
    ) -> None:
        evidence_store.fail_uploads = True
        control_id = str(seeded_catalogue.control_ids["AC-1"])

        response = await assessment_client.post(
            "/api/v1/assessments",
            data=form({"control_id": control_id, "status": "compliant"}),
            files={"evidence_file": ("policy.pdf", PDF, "application/pdf")},
            headers=auth_headers,
        )

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        body = response.json()
        assert body["error_code"] == "storage_unavailable"
        assert body["details"]["retryable"] is True

        lookup = await assessment_client.get(f"/api/v1/assessments/controls/{control_id}", headers=auth_headers)
        assert lookup.status_code == status.HTTP_404_NOT_FOUND

        retry = await assessment_client.post(
            "/api/v1/assessments",
            data=form({"control_id": control_id, "status": "compliant"}),
            headers=auth_headers,
        )
        assert retry.status_code == status.HTTP_200_OK

        lookup = await assessment_client.get(f"/api/v1/assessments/controls/{control_id}", headers=auth_headers)
        assert lookup.json()["evidence_ref"] is None

    @pytest.mark.asyncio
    async def test_invalid_payload(self, assessment_client, auth_headers, seeded_catalogue) -> None:
        response = await assessment_client.post(
            "/api/v1/assessments",
            data=form({"control_id": str(seeded_catalogue.control_ids["AC-1"]), "status": "compliant", "score": 120}),
            headers=auth_headers,
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["error_code"] == "validation_error"

    @pytest.mark.asyncio
    async def test_missing_data_field(self, assessment_client, auth_headers) -> None:
        response = await assessment_client.post("/api/v1/assessments", data={}, headers=auth_headers)

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["error_code"] == "validation_error"

    @pytest.mark.asyncio
    async def test_cross_organization_submission(
        self, assessment_client, auth_headers, seeded_catalogue, other_org_id
    ) -> None:
        response = await assessment_client.post(
            "/api/v1/assessments",
            data=form({
                "control_id": str(seeded_catalogue.control_ids["AC-1"]),
                "status": "compliant",
                "organization_id": str(other_org_id),
            }),
            headers=auth_headers,
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["error_code"] == "forbidden"


# =============================================================================
# Organization Endpoints
# =============================================================================


class TestOrganizationRoutes:
    """Tests for per-organization views."""

    @pytest.mark.asyncio
    async def test_assessments_and_score(self, assessment_client, auth_headers, seeded_catalogue, org_id) -> None:
        for code, control_status in [("AC-1", "compliant"), ("AU-1", "non_compliant")]:
            await assessment_client.post(
                "/api/v1/assessments",
                data=form({"control_id": str(seeded_catalogue.control_ids[code]), "status": control_status}),
                headers=auth_headers,
            )

        base = f"/api/v1/organizations/{org_id}/frameworks/{seeded_catalogue.framework_id}"

        listing = await assessment_client.get(f"{base}/assessments", params={"status": "compliant"}, headers=auth_headers)
        assert listing.json()["total"] == 1

        score = await assessment_client.get(f"{base}/score", headers=auth_headers)
        assert score.status_code == status.HTTP_200_OK
        assert score.json()["score"] == 50.0
        assert score.json()["assessed_controls"] == 2

    @pytest.mark.asyncio
    async def test_other_organization_forbidden(
        self, assessment_client, auth_headers, seeded_catalogue, other_org_id
    ) -> None:
        response = await assessment_client.get(
            f"/api/v1/organizations/{other_org_id}/frameworks/{seeded_catalogue.framework_id}/score",
            headers=auth_headers,
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN


# =============================================================================
# Maturity Endpoints
# =============================================================================


class TestMaturityRoutes:
    """Tests for maturity assessments and practice evaluations."""

    @pytest.mark.asyncio
    async def test_practice_evaluation_flow(self, assessment_client, auth_headers, seeded_catalogue) -> None:
        created = await assessment_client.post("/api/v1/maturity/assessments", headers=auth_headers)
        assert created.status_code == status.HTTP_200_OK
        assessment_id = created.json()["id"]

        for code in ("P1", "P2"):
            response = await assessment_client.post(
                f"/api/v1/assessments/{assessment_id}/practices/{seeded_catalogue.practice_ids[code]}",
                json={"status": "fully_implemented"},
                headers=auth_headers,
            )
            assert response.status_code == status.HTTP_200_OK

        assert response.json()["achieved_tier"] == 1
        assert response.json()["evaluation"]["status"] == "fully_implemented"

        detail = await assessment_client.get(f"/api/v1/maturity/assessments/{assessment_id}", headers=auth_headers)
        assert detail.json()["achieved_tier"] == 1
        assert len(detail.json()["evaluations"]) == 2

        summary = await assessment_client.get(
            f"/api/v1/maturity/assessments/{assessment_id}/summary", headers=auth_headers
        )
        assert summary.json()["max_tier"] == 2

    @pytest.mark.asyncio
    async def test_unknown_practice(self, assessment_client, auth_headers, seeded_catalogue) -> None:
        created = await assessment_client.post("/api/v1/maturity/assessments", headers=auth_headers)

        response = await assessment_client.post(
            f"/api/v1/assessments/{created.json()['id']}/practices/{uuid.uuid4()}",
            json={"status": "fully_implemented"},
            headers=auth_headers,
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_invalid_status(self, assessment_client, auth_headers, seeded_catalogue) -> None:
        created = await assessment_client.post("/api/v1/maturity/assessments", headers=auth_headers)

        response = await assessment_client.post(
            f"/api/v1/assessments/{created.json()['id']}/practices/{seeded_catalogue.practice_ids['P1']}",
            json={"status": "mostly_done"},
            headers=auth_headers,
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    @pytest.mark.asyncio
    async def test_catalogue_listing(self, assessment_client, auth_headers, seeded_catalogue) -> None:
        domains = await assessment_client.get("/api/v1/maturity/domains", headers=auth_headers)
        assert [d["code"] for d in domains.json()] == ["ASSET", "RISK"]

        practices = await assessment_client.get(
            f"/api/v1/maturity/domains/{seeded_catalogue.domain_ids['RISK']}/practices",
            headers=auth_headers,
        )
        assert [p["code"] for p in practices.json()] == ["P1", "P3"]
