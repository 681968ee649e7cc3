"""HTTP surface tests with the registry swapped for one backed by a fake model."""

import pytest
from fastapi.testclient import TestClient

from adcanvas.agents.base import ModelRegistry
from adcanvas.api.deps import get_registry
from adcanvas.errors import ExternalServiceError
from adcanvas.main import app
from adcanvas.models.creative import DesignOption, DesignOptions
from adcanvas.models.requests import AutoFixRequest
from adcanvas.registry import Registry
from tests.conftest import FakeStructuredModel, make_design


def _option(id, confidence=0.9):
    return DesignOption.model_validate({
        "id": id,
        "elements": [{"id": f"{id}-cta", "type": "shape", "style": {"backgroundColor": "#FF9900"}}],
        "confidence": confidence,
        "modifications": ["Add CTA"],
        "brandConsistencyScore": 0.9,
    })


@pytest.fixture
def fake():
    return FakeStructuredModel(error=ExternalServiceError("no model in tests"))


@pytest.fixture
def client(rules, workflow_config, fake):
    registry = Registry(rules, ModelRegistry(factory=lambda spec: fake), workflow_config)
    app.dependency_overrides[get_registry] = lambda: registry
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def canvas():
    return make_design().to_wire()


class TestHealthAndDiscovery:

    def test_health(self, client):
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["dependencies"]["platform_rules"]["status"] == "healthy"

    def test_platforms(self, client):
        response = client.get("/api/v1/platforms")
        assert response.status_code == 200
        assert [p["platform"] for p in response.json()] == ["amazon", "walmart", "flipkart"]
        assert response.json()[0]["displayName"] == "Amazon Ads"


class TestRoute:

    def test_route_falls_back_when_model_unavailable(self, client, canvas):
        response = client.post("/api/v1/route", json={
            "canvasState": canvas,
            "userRequest": "Check if this meets Amazon guidelines",
        })
        assert response.status_code == 200
        body = response.json()
        assert body["category"] == "validate"
        assert body["confidence"] == 0.5
        assert body["needsClarification"] is True

    def test_missing_fields_is_400(self, client):
        response = client.post("/api/v1/route", json={"userRequest": "hi"})
        assert response.status_code == 400
        assert response.json()["error"] == "validation_input_error"


class TestValidate:

    def test_compliant_canvas(self, client, canvas):
        response = client.post("/api/v1/validate", json={"canvasState": canvas, "platform": "amazon"})
        assert response.status_code == 200
        body = response.json()
        assert body["isCompliant"] is True
        assert body["overallScore"] == 100
        assert body["tier"] == "rule_engine"

    def test_instant_tier(self, client):
        canvas = make_design(height=500).to_wire()
        response = client.post("/api/v1/validate", json={
            "canvasState": canvas, "platform": "amazon", "tier": "instant",
        })
        body = response.json()
        assert body["tier"] == "instant"
        assert [v["rule"] for v in body["violations"]] == ["dimensions"]
        assert body["violations"][0]["autoFixAvailable"] is False

    def test_model_outage_reports_rule_engine(self, client, canvas):
        response = client.post("/api/v1/validate", json={
            "canvasState": canvas, "platform": "amazon", "tier": "llm",
        })
        assert response.status_code == 200
        assert response.json()["tier"] == "rule_engine"

    def test_unknown_platform_is_400(self, client, canvas):
        response = client.post("/api/v1/validate", json={"canvasState": canvas, "platform": "etsy"})
        assert response.status_code == 400
        assert "Unsupported platform" in response.json()["message"]

    def test_unknown_tier_is_400(self, client, canvas):
        response = client.post("/api/v1/validate", json={
            "canvasState": canvas, "platform": "amazon", "tier": "deep",
        })
        assert response.status_code == 400

    def test_auto_fix_round_trip(self, client):
        canvas = make_design(elements=[
            {"id": "t", "type": "text", "content": "Sale", "style": {"fontSize": 10, "fontFamily": "Arial"}},
        ]).to_wire()
        validation = client.post("/api/v1/validate", json={"canvasState": canvas, "platform": "amazon"}).json()

        response = client.post("/api/v1/validate/auto-fix", json={
            "canvasState": canvas,
            "violations": validation["violations"],
        })
        assert response.status_code == 200
        fixed = response.json()["canvasState"]
        assert fixed["elements"][0]["style"]["fontSize"] == 14

    def test_auto_fix_unknown_metadata_platform_is_400(self, client):
        canvas = make_design(metadata={"version": 0, "platform": "ebay"}).to_wire()
        response = client.post("/api/v1/validate/auto-fix", json={"canvasState": canvas, "violations": []})
        assert response.status_code == 400
        assert response.json()["error"] == "validation_input_error"
        assert "Unsupported platform" in response.json()["message"]

    def test_auto_fix_explicit_platform_overrides_metadata(self, client):
        canvas = make_design(metadata={"version": 0, "platform": "ebay"}).to_wire()
        response = client.post("/api/v1/validate/auto-fix", json={
            "canvasState": canvas, "violations": [], "platform": "walmart",
        })
        assert response.status_code == 200

    def test_auto_fix_without_violations_is_400(self, client, canvas):
        response = client.post("/api/v1/validate/auto-fix", json={"canvasState": canvas})
        assert response.status_code == 400
        assert "violations" in response.json()["message"]


class TestCreative:

    def test_two_options_pause_for_review(self, client, fake, canvas):
        fake.error = None
        fake.responses[DesignOptions] = DesignOptions(options=[_option("option-1"), _option("option-2")])

        response = client.post("/api/v1/creative", json={
            "canvasState": canvas, "platform": "amazon", "userRequest": "Add a CTA",
        })
        assert response.status_code == 200
        body = response.json()
        assert body["requiresHITL"] is True
        assert body["phase"] == "review"
        assert len(body["designOptions"]) == 2

    def test_decision_applies_selected_option(self, client, fake, canvas):
        options = [_option("option-1").to_wire(), _option("option-2").to_wire()]
        response = client.post("/api/v1/creative/decision", json={
            "canvasState": canvas,
            "platform": "amazon",
            "designOptions": options,
            "decision": {"approved": True, "selectedOptionId": "option-2"},
        })
        assert response.status_code == 200
        body = response.json()
        assert body["phase"] == "apply"
        assert body["canvasState"]["elements"][-1]["id"] == "option-2-cta"
        assert body["canvasState"]["metadata"]["version"] == 1

    def test_decision_for_missing_option_is_workflow_error(self, client, canvas):
        response = client.post("/api/v1/creative/decision", json={
            "canvasState": canvas,
            "platform": "amazon",
            "designOptions": [_option("option-1").to_wire()],
            "decision": {"approved": True, "selectedOptionId": "nope"},
        })
        assert response.status_code == 500
        assert response.json()["error"] == "workflow_state_error"

    def test_planner_outage_returns_unchanged_canvas(self, client, canvas):
        response = client.post("/api/v1/creative", json={
            "canvasState": canvas, "platform": "amazon", "userRequest": "Add a CTA",
        })
        body = response.json()
        assert response.status_code == 200
        assert body["phase"] == "review"
        assert body["requiresHITL"] is False
        assert body["designOptions"] == []
        assert body["canvasState"]["metadata"]["version"] == 0


class TestWorkflow:

    def test_validate_request_end_to_end(self, client, canvas):
        response = client.post("/api/v1/workflow", json={
            "canvasState": canvas,
            "userRequest": "Check if this meets Amazon guidelines",
        })
        assert response.status_code == 200
        body = response.json()
        assert body["routing"]["category"] == "validate"
        assert body["validation"]["isCompliant"] is True
        assert body.get("creative") is None


class TestAutoFixRequest:

    def test_platform_falls_back_to_metadata_then_amazon(self):
        canvas = make_design(metadata={"version": 0, "platform": "Flipkart"}).to_wire()
        assert AutoFixRequest.model_validate({"canvasState": canvas, "violations": []}).platform == "flipkart"

        canvas = make_design(metadata={"version": 0}).to_wire()
        assert AutoFixRequest.model_validate({"canvasState": canvas, "violations": []}).platform == "amazon"
