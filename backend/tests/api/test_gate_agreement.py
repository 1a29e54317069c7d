"""The client-side gate and the server-side route gates agree on every flag combination."""

import itertools
import uuid

import pytest

from serious_people.client import gate as client_gate
from serious_people.domain.journey import CompletionState, JourneyStep, gate

pytestmark = pytest.mark.integration

FLAGS = CompletionState.flag_names()

# (method, path, required step, status when the gate lets the request through)
GATED_ROUTES = [
    ("GET", "/api/serious-plan/latest", JourneyStep.GRADUATION, 404),
    ("GET", "/api/serious-plan/letter", JourneyStep.GRADUATION, 404),
    ("POST", f"/api/serious-plan/artifacts/{uuid.UUID(int=0)}/regenerate", JourneyStep.SERIOUS_PLAN, 404),
]


def _combinations():
    for values in itertools.product([False, True], repeat=len(FLAGS)):
        user_id = "user-" + "".join("1" if v else "0" for v in values)
        yield user_id, values


async def test_client_gate_matches_domain_for_every_step(client, seed_user, auth_headers):
    for user_id, values in _combinations():
        await seed_user(user_id, flags=[name for name, value in zip(FLAGS, values) if value], with_context=False)
        journey = (await client.get("/api/journey", headers=auth_headers(user_id))).json()
        state = CompletionState(**dict(zip(FLAGS, values)))

        for step in JourneyStep:
            assert client_gate.check(step, journey) == gate(step, state), (user_id, step)


async def test_gated_routes_match_client_gate(client, seed_user, auth_headers):
    for user_id, values in _combinations():
        await seed_user(user_id, flags=[name for name, value in zip(FLAGS, values) if value], with_context=False)
        headers = auth_headers(user_id)
        journey = (await client.get("/api/journey", headers=headers)).json()

        for method, path, step, allowed_status in GATED_ROUTES:
            decision = client_gate.check(step, journey)
            response = await client.request(method, path, headers=headers)

            if decision.allowed:
                assert response.status_code == allowed_status, (user_id, path)
            else:
                assert response.status_code == 403, (user_id, path)
                detail = response.json()["detail"]
                assert detail["requiredStep"] == step.value
                assert detail["currentPath"] == decision.redirect_path
                assert detail["currentStep"] == decision.current_step.value


async def test_client_gate_allows_pages_outside_journey(client, auth_headers):
    journey = (await client.get("/api/journey", headers=auth_headers("new-user"))).json()

    assert client_gate.check_path("/settings", journey).allowed is True
    assert client_gate.check_path("/interview", journey).allowed is True
    denied = client_gate.check_path("/module/2", journey)
    assert denied.allowed is False
    assert denied.redirect_path == "/interview"
