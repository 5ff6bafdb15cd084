from __future__ import annotations

from ccr.models.activity_log import ActivityLog
from ccr.models.profile import Profile
from ccr.models.validation_request import ValidationRequest


def _request_role(client, authorize, member, role: str, **extra):
    authorize(member)
    return client.post("/validations", json={"requested_value": role, **extra})


def test_member_requests_role_change(client, authorize, fidele):
    response = _request_role(client, authorize, fidele, "Chef de Famille", reason="Je dirige une famille à Cocody")
    assert response.status_code == 201, response.text
    data = response.json()
    assert data["status"] == "pending"
    assert data["request_type"] == "role_change"
    assert data["current_value"] == "fidele"
    assert data["requested_value"] == "chef_famille"
    assert data["requester_name"] == "Jean Dupont"

    duplicate = client.post("/validations", json={"requested_value": "mobilisateur"})
    assert duplicate.status_code == 409


def test_role_change_request_needs_a_new_known_role(client, authorize, fidele):
    assert _request_role(client, authorize, fidele, "berger").status_code == 400
    assert client.post("/validations", json={"requested_value": "fidele"}).status_code == 400
    assert client.post("/validations", json={"requested_value": "chef_zone", "request_type": "tribu_change"}).status_code == 422


def test_approval_applies_the_requested_role(client, authorize, patriarche, fidele, db_session):
    request_id = _request_role(client, authorize, fidele, "chef_famille").json()["id"]

    authorize(patriarche)
    pending = client.get("/validations/pending")
    assert pending.status_code == 200, pending.text
    assert [item["id"] for item in pending.json()] == [request_id]

    response = client.post(f"/validations/{request_id}/decision", json={"approved": True})
    assert response.status_code == 200, response.text
    data = response.json()
    assert data["status"] == "approved"
    assert data["validator_id"] == patriarche.id
    assert data["validated_at"] is not None

    db_session.expire_all()
    assert db_session.get(Profile, fidele.profile.id).role == "chef_famille"
    actions = {entry.action for entry in db_session.query(ActivityLog).all()}
    assert {"validation_approved", "member_role_changed"} <= actions

    again = client.post(f"/validations/{request_id}/decision", json={"approved": False})
    assert again.status_code == 409
    assert client.get("/validations/pending").json() == []


def test_rejection_keeps_the_current_role(client, authorize, pasteur_principal, fidele, db_session):
    request_id = _request_role(client, authorize, fidele, "pasteur_assistant").json()["id"]

    authorize(pasteur_principal)
    response = client.post(f"/validations/{request_id}/decision", json={"approved": False, "notes": "Pas encore"})
    assert response.status_code == 200, response.text
    assert response.json()["status"] == "rejected"
    assert response.json()["validator_notes"] == "Pas encore"

    db_session.expire_all()
    assert db_session.get(Profile, fidele.profile.id).role == "fidele"
    entry = db_session.query(ActivityLog).filter(ActivityLog.action == "validation_rejected").one()
    assert entry.entity_type == "validation_request"
    assert entry.entity_id == request_id
    assert entry.description == "role_change rejetée: Pas encore"


def test_validators_only_see_requests_they_may_decide(client, authorize, pasteur_principal, fidele, db_session):
    request_id = _request_role(client, authorize, fidele, "chef_famille").json()["id"]

    authorize(pasteur_principal)
    assert client.get("/validations/pending").json() == []
    response = client.post(f"/validations/{request_id}/decision", json={"approved": True})
    assert response.status_code == 403
    assert "ne peut pas attribuer" in response.json()["detail"]

    db_session.expire_all()
    assert db_session.get(ValidationRequest, request_id).status == "pending"


def test_requests_from_superiors_cannot_be_decided(client, authorize, patriarche, make_member):
    chef = make_member("chef@ccr.ci", role="chef_zone", first_name="Ali", last_name="Diallo")
    request_id = _request_role(client, authorize, patriarche, "chef_famille").json()["id"]

    authorize(chef)
    assert client.get("/validations/pending").json() == []
    response = client.post(f"/validations/{request_id}/decision", json={"approved": True})
    assert response.status_code == 403
    assert "niveau égal ou supérieur" in response.json()["detail"]


def test_own_request_cannot_be_decided(client, authorize, patriarche):
    request_id = _request_role(client, authorize, patriarche, "chef_zone").json()["id"]

    assert client.get("/validations/pending").json() == []
    response = client.post(f"/validations/{request_id}/decision", json={"approved": True})
    assert response.status_code == 403
    assert "propre demande" in response.json()["detail"]


def test_validation_endpoints_require_approval_rights(client, authorize, fidele, patriarche):
    authorize(fidele)
    assert client.get("/validations/pending").status_code == 403

    authorize(patriarche)
    assert client.post("/validations/9999/decision", json={"approved": True}).status_code == 404
