"""
Contract generation, negotiation and dual signature.
"""

from datetime import datetime

from database.collaboration_models import CollaborationStatusDB


def accepted_collaboration(workflow, owner, collaborator, post, **extra) -> str:
    collaboration_id = workflow.propose(collaborator, post, **extra)["id"]
    workflow.accept(owner, collaboration_id)
    return collaboration_id


# ============================================================================
# CONTRACT TEXT
# ============================================================================

def test_contract_is_generated_from_agent_template(workflow, client, owner, collaborator, sale_property, fetch):
    collaboration_id = accepted_collaboration(workflow, owner, collaborator, sale_property)

    response = client.get(f"/api/contracts/{collaboration_id}")

    assert response.status_code == 200
    contract = response.json()
    text = contract["contract_text"]
    assert text.startswith("CONTRAT DE COLLABORATION ENTRE PROFESSIONNELS DE L'IMMOBILIER")
    assert "Claire Martin" in text
    assert "Hugo Bernard" in text
    assert "Carte T : CPI75012024000001" in text
    assert "SIREN : 812345678" in text
    assert "Paris (75011)" in text
    assert "20% de la commission" in text
    assert datetime.utcnow().strftime("%d/%m/%Y") in text
    assert contract["contract_modified"] is False
    assert contract["owner_signed"] is False and contract["collaborator_signed"] is False
    assert contract["can_sign"] is True
    assert contract["property_owner"]["name"] == "Claire Martin"
    assert contract["collaborator"]["name"] == "Hugo Bernard"
    assert fetch(collaboration_id).contract_text == text


def test_contract_generation_is_idempotent(workflow, client, login, owner, collaborator, sale_property):
    collaboration_id = accepted_collaboration(workflow, owner, collaborator, sale_property)
    first = client.get(f"/api/contracts/{collaboration_id}").json()["contract_text"]
    login(collaborator)
    second = client.get(f"/api/contracts/{collaboration_id}").json()["contract_text"]
    assert first == second


def test_edited_contract_is_never_regenerated(workflow, client, owner, collaborator, sale_property):
    collaboration_id = accepted_collaboration(workflow, owner, collaborator, sale_property)
    client.put(f"/api/contracts/{collaboration_id}", json={"contract_text": "Texte libre négocié"})

    contract = client.get(f"/api/contracts/{collaboration_id}").json()
    assert contract["contract_text"] == "Texte libre négocié"
    assert contract["contract_modified"] is True


def test_apporteur_post_uses_apporteur_template(workflow, client, apporteur, collaborator, apporteur_property):
    collaboration_id = workflow.propose(
        collaborator, apporteur_property, commission=None,
        compensation_type="fixed_amount", compensation_amount=1500,
    )["id"]
    workflow.accept(apporteur, collaboration_id)

    text = client.get(f"/api/contracts/{collaboration_id}").json()["contract_text"]
    assert text.startswith("CONTRAT D'APPORTEUR D'AFFAIRES")
    assert "Nom : Roux" in text
    assert "Prénom : Léo" in text
    assert "Statut : Agent Immobilier" in text
    assert "Montant convenu : 1500€ de compensation" in text


def test_outsider_cannot_read_contract(workflow, client, login, owner, collaborator, other_agent, sale_property):
    collaboration_id = accepted_collaboration(workflow, owner, collaborator, sale_property)
    login(other_agent)
    assert client.get(f"/api/contracts/{collaboration_id}").status_code == 403


def test_contract_of_missing_collaboration(client, login, owner):
    login(owner)
    assert client.get("/api/contracts/missing").status_code == 404


# ============================================================================
# EDITING
# ============================================================================

def test_edit_after_signature_resets_both_signatures(workflow, client, login, owner, collaborator, sale_property,
                                                     inbox):
    collaboration_id = accepted_collaboration(workflow, owner, collaborator, sale_property)
    login(owner)
    client.get(f"/api/contracts/{collaboration_id}")
    workflow.sign(owner, collaboration_id)

    login(collaborator)
    response = client.put(f"/api/contracts/{collaboration_id}", json={
        "contract_text": "Contrat révisé",
        "additional_terms": "Exclusivité 3 mois",
    })

    assert response.status_code == 200
    body = response.json()
    assert body["requires_resigning"] is True
    contract = body["contract"]
    assert contract["owner_signed"] is False
    assert contract["collaborator_signed"] is False
    assert contract["owner_signed_at"] is None
    assert contract["contract_modified"] is True
    assert contract["additional_terms"] == "Exclusivité 3 mois"
    assert contract["status"] == "accepted"

    login(owner)
    activities = client.get(f"/api/collaborations/{collaboration_id}").json()["activities"]
    assert "signatures réinitialisées" in activities[-1]["message"]
    assert len(inbox(owner, "contract:updated")) == 1


def test_editing_only_additional_terms_keeps_contract_text(workflow, client, login, owner, collaborator,
                                                           sale_property, fetch):
    collaboration_id = accepted_collaboration(workflow, owner, collaborator, sale_property)
    text = client.get(f"/api/contracts/{collaboration_id}").json()["contract_text"]
    workflow.sign(owner, collaboration_id)

    login(collaborator)
    response = client.put(f"/api/contracts/{collaboration_id}", json={"additional_terms": "Exclusivité 3 mois"})

    assert response.status_code == 200
    contract = response.json()["contract"]
    assert contract["contract_text"] == text
    assert contract["additional_terms"] == "Exclusivité 3 mois"
    assert contract["owner_signed"] is False
    assert contract["collaborator_signed"] is False
    assert contract["contract_modified"] is True

    assert client.get(f"/api/contracts/{collaboration_id}").json()["contract_text"] == text
    assert fetch(collaboration_id).contract_text == text


def test_unchanged_contract_is_a_no_op(workflow, client, login, owner, collaborator, sale_property, inbox, fetch):
    collaboration_id = accepted_collaboration(workflow, owner, collaborator, sale_property)
    text = client.get(f"/api/contracts/{collaboration_id}").json()["contract_text"]
    workflow.sign(owner, collaboration_id)
    activity_count = len(fetch(collaboration_id).activities)

    login(collaborator)
    response = client.put(f"/api/contracts/{collaboration_id}", json={"contract_text": text})

    assert response.status_code == 200
    assert response.json()["requires_resigning"] is False
    stored = fetch(collaboration_id)
    assert stored.owner_signed is True
    assert stored.contract_modified is False
    assert len(stored.activities) == activity_count
    assert inbox(owner, "contract:updated") == []


def test_contract_editable_only_when_accepted(workflow, client, login, owner, collaborator, sale_property):
    proposal = workflow.propose(collaborator, sale_property)
    response = client.put(f"/api/contracts/{proposal['id']}", json={"contract_text": "Trop tôt"})
    assert response.status_code == 400


def test_outsider_cannot_edit_contract(workflow, client, login, owner, collaborator, other_agent, sale_property):
    collaboration_id = accepted_collaboration(workflow, owner, collaborator, sale_property)
    login(other_agent)
    response = client.put(f"/api/contracts/{collaboration_id}", json={"contract_text": "Pirate"})
    assert response.status_code == 403


# ============================================================================
# SIGNING
# ============================================================================

def test_first_signature_waits_for_the_other_party(workflow, owner, collaborator, sale_property, inbox):
    collaboration_id = accepted_collaboration(workflow, owner, collaborator, sale_property)

    body = workflow.sign(owner, collaboration_id)

    assert body["activated"] is False
    assert body["message"] == "Contrat signé avec succès"
    contract = body["contract"]
    assert contract["status"] == "accepted"
    assert contract["owner_signed"] is True
    assert contract["owner_signed_at"] is not None
    assert contract["collaborator_signed"] is False
    assert contract["requires_both_signatures"] is True
    assert contract["can_sign"] is False
    assert len(inbox(collaborator, "contract:signed")) == 1


def test_second_signature_activates(workflow, owner, collaborator, sale_property, inbox, fetch):
    collaboration_id = accepted_collaboration(workflow, owner, collaborator, sale_property)
    workflow.sign(owner, collaboration_id)

    body = workflow.sign(collaborator, collaboration_id)

    assert body["activated"] is True
    assert body["contract"]["status"] == "active"
    assert body["contract"]["current_step"] == "active"
    assert body["contract"]["requires_both_signatures"] is False

    stored = fetch(collaboration_id)
    assert stored.status == CollaborationStatusDB.ACTIVE
    assert [a.type.value for a in stored.activities[-2:]] == ["signing", "status_update"]

    owner_types = {n.type for n in inbox(owner)}
    assert {"contract:signed", "collab:activated"} <= owner_types


def test_signing_twice_keeps_state(workflow, owner, collaborator, sale_property, fetch):
    collaboration_id = accepted_collaboration(workflow, owner, collaborator, sale_property)
    workflow.sign(owner, collaboration_id)
    workflow.sign(owner, collaboration_id)

    stored = fetch(collaboration_id)
    assert stored.status == CollaborationStatusDB.ACCEPTED
    assert stored.owner_signed is True
    assert stored.collaborator_signed is False


def test_cannot_sign_pending_collaboration(workflow, client, login, owner, collaborator, sale_property):
    proposal = workflow.propose(collaborator, sale_property)
    login(owner)
    response = client.post(f"/api/contracts/{proposal['id']}/sign")
    assert response.status_code == 400
    assert response.json()["detail"] == "La collaboration doit être acceptée avant de signer"


def test_outsider_cannot_sign(workflow, client, login, owner, collaborator, other_agent, sale_property):
    collaboration_id = accepted_collaboration(workflow, owner, collaborator, sale_property)
    login(other_agent)
    assert client.post(f"/api/contracts/{collaboration_id}/sign").status_code == 403


def test_sign_through_collaboration_route(workflow, client, login, owner, collaborator, sale_property):
    collaboration_id = accepted_collaboration(workflow, owner, collaborator, sale_property)
    workflow.sign(collaborator, collaboration_id)

    login(owner)
    response = client.post(f"/api/collaborations/{collaboration_id}/sign")

    assert response.status_code == 200
    assert response.json()["activated"] is True


def test_signature_after_edit_needs_both_parties_again(workflow, client, login, owner, collaborator, sale_property):
    collaboration_id = accepted_collaboration(workflow, owner, collaborator, sale_property)
    workflow.sign(owner, collaboration_id)
    login(collaborator)
    client.put(f"/api/contracts/{collaboration_id}", json={"contract_text": "Version 2"})

    body = workflow.sign(collaborator, collaboration_id)
    assert body["activated"] is False

    body = workflow.sign(owner, collaboration_id)
    assert body["activated"] is True
