"""
Completing collaborations and the resulting post status changes.
"""

import pytest

from database.collaboration_models import CollaborationStatusDB, CompletionReasonDB, PostTypeDB
from database.listing_models import PropertyStatusDB, SearchAdStatusDB
from services.post_resolver import PostResolver
from services.reconciliation import PostStatusReconciler


def validate_closing_step(workflow, owner, collaborator, collaboration_id):
    assert workflow.validate(owner, collaboration_id, "affaire_conclue", "owner").status_code == 200
    assert workflow.validate(collaborator, collaboration_id, "affaire_conclue", "collaborator").status_code == 200


def complete(client, login, user, collaboration_id, reason="vente_conclue_collaboration"):
    login(user)
    return client.post(f"/api/collaborations/{collaboration_id}/complete", json={"completion_reason": reason})


def test_complete_sale_marks_property_sold(workflow, client, login, owner, collaborator, sale_property, db, inbox):
    collaboration_id = workflow.activate(owner, collaborator, sale_property)
    validate_closing_step(workflow, owner, collaborator, collaboration_id)

    response = complete(client, login, owner, collaboration_id)

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "completed"
    assert data["current_step"] == "completed"
    assert data["completed_by"] == owner.id
    assert data["completed_by_role"] == "owner"
    assert data["completion_reason"] == "vente_conclue_collaboration"
    assert data["completed_at"] is not None
    assert all(step["completed"] for step in data["progress_steps"])

    db.refresh(sale_property)
    assert sale_property.status == PropertyStatusDB.SOLD
    assert len(inbox(collaborator, "collab:completed")) == 1


def test_complete_rental_marks_property_rented(workflow, client, login, owner, collaborator, rental_property, db):
    collaboration_id = workflow.activate(owner, collaborator, rental_property)
    validate_closing_step(workflow, owner, collaborator, collaboration_id)

    assert complete(client, login, collaborator, collaboration_id).status_code == 200

    db.refresh(rental_property)
    assert rental_property.status == PropertyStatusDB.RENTED


def test_complete_search_ad_marks_it_fulfilled(workflow, client, login, owner, collaborator, search_ad, db):
    collaboration_id = workflow.activate(owner, collaborator, search_ad)
    validate_closing_step(workflow, owner, collaborator, collaboration_id)

    assert complete(client, login, owner, collaboration_id).status_code == 200

    db.refresh(search_ad)
    assert search_ad.status == SearchAdStatusDB.FULFILLED


def test_other_reasons_leave_post_untouched(workflow, client, login, owner, collaborator, sale_property, db):
    collaboration_id = workflow.activate(owner, collaborator, sale_property)
    validate_closing_step(workflow, owner, collaborator, collaboration_id)

    response = complete(client, login, collaborator, collaboration_id, reason="client_desiste")

    assert response.status_code == 200
    assert response.json()["completed_by_role"] == "collaborator"
    db.refresh(sale_property)
    assert sale_property.status == PropertyStatusDB.ACTIVE


def test_closing_step_must_be_validated_by_both(workflow, client, login, owner, collaborator, sale_property, fetch):
    collaboration_id = workflow.activate(owner, collaborator, sale_property)
    workflow.validate(owner, collaboration_id, "affaire_conclue", "owner")

    response = complete(client, login, owner, collaboration_id)

    assert response.status_code == 400
    assert "Affaire conclue" in response.json()["detail"]
    assert fetch(collaboration_id).status == CollaborationStatusDB.ACTIVE


@pytest.mark.parametrize("reason", [None, "", "vendu_par_magie"])
def test_invalid_completion_reason(workflow, client, login, owner, collaborator, sale_property, reason):
    collaboration_id = workflow.activate(owner, collaborator, sale_property)
    validate_closing_step(workflow, owner, collaborator, collaboration_id)

    response = complete(client, login, owner, collaboration_id, reason=reason)

    assert response.status_code == 400
    assert response.json()["detail"] == "Raison de complétion invalide ou manquante"


def test_only_active_collaborations_complete(workflow, client, login, owner, collaborator, sale_property):
    proposal = workflow.propose(collaborator, sale_property)
    workflow.accept(owner, proposal["id"])
    assert complete(client, login, owner, proposal["id"]).status_code == 400


def test_outsider_cannot_complete(workflow, client, login, owner, collaborator, other_agent, sale_property):
    collaboration_id = workflow.activate(owner, collaborator, sale_property)
    validate_closing_step(workflow, owner, collaborator, collaboration_id)
    assert complete(client, login, other_agent, collaboration_id).status_code == 403


def test_completed_collaboration_cannot_be_cancelled(workflow, client, login, owner, collaborator, sale_property):
    collaboration_id = workflow.activate(owner, collaborator, sale_property)
    validate_closing_step(workflow, owner, collaborator, collaboration_id)
    complete(client, login, owner, collaboration_id, reason="sans_suite")

    response = client.post(f"/api/collaborations/{collaboration_id}/cancel")
    assert response.status_code == 400
    assert response.json()["detail"] == "Impossible d'annuler une collaboration terminée"


# ============================================================================
# POST STATUS RECONCILIATION
# ============================================================================

def test_failed_post_update_is_reconciled(workflow, client, login, owner, collaborator, sale_property, db,
                                          monkeypatch, fetch):
    collaboration_id = workflow.activate(owner, collaborator, sale_property)
    validate_closing_step(workflow, owner, collaborator, collaboration_id)

    original = PostResolver.mark_concluded

    def failing_mark_concluded(self, post_type, post_id):
        raise RuntimeError("listing store unavailable")

    monkeypatch.setattr(PostResolver, "mark_concluded", failing_mark_concluded)
    response = complete(client, login, owner, collaboration_id)

    assert response.status_code == 200
    assert fetch(collaboration_id).completion_reason == CompletionReasonDB.VENTE_CONCLUE_COLLABORATION
    db.refresh(sale_property)
    assert sale_property.status == PropertyStatusDB.ACTIVE

    monkeypatch.setattr(PostResolver, "mark_concluded", original)
    reconciler = PostStatusReconciler(db)
    assert [c.id for c in reconciler.pending()] == [collaboration_id]
    assert reconciler.run() == [sale_property.id]

    db.refresh(sale_property)
    assert sale_property.status == PropertyStatusDB.SOLD
    assert reconciler.pending() == []


def test_reconciler_ignores_archived_posts(workflow, client, login, owner, collaborator, sale_property, db,
                                           monkeypatch):
    collaboration_id = workflow.activate(owner, collaborator, sale_property)
    validate_closing_step(workflow, owner, collaborator, collaboration_id)
    monkeypatch.setattr(PostResolver, "mark_concluded", lambda self, post_type, post_id: None)
    complete(client, login, owner, collaboration_id)

    sale_property.status = PropertyStatusDB.ARCHIVED
    db.commit()

    assert PostStatusReconciler(db).pending() == []


def test_resolver_reports_owner_and_archival(db, owner, sale_property, search_ad):
    resolver = PostResolver(db)

    reference = resolver.resolve(PostTypeDB.PROPERTY, sale_property.id)
    assert (reference.owner_actor_id, reference.exists, reference.gone) == (owner.id, True, False)

    search_ad.status = SearchAdStatusDB.ARCHIVED
    db.commit()
    reference = resolver.resolve(PostTypeDB.SEARCH_AD, search_ad.id)
    assert reference.archived is True
    assert reference.gone is True

    missing = resolver.resolve(PostTypeDB.PROPERTY, "missing")
    assert missing.exists is False
    assert missing.owner_actor_id is None
