"""
Collaboration aggregate rules exercised directly on the models.
"""

import pytest
from sqlalchemy.orm.exc import StaleDataError

from config.contract_templates import BLANK
from config.progress_steps import PROGRESS_STEP_IDS, CLOSING_STEP_ID, is_valid_step, step_position, step_title
from database.collaboration_models import (
    Collaboration, CollaborationStatusDB, CompensationTypeDB, ParticipantRoleDB, PostTypeDB, ActivityTypeDB,
)
from services.contract_service import compensation_text


@pytest.fixture()
def collaboration(db, owner, collaborator, sale_property):
    collaboration = Collaboration(
        post_id=sale_property.id, post_type=PostTypeDB.PROPERTY,
        post_owner_id=owner.id, collaborator_id=collaborator.id,
        proposed_commission=20, status=CollaborationStatusDB.ACCEPTED,
    )
    collaboration.initialize_progress_steps()
    db.add(collaboration)
    db.commit()
    db.refresh(collaboration)
    return collaboration


def test_step_catalogue_order():
    assert PROGRESS_STEP_IDS[0] == "accord_collaboration"
    assert PROGRESS_STEP_IDS[-1] == CLOSING_STEP_ID == "affaire_conclue"
    assert len(PROGRESS_STEP_IDS) == 10
    assert step_position("visite_realisee") == 3
    assert step_title("compromis_signe") == "Compromis signé"
    assert is_valid_step("retour_client")
    assert not is_valid_step("proposal")


def test_initialize_is_idempotent(collaboration):
    collaboration.initialize_progress_steps()
    assert [s.step_id for s in collaboration.progress_steps] == PROGRESS_STEP_IDS


def test_update_progress_status_marks_prefix(collaboration, owner):
    collaboration.update_progress_status("retour_client", ParticipantRoleDB.OWNER, owner.id, "RAS")

    validated = [s.step_id for s in collaboration.progress_steps if s.owner_validated]
    assert validated == PROGRESS_STEP_IDS[:5]
    assert not any(s.completed for s in collaboration.progress_steps)
    assert collaboration.get_step("retour_client").notes[0]["validated_by"] == "owner"
    assert collaboration.activities[-1].type == ActivityTypeDB.STATUS_UPDATE


def test_closing_step_needs_both_parties(collaboration, owner, collaborator):
    collaboration.update_progress_status(CLOSING_STEP_ID, ParticipantRoleDB.OWNER, owner.id)
    assert not collaboration.closing_step_validated()

    collaboration.update_progress_status(CLOSING_STEP_ID, ParticipantRoleDB.COLLABORATOR, collaborator.id)
    assert collaboration.closing_step_validated()
    assert all(s.completed for s in collaboration.progress_steps)


def test_requires_both_signatures_while_half_signed(collaboration, owner, collaborator):
    assert collaboration.requires_both_signatures is False
    collaboration.sign(collaborator.id)
    assert collaboration.requires_both_signatures is True
    assert collaboration.sign(owner.id) is True
    assert collaboration.requires_both_signatures is False
    assert collaboration.status == CollaborationStatusDB.ACTIVE


def test_edit_contract_without_change(collaboration, owner):
    collaboration.contract_text = "Texte"
    assert collaboration.edit_contract("Texte", None, owner.id) is False
    assert collaboration.edit_contract("Texte", "", owner.id) is False
    assert collaboration.edit_contract("Texte", "Clause", owner.id) is True
    assert collaboration.contract_last_modified_by == owner.id


def test_edit_contract_keeps_omitted_fields(collaboration, owner):
    collaboration.contract_text = "Texte"
    collaboration.additional_terms = "Clause"
    assert collaboration.edit_contract(None, "Clause revue", owner.id) is True
    assert collaboration.contract_text == "Texte"
    assert collaboration.edit_contract("Texte 2", None, owner.id) is True
    assert collaboration.additional_terms == "Clause revue"
    assert collaboration.edit_contract(None, None, owner.id) is False


def test_activity_sequence_is_contiguous(collaboration, owner, collaborator):
    collaboration.add_activity(ActivityTypeDB.NOTE, "un", owner.id)
    collaboration.add_activity(ActivityTypeDB.NOTE, "deux", collaborator.id)
    assert [a.sequence for a in collaboration.activities] == list(range(len(collaboration.activities)))


def test_concurrent_writes_are_rejected(collaboration, db, session_factory):
    other = session_factory()
    try:
        stale = other.query(Collaboration).filter(Collaboration.id == collaboration.id).one()

        collaboration.status = CollaborationStatusDB.CANCELLED
        db.commit()

        stale.status = CollaborationStatusDB.ACTIVE
        with pytest.raises(StaleDataError):
            other.commit()
        other.rollback()
    finally:
        other.close()


@pytest.mark.parametrize("compensation_type,amount,commission,expected", [
    (CompensationTypeDB.FIXED_AMOUNT, 250.0, 0, "250€ de compensation"),
    (CompensationTypeDB.GIFT_VOUCHERS, 2.0, 0, "2 chèques cadeaux"),
    (CompensationTypeDB.PERCENTAGE, None, 12.5, "12.5% de commission"),
    (None, None, 0, BLANK),
])
def test_compensation_text(compensation_type, amount, commission, expected):
    collaboration = Collaboration(
        compensation_type=compensation_type, compensation_amount=amount, proposed_commission=commission,
    )
    assert compensation_text(collaboration) == expected
