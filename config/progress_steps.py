# Deal-progress milestones tracked on every collaboration.
# The list order is the canonical order; validation and notification titles both read from here.

PROGRESS_STEPS = [
    {"id": "accord_collaboration", "title": "Accord de collaboration"},
    {"id": "premier_contact", "title": "Premier contact client"},
    {"id": "visite_programmee", "title": "Visite programmée"},
    {"id": "visite_realisee", "title": "Visite réalisée"},
    {"id": "retour_client", "title": "Retour client"},
    {"id": "offre_en_cours", "title": "Offre en cours"},
    {"id": "negociation_en_cours", "title": "Négociation en cours"},
    {"id": "compromis_signe", "title": "Compromis signé"},
    {"id": "signature_notaire", "title": "Signature notaire"},
    {"id": "affaire_conclue", "title": "Affaire conclue"},
]

PROGRESS_STEP_IDS = [step["id"] for step in PROGRESS_STEPS]

STEP_TITLES = {step["id"]: step["title"] for step in PROGRESS_STEPS}

# Step both parties must validate before a collaboration can be completed
CLOSING_STEP_ID = "affaire_conclue"


def is_valid_step(step_id: str) -> bool:
    return step_id in STEP_TITLES


def step_position(step_id: str) -> int:
    """Zero-based canonical position of a step."""
    return PROGRESS_STEP_IDS.index(step_id)


def step_title(step_id: str) -> str:
    return STEP_TITLES.get(step_id, step_id)
