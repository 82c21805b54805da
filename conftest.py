"""
Shared pytest fixtures: in-memory SQLite database, seeded users and listings,
and a TestClient whose current user can be switched per request.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from database.config import get_db, init_db
from database.models import Base, User, UserType, Notification
from database.listing_models import Property, SearchAd, TransactionTypeDB, PropertyStatusDB, SearchAdStatusDB
from database.collaboration_models import Collaboration
from auth.dependencies import get_current_user
from server import app

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db():
    init_db(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


def _override_get_db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


def _make_user(db: Session, email: str, first_name: str, last_name: str, user_type: UserType, **extra) -> User:
    user = User(
        email=email,
        first_name=first_name,
        last_name=last_name,
        user_type=user_type,
        **extra,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture()
def owner(db):
    """U1: agent owning the listings."""
    return _make_user(
        db, "claire.martin@example.fr", "Claire", "Martin", UserType.AGENT,
        phone="0601020304", t_card="CPI75012024000001", city="Paris", postal_code="75011",
    )


@pytest.fixture()
def collaborator(db):
    """U2: agent proposing collaborations."""
    return _make_user(
        db, "hugo.bernard@example.fr", "Hugo", "Bernard", UserType.AGENT,
        phone="0605060708", siren_number="812345678", city="Lyon", postal_code="69003",
    )


@pytest.fixture()
def other_agent(db):
    return _make_user(db, "nina.petit@example.fr", "Nina", "Petit", UserType.AGENT)


@pytest.fixture()
def apporteur(db):
    return _make_user(db, "leo.roux@example.fr", "Léo", "Roux", UserType.APPORTEUR)


@pytest.fixture()
def admin(db):
    return _make_user(db, "admin@monhubimmo.fr", "Admin", "MonHubImmo", UserType.ADMIN)


@pytest.fixture()
def guest(db):
    return _make_user(db, "invite@example.fr", "Zoé", "Garnier", UserType.GUEST)


@pytest.fixture()
def sale_property(db, owner):
    prop = Property(
        owner_id=owner.id, title="Appartement T3 Bastille", price=450000,
        city="Paris", postal_code="75011", transaction_type=TransactionTypeDB.SALE,
        status=PropertyStatusDB.ACTIVE,
    )
    db.add(prop)
    db.commit()
    db.refresh(prop)
    return prop


@pytest.fixture()
def rental_property(db, owner):
    prop = Property(
        owner_id=owner.id, title="Studio meublé Croix-Rousse", price=750,
        city="Lyon", postal_code="69004", transaction_type=TransactionTypeDB.RENTAL,
        status=PropertyStatusDB.ACTIVE,
    )
    db.add(prop)
    db.commit()
    db.refresh(prop)
    return prop


@pytest.fixture()
def apporteur_property(db, apporteur):
    prop = Property(
        owner_id=apporteur.id, title="Maison familiale Nantes", price=380000,
        city="Nantes", postal_code="44000", transaction_type=TransactionTypeDB.SALE,
        status=PropertyStatusDB.ACTIVE,
    )
    db.add(prop)
    db.commit()
    db.refresh(prop)
    return prop


@pytest.fixture()
def search_ad(db, owner):
    ad = SearchAd(author_id=owner.id, title="Recherche T2 Paris 11e", max_budget=320000,
                  cities="Paris", status=SearchAdStatusDB.ACTIVE)
    db.add(ad)
    db.commit()
    db.refresh(ad)
    return ad


@pytest.fixture()
def client(db):
    app.dependency_overrides[get_db] = _override_get_db
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def login():
    """Switch the authenticated user for subsequent requests."""
    def _login(user: User):
        user_id = user.id

        def _current_user(session: Session = Depends(get_db)) -> User:
            return session.query(User).filter(User.id == user_id).first()

        app.dependency_overrides[get_current_user] = _current_user
    return _login


@pytest.fixture()
def fetch(db):
    """Re-read a collaboration as committed by the API."""
    def _fetch(collaboration_id: str) -> Collaboration:
        db.expire_all()
        return db.query(Collaboration).filter(Collaboration.id == collaboration_id).first()
    return _fetch


@pytest.fixture()
def inbox(db):
    """Notifications received by a user, optionally filtered by type."""
    def _inbox(user: User, type: str = None):
        db.expire_all()
        query = db.query(Notification).filter(Notification.user_id == user.id)
        if type:
            query = query.filter(Notification.type == type)
        return query.all()
    return _inbox


class Workflow:
    """Drives a collaboration through the API up to a given state."""

    def __init__(self, client: TestClient, login):
        self.client = client
        self.login = login

    def propose(self, collaborator: User, post, commission: float = 20, **extra) -> dict:
        self.login(collaborator)
        key = "search_ad_id" if isinstance(post, SearchAd) else "property_id"
        payload = {key: post.id, "commission_percentage": commission, **extra}
        response = self.client.post("/api/collaborations", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    def accept(self, owner: User, collaboration_id: str) -> dict:
        self.login(owner)
        response = self.client.post(f"/api/collaborations/{collaboration_id}/respond", json={"response": "accepted"})
        assert response.status_code == 200, response.text
        return response.json()

    def sign(self, user: User, collaboration_id: str) -> dict:
        self.login(user)
        response = self.client.post(f"/api/contracts/{collaboration_id}/sign")
        assert response.status_code == 200, response.text
        return response.json()

    def activate(self, owner: User, collaborator: User, post) -> str:
        collaboration_id = self.propose(collaborator, post)["id"]
        self.accept(owner, collaboration_id)
        self.sign(owner, collaboration_id)
        self.sign(collaborator, collaboration_id)
        return collaboration_id

    def validate(self, user: User, collaboration_id: str, step: str, role: str, notes: str = None):
        self.login(user)
        payload = {"target_step": step, "validated_by": role}
        if notes:
            payload["notes"] = notes
        return self.client.post(f"/api/collaborations/{collaboration_id}/progress", json=payload)


@pytest.fixture()
def workflow(client, login):
    return Workflow(client, login)


@pytest.fixture()
def session_factory(db):
    """Opens extra sessions on the test database."""
    return TestingSessionLocal
