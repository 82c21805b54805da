# Database Models for the MonHubImmo collaboration platform
# Users (actor directory) and notifications

from sqlalchemy import Column, String, DateTime, ForeignKey, Text, JSON, Enum, Boolean, Index
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
import enum

Base = declarative_base()

def generate_uuid():
    return str(uuid.uuid4())

# Enums
class UserType(str, enum.Enum):
    AGENT = "agent"            # Listing-management professional
    APPORTEUR = "apporteur"    # Referral partner (apporteur d'affaires)
    GUEST = "guest"
    ADMIN = "admin"


class AgentType(str, enum.Enum):
    INDEPENDENT = "independent"
    COMMERCIAL = "commercial"
    EMPLOYEE = "employee"


# Models
class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255))
    first_name = Column(String(100))
    last_name = Column(String(100))
    phone = Column(String(30))
    profile_image = Column(String(500))
    user_type = Column(Enum(UserType, values_callable=lambda x: [e.value for e in x], name="usertype"), default=UserType.AGENT, nullable=False)
    is_email_verified = Column(Boolean, default=False)

    # Professional information
    agent_type = Column(Enum(AgentType, values_callable=lambda x: [e.value for e in x], name="agenttype"), nullable=True)
    t_card = Column(String(50))        # Carte T
    siren_number = Column(String(20))
    rsac_number = Column(String(50))
    city = Column(String(100))
    postal_code = Column(String(10))
    network = Column(String(100))

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    @property
    def display_name(self) -> str:
        if self.first_name:
            return f"{self.first_name} {self.last_name or ''}".strip()
        return self.email


class Notification(Base):
    """User notifications."""
    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    actor_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    type = Column(String(50), nullable=False)  # collab:proposal_received, contract:signed, etc.
    entity_type = Column(String(50))
    entity_id = Column(String(36))
    title = Column(String(200), nullable=False)
    message = Column(Text)
    action_url = Column(String(500))
    data = Column(JSON)  # Additional context (actor name, step, ...)

    read = Column(Boolean, default=False)
    read_at = Column(DateTime)

    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    user = relationship("User", foreign_keys=[user_id], backref="notifications")

    __table_args__ = (
        Index("ix_notifications_user_read", "user_id", "read"),
    )
