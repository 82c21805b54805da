# Listing Models for the collaboration platform
# Properties (listings) and search ads (buyer-side requests) that collaborations refer to

from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Text, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum

from database.models import Base, generate_uuid


# ============================================================================
# ENUMS
# ============================================================================

class TransactionTypeDB(str, enum.Enum):
    SALE = "Vente"
    RENTAL = "Location"


class PropertyStatusDB(str, enum.Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    PENDING = "pending"
    SOLD = "sold"
    RENTED = "rented"
    ARCHIVED = "archived"


class SearchAdStatusDB(str, enum.Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    FULFILLED = "fulfilled"
    SOLD = "sold"
    RENTED = "rented"
    ARCHIVED = "archived"


# ============================================================================
# PROPERTY
# ============================================================================

class Property(Base):
    """Property listing published by an agent or an apporteur."""
    __tablename__ = "properties"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    owner_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(200), nullable=False)
    description = Column(Text)
    price = Column(Integer)  # In euros
    city = Column(String(100))
    postal_code = Column(String(10))
    main_image = Column(String(500))

    transaction_type = Column(Enum(TransactionTypeDB, values_callable=lambda x: [e.value for e in x], name="transactiontypedb"), default=TransactionTypeDB.SALE, nullable=False)
    status = Column(Enum(PropertyStatusDB, values_callable=lambda x: [e.value for e in x], name="propertystatusdb"), default=PropertyStatusDB.ACTIVE, nullable=False)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    owner = relationship("User", backref="properties")


# ============================================================================
# SEARCH AD
# ============================================================================

class SearchAd(Base):
    """Buyer-side search request published by an agent or an apporteur."""
    __tablename__ = "search_ads"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    author_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    title = Column(String(200), nullable=False)
    description = Column(Text)
    max_budget = Column(Integer)
    cities = Column(String(500))

    status = Column(Enum(SearchAdStatusDB, values_callable=lambda x: [e.value for e in x], name="searchadstatusdb"), default=SearchAdStatusDB.ACTIVE, nullable=False)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    author = relationship("User", backref="search_ads")
