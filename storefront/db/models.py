"""Database models."""
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    String,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Order(Base):
    """Submitted order."""

    __tablename__ = "orders"

    id = Column(String, primary_key=True, index=True)
    user_id = Column(String, index=True, nullable=False)
    mode = Column(String, nullable=False)  # PICKUP, DELIVERY
    address_id = Column(String, nullable=True)  # DELIVERY only
    status = Column(String, default="PENDING", nullable=False)
    total_cents = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Relationships
    lines = relationship(
        "OrderLine",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderLine.position",
    )


class OrderLine(Base):
    """One cart line copied into an order."""

    __tablename__ = "order_lines"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(String, ForeignKey("orders.id"), nullable=False)
    position = Column(Integer, nullable=False)
    type = Column(String, nullable=False)  # product, menu
    item_id = Column(String, nullable=False)  # product id or menu id
    name = Column(String, nullable=True)
    image_path = Column(String, nullable=True)
    unit_price_cents = Column(Integer, nullable=False)
    qty = Column(Integer, nullable=False)
    subtotal_cents = Column(Integer, nullable=False)
    removed_ingredients = Column(JSON, nullable=True)  # product lines
    selections = Column(JSON, nullable=True)  # menu lines: group -> [{product_id, removed_ingredients}]

    # Relationships
    order = relationship("Order", back_populates="lines")


class UserProfile(Base):
    """User profile, only the fields ordering needs."""

    __tablename__ = "user_profiles"

    user_id = Column(String, primary_key=True)
    email = Column(String, nullable=True)
    default_address_id = Column(String, nullable=True)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)


class Address(Base):
    """Delivery address owned by a user."""

    __tablename__ = "addresses"

    id = Column(String, primary_key=True, index=True)
    user_id = Column(String, index=True, nullable=False)
    label = Column(String, nullable=True)
    recipient_name = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    street = Column(String, nullable=False, default="")
    number = Column(String, nullable=False, default="")
    floor_door = Column(String, nullable=True)
    city = Column(String, nullable=False, default="")
    province = Column(String, nullable=True)
    postal_code = Column(String, nullable=False, default="")
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)


class OrderSessionRecord(Base):
    """Persisted order session (mode, address, browsing flag)."""

    __tablename__ = "order_sessions"

    key = Column(String, primary_key=True)
    mode = Column(String, nullable=True)
    address_id = Column(String, nullable=True)
    browsing_only = Column(Boolean, default=False, nullable=False)
