"""
SQLAlchemy ORM models for persistent storage.

Models mirror the dataclass models but add database persistence.
"""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# Structured sections keep SQL NULL for "absent" so it never collapses into []
NullableJSON = JSON(none_as_null=True)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


def _new_deck_id() -> str:
    return str(uuid.uuid4())


class CardDB(Base):
    """
    A catalog card synced from the external card source.

    The primary key is the source's stable id, so repeated syncs update
    the same row. `updated_at` stays NULL until the first re-sync.
    """

    __tablename__ = "cards"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), index=True)
    category: Mapped[str] = mapped_column(String(50), index=True)
    subtypes: Mapped[list[str]] = mapped_column(JSON, default=list)
    hp: Mapped[str | None] = mapped_column(String(16), nullable=True)
    types: Mapped[list[str]] = mapped_column(JSON, default=list)

    abilities: Mapped[list[dict[str, Any]] | None] = mapped_column(NullableJSON, nullable=True)
    attacks: Mapped[list[dict[str, Any]] | None] = mapped_column(NullableJSON, nullable=True)
    weaknesses: Mapped[list[dict[str, Any]] | None] = mapped_column(NullableJSON, nullable=True)
    resistances: Mapped[list[dict[str, Any]] | None] = mapped_column(NullableJSON, nullable=True)

    retreat_cost: Mapped[list[str]] = mapped_column(JSON, default=list)
    rules: Mapped[list[str]] = mapped_column(JSON, default=list)
    image_small: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_large: Mapped[str | None] = mapped_column(Text, nullable=True)
    set_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    set_name: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)

    # Similarity index vector, NULL until the card has been embedded
    embedding: Mapped[list[float] | None] = mapped_column(NullableJSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<CardDB(id={self.id}, name={self.name})>"


class CollectionEntryDB(Base):
    """
    Copies of one card owned by one user.

    At most one row exists per (user, card); a quantity of zero is never
    stored, the row is deleted instead.
    """

    __tablename__ = "collection_entries"
    __table_args__ = (
        UniqueConstraint("user_id", "card_id", name="uq_collection_user_card"),
        CheckConstraint("quantity > 0", name="ck_collection_quantity_positive"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), index=True)
    card_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("cards.id", ondelete="CASCADE"), index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    card: Mapped["CardDB"] = relationship()

    def __repr__(self) -> str:
        return f"<CollectionEntryDB(user={self.user_id}, card={self.card_id}, qty={self.quantity})>"


class DeckDB(Base):
    """
    A user's named deck.

    Deleting a deck deletes its entries.
    """

    __tablename__ = "decks"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_deck_id)
    user_id: Mapped[str] = mapped_column(String(255), index=True)
    name: Mapped[str] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    entries: Mapped[list["DeckEntryDB"]] = relationship(
        back_populates="deck", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<DeckDB(id={self.id}, name={self.name})>"


class DeckEntryDB(Base):
    """
    Copies of one card in one deck.

    Size and copy limits are enforced by the deck rule engine; the table
    only guards uniqueness and positivity.
    """

    __tablename__ = "deck_entries"
    __table_args__ = (
        UniqueConstraint("deck_id", "card_id", name="uq_deck_card"),
        CheckConstraint("quantity > 0", name="ck_deck_quantity_positive"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    deck_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("decks.id", ondelete="CASCADE"), index=True
    )
    card_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("cards.id", ondelete="CASCADE"), index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, default=1)

    deck: Mapped["DeckDB"] = relationship(back_populates="entries")
    card: Mapped["CardDB"] = relationship()

    def __repr__(self) -> str:
        return f"<DeckEntryDB(deck={self.deck_id}, card={self.card_id}, qty={self.quantity})>"
