"""
SQLAlchemy ORM models for persistent storage.

Cards and printings are owned by the catalog sync; collection items and
decks are owned by individual users.
"""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from duelvault.models.enums import (
    CardCondition,
    CardEdition,
    DeckZone,
    PortfolioType,
    SearchLanguage,
    UserTier,
)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class UserDB(Base):
    """A registered account."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255))
    tier: Mapped[UserTier] = mapped_column(
        Enum(UserTier, native_enum=False, length=10), default=UserTier.FREE
    )
    search_language: Mapped[SearchLanguage] = mapped_column(
        Enum(SearchLanguage, native_enum=False, length=5), default=SearchLanguage.DE
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    collection_items: Mapped[list["CollectionItemDB"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )
    decks: Mapped[list["DeckDB"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<UserDB(id={self.id}, username={self.username}, tier={self.tier})>"


class CardDB(Base):
    """
    Canonical catalog entry.

    Keyed by the Konami id reported by YGOPRODeck. Written only by the
    catalog sync.
    """

    __tablename__ = "cards"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    konami_id: Mapped[int] = mapped_column(Integer, unique=True, index=True)
    name: Mapped[str] = mapped_column(String(255), index=True)
    name_en: Mapped[str | None] = mapped_column(String(255), index=True, nullable=True)
    name_de: Mapped[str | None] = mapped_column(String(255), index=True, nullable=True)
    type: Mapped[str] = mapped_column(String(100))
    frame_type: Mapped[str] = mapped_column(String(50))
    description: Mapped[str] = mapped_column(Text, default="")

    # Monster-only stats
    race: Mapped[str | None] = mapped_column(String(100), nullable=True)
    atk: Mapped[int | None] = mapped_column(Integer, nullable=True)
    def_: Mapped[int | None] = mapped_column("def", Integer, nullable=True)
    level: Mapped[int | None] = mapped_column(Integer, nullable=True)
    attribute: Mapped[str | None] = mapped_column(String(20), nullable=True)
    archetype: Mapped[str | None] = mapped_column(String(255), index=True, nullable=True)

    image_url: Mapped[str] = mapped_column(Text, default="")
    image_url_small: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    printings: Mapped[list["PrintingDB"]] = relationship(
        back_populates="card", cascade="all, delete-orphan", order_by="PrintingDB.set_code"
    )

    def __repr__(self) -> str:
        return f"<CardDB(konami_id={self.konami_id}, name={self.name})>"


class PrintingDB(Base):
    """One print of a card in a specific set."""

    __tablename__ = "printings"
    __table_args__ = (UniqueConstraint("card_id", "set_code", name="uq_printing_card_set"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    card_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("cards.id", ondelete="CASCADE"), index=True
    )
    set_code: Mapped[str] = mapped_column(String(50), index=True)
    set_name: Mapped[str] = mapped_column(String(255))
    rarity: Mapped[str] = mapped_column(String(100))
    rarity_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    price: Mapped[float | None] = mapped_column(Float, nullable=True)
    price_updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    card: Mapped["CardDB"] = relationship(back_populates="printings")

    def __repr__(self) -> str:
        return f"<PrintingDB(set_code={self.set_code}, rarity={self.rarity})>"


class CollectionItemDB(Base):
    """
    A user's holding of one printing.

    The (user, printing, condition, language, edition) tuple is unique;
    repeat adds merge into the existing row.
    """

    __tablename__ = "collection_items"
    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "printing_id",
            "condition",
            "language",
            "edition",
            name="uq_collection_item_key",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    printing_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("printings.id", ondelete="CASCADE"), index=True
    )
    condition: Mapped[CardCondition] = mapped_column(
        Enum(CardCondition, native_enum=False, length=20), default=CardCondition.NEAR_MINT
    )
    language: Mapped[str] = mapped_column(String(5), default="EN")
    edition: Mapped[CardEdition] = mapped_column(
        Enum(CardEdition, native_enum=False, length=20), default=CardEdition.UNLIMITED
    )
    quantity: Mapped[int] = mapped_column(Integer, default=1)
    purchase_price: Mapped[float | None] = mapped_column(Float, nullable=True)
    storage_location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    portfolio: Mapped[PortfolioType] = mapped_column(
        Enum(PortfolioType, native_enum=False, length=20), default=PortfolioType.COLLECTION
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    user: Mapped["UserDB"] = relationship(back_populates="collection_items")
    printing: Mapped["PrintingDB"] = relationship()

    def __repr__(self) -> str:
        return f"<CollectionItemDB(printing_id={self.printing_id}, qty={self.quantity})>"


class DeckDB(Base):
    """A user-owned deck."""

    __tablename__ = "decks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    format: Mapped[str | None] = mapped_column(String(50), nullable=True)
    is_public: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    user: Mapped["UserDB"] = relationship(back_populates="decks")
    cards: Mapped[list["DeckCardDB"]] = relationship(
        back_populates="deck", cascade="all, delete-orphan", order_by="DeckCardDB.id"
    )

    def __repr__(self) -> str:
        return f"<DeckDB(id={self.id}, name={self.name})>"


class DeckCardDB(Base):
    """A printing placed in one zone of a deck."""

    __tablename__ = "deck_cards"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    deck_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("decks.id", ondelete="CASCADE"), index=True
    )
    printing_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("printings.id", ondelete="CASCADE"), index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, default=1)
    zone: Mapped[DeckZone] = mapped_column(
        Enum(DeckZone, native_enum=False, length=10), default=DeckZone.MAIN
    )

    deck: Mapped["DeckDB"] = relationship(back_populates="cards")
    printing: Mapped["PrintingDB"] = relationship()

    def __repr__(self) -> str:
        return (
            f"<DeckCardDB(printing_id={self.printing_id}, qty={self.quantity}, zone={self.zone})>"
        )
