"""Spawn model for tracking wild Pokemon appearances."""

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, Index, Integer, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kickdex.core.types import SpawnInfo
from kickdex.database.models.base import Base
from kickdex.utils import utcnow


class Spawn(Base):
    """A spawn in the chat room. Rows are kept as history once inactive."""

    __tablename__ = "spawns"
    __table_args__ = (
        Index(
            "idx_spawns_active",
            "spawned_at",
            postgresql_where=text("captured_by IS NULL"),
        ),
    )

    # Primary key
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    # Species that spawned
    species_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("pokemon.id"),
        nullable=False,
    )

    # Timing
    spawned_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(nullable=False)

    # Catch info (filled when caught)
    captured_by: Mapped[str | None] = mapped_column(
        String(255),
        ForeignKey("users.id"),
        nullable=True,
    )
    captured_at: Mapped[datetime | None] = mapped_column(nullable=True)

    # Relationships
    species = relationship("PokemonSpecies", lazy="joined", innerjoin=True)

    def __repr__(self) -> str:
        return f"<Spawn {self.id} species={self.species_id}>"

    def to_info(self) -> SpawnInfo:
        return SpawnInfo(
            id=self.id,
            species_id=self.species_id,
            name=self.species.name,
            rarity=self.species.rarity,
            base_rate=self.species.base_rate,
            spawned_at=self.spawned_at,
            expires_at=self.expires_at,
            captured_by=self.captured_by,
            captured_at=self.captured_at,
        )
