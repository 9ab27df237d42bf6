"""Pokedex entry model for per-species capture counts."""

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kickdex.database.models.base import Base


class PokedexEntry(Base):
    """Cumulative captures of one species by one participant."""

    __tablename__ = "pokedex"

    # Composite primary key
    user_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("users.id"),
        primary_key=True,
    )
    species_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("pokemon.id"),
        primary_key=True,
    )

    count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    shiny_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Relationships
    user = relationship("User", back_populates="pokedex_entries")
    species = relationship("PokemonSpecies", lazy="joined")

    def __repr__(self) -> str:
        return f"<PokedexEntry user={self.user_id} species={self.species_id}>"
