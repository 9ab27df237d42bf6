"""Pokemon species model - static catalog data."""

from sqlalchemy import CheckConstraint, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from kickdex.core.types import SpeciesInfo
from kickdex.database.models.base import Base


class PokemonSpecies(Base):
    """A catchable species with its rarity tier and base catch rate."""

    __tablename__ = "pokemon"
    __table_args__ = (
        CheckConstraint("base_rate >= 0 AND base_rate <= 1", name="ck_pokemon_base_rate"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    rarity: Mapped[str] = mapped_column(String(20), nullable=False)
    base_rate: Mapped[float] = mapped_column(Float, nullable=False)

    def __repr__(self) -> str:
        return f"<PokemonSpecies #{self.id} {self.name}>"

    def to_info(self) -> SpeciesInfo:
        return SpeciesInfo(
            id=self.id,
            name=self.name,
            rarity=self.rarity,
            base_rate=self.base_rate,
        )
