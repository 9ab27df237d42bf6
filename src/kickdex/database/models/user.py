"""User model for chat participants."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kickdex.database.models.base import Base, TimestampMixin


class User(Base, TimestampMixin):
    """A chat participant, keyed by lower-cased username."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    username: Mapped[str] = mapped_column(String(255), nullable=False)

    pokedex_entries = relationship("PokedexEntry", back_populates="user", lazy="selectin")

    def __repr__(self) -> str:
        return f"<User {self.id}>"
