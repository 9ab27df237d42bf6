"""Key/value model for OAuth tokens and chat routing ids."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from kickdex.database.models.base import Base


class TokenEntry(Base):
    """A stored credential or routing value."""

    __tablename__ = "tokens"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<TokenEntry {self.key}>"
