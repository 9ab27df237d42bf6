"""Exception hierarchy for Kickdex.

Catch outcomes such as a missed throw or a cooldown are ordinary return
values (see ``kickdex.core.types.CatchOutcome``); the exceptions below are
reserved for conditions the caller has to recover from.
"""


class KickdexError(Exception):
    """Base class for all Kickdex errors."""


class SpeciesNotFoundError(KickdexError):
    """Raised when a spawn is requested for a species id that does not exist."""

    def __init__(self, species_id: int) -> None:
        super().__init__(f"Unknown species id {species_id}")
        self.species_id = species_id


class CredentialError(KickdexError):
    """Raised when no usable Kick access token can be produced."""


class TransportError(KickdexError):
    """Raised when the Kick API or chat socket cannot be reached."""
