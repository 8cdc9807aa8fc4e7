from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SessionChangeEvent:
    """A member's lab session changed; UI clients refresh their roster on it."""

    member_id: str
    logging_in: bool

    def to_dict(self) -> dict:
        return {"email": self.member_id, "logging_in": self.logging_in}
