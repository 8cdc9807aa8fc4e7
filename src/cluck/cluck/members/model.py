from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Member:
    """Domain entity: a member of the space, identified by email.

    Note: The roster is maintained elsewhere; this service only reads it.
    """

    email: str
    first_name: str
    full_name: str
    active: bool = True

    def to_dict(self) -> dict:
        return {"email": self.email, "first_name": self.first_name, "full_name": self.full_name}
