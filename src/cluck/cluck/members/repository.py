from __future__ import annotations

from typing import Protocol, Sequence

from .model import Member


class MemberRepository(Protocol):
    """Member directory.

    Note (DIP): the clock gateway depends on this interface, never on a concrete DB.
    """

    def exists(self, member_id: str) -> bool:
        raise NotImplementedError

    def list_active(self) -> Sequence[Member]:
        raise NotImplementedError
