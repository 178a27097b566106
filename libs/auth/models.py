import enum
from dataclasses import dataclass
from typing import Optional
import uuid

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class AuthUser(BaseModel):
    """
    Represents an authenticated caller decoded from the bearer token.
    """

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="sub")
    email: Optional[EmailStr] = None
    role: str = "authenticated"


class Role(str, enum.Enum):
    ADMIN = "admin"
    COACH = "coach"
    ATHLETE = "athlete"


@dataclass(frozen=True)
class ActorScope:
    """Resolved authority of an actor.

    ``club_ids`` is ``None`` for admins (every club). Coaches carry their one
    club; athletes carry no club and act only on records they own.
    """

    user_id: str
    role: Role
    club_ids: Optional[frozenset[uuid.UUID]] = frozenset()

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_coach(self) -> bool:
        return self.role == Role.COACH

    @property
    def is_athlete(self) -> bool:
        return self.role == Role.ATHLETE

    def includes_club(self, club_id: uuid.UUID) -> bool:
        if self.club_ids is None:
            return True
        if self.is_athlete:
            return False
        return club_id in self.club_ids

    def owns(self, owner_id: Optional[str]) -> bool:
        return owner_id is not None and owner_id == self.user_id
