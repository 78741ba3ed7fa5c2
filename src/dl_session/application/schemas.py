"""Pydantic schema for the cached user record.

The remote API has sent `role` both as a single string and as a list over
time; both shapes are accepted and normalised to a list of roles.
"""

from pydantic import BaseModel, Field, field_validator

from src.dl_common.enums import AccountType, Role
from src.dl_session.domain.models import Actor


class StoredUser(BaseModel):
    id: str
    name: str
    phone: str | None = None
    account_type: AccountType = AccountType.COMMON
    role: list[Role] = Field(default_factory=list)

    @field_validator("role", mode="before")
    @classmethod
    def single_role_to_list(cls, v: object) -> object:
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return v

    @classmethod
    def from_actor(cls, actor: Actor) -> "StoredUser":
        return cls(
            id=actor.id,
            name=actor.name,
            phone=actor.phone,
            account_type=actor.account_type,
            role=sorted(actor.roles, key=lambda r: r.value),
        )

    def to_actor(self) -> Actor:
        return Actor(
            id=self.id,
            name=self.name,
            phone=self.phone,
            account_type=self.account_type,
            roles=frozenset(self.role),
        )


class CachedSession(BaseModel):
    user: StoredUser
    token: str | None = None
