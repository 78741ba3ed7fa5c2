"""Domain models for dl_session: pure dataclasses, no I/O."""

from dataclasses import dataclass, field

from src.dl_common.enums import AccountType, Role


@dataclass(frozen=True)
class Actor:
    """The authenticated user, created at login and dropped at logout.

    Passed explicitly into every capability check and ledger query; never
    read from ambient state.
    """

    id: str
    name: str
    account_type: AccountType
    roles: frozenset[Role] = field(default_factory=frozenset)
    phone: str | None = None

    @property
    def is_management(self) -> bool:
        return self.account_type == AccountType.MANAGEMENT

    def has_role(self, *roles: Role) -> bool:
        return any(r in self.roles for r in roles)


@dataclass
class Session:
    actor: Actor
    token: str
