"""RoleCapabilityResolver: what an actor may see and do for one subcategory.

Pure functions of (actor, assigned-manager ids); no I/O, no caching. Callers
re-resolve whenever the assignment snapshot changes.

Rules:
  - Non-MANAGEMENT account type: no capability, public statuses only.
  - ADMIN / SUB_ADMIN: full capability on every subcategory.
  - DONATION_MANAGER: capability iff actor.id is in the assigned-manager set.
  - Everyone else: no capability, public statuses only.

The assigned-manager set is the union of every known source (the summary
payload that led to the view and the freshly fetched mapping list); sources
are never ranked against each other.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from src.dl_common.enums import Role
from src.dl_session.domain.models import Actor

_ADMIN_ROLES = (Role.ADMIN, Role.SUB_ADMIN)


@dataclass(frozen=True)
class CapabilitySet:
    can_manage: bool
    can_view_all_statuses: bool
    can_download_report: bool
    can_edit_subcategory: bool
    can_assign_managers: bool


def union_manager_ids(*sources: Iterable[str] | None) -> frozenset[str]:
    ids: set[str] = set()
    for source in sources:
        if source:
            ids.update(source)
    return frozenset(ids)


def is_admin(actor: Actor | None) -> bool:
    return actor is not None and actor.is_management and actor.has_role(*_ADMIN_ROLES)


def can_manage(
    actor: Actor | None,
    subcategory_id: str,
    assigned_manager_ids: Iterable[str] = (),
) -> bool:
    if actor is None or not actor.is_management:
        return False
    if actor.has_role(*_ADMIN_ROLES):
        return True
    if actor.has_role(Role.DONATION_MANAGER):
        return actor.id in frozenset(assigned_manager_ids)
    return False


def can_view_all_statuses(
    actor: Actor | None,
    assigned_manager_ids: Iterable[str] = (),
) -> bool:
    # Same rule set as can_manage; the subcategory only scopes the assignment set.
    return can_manage(actor, "", assigned_manager_ids)


def can_download_report(
    actor: Actor | None,
    subcategory_id: str,
    assigned_manager_ids: Iterable[str] = (),
    visible_entry_count: int = 0,
) -> bool:
    return visible_entry_count > 0 and can_manage(actor, subcategory_id, assigned_manager_ids)


def can_edit_subcategory(actor: Actor | None) -> bool:
    return is_admin(actor)


def can_assign_managers(actor: Actor | None) -> bool:
    return is_admin(actor)


def resolve_capabilities(
    actor: Actor | None,
    subcategory_id: str,
    assigned_manager_ids: Iterable[str] = (),
    visible_entry_count: int = 0,
) -> CapabilitySet:
    assigned = frozenset(assigned_manager_ids)
    return CapabilitySet(
        can_manage=can_manage(actor, subcategory_id, assigned),
        can_view_all_statuses=can_view_all_statuses(actor, assigned),
        can_download_report=can_download_report(
            actor, subcategory_id, assigned, visible_entry_count
        ),
        can_edit_subcategory=can_edit_subcategory(actor),
        can_assign_managers=can_assign_managers(actor),
    )
