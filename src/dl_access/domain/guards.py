from collections.abc import Iterable

from src.dl_access.domain.capabilities import can_assign_managers, can_edit_subcategory, can_manage
from src.dl_common.errors import CapabilityDeniedError, NotAuthenticatedError
from src.dl_session.domain.models import Actor


def check_can_manage(
    actor: Actor | None,
    subcategory_id: str,
    assigned_manager_ids: Iterable[str],
    action: str,
) -> Actor:
    if actor is None:
        raise NotAuthenticatedError()
    if not can_manage(actor, subcategory_id, assigned_manager_ids):
        raise CapabilityDeniedError(action)
    return actor


def check_can_edit_subcategory(actor: Actor | None) -> Actor:
    if actor is None:
        raise NotAuthenticatedError()
    if not can_edit_subcategory(actor):
        raise CapabilityDeniedError("edit subcategories")
    return actor


def check_can_assign_managers(actor: Actor | None) -> Actor:
    if actor is None:
        raise NotAuthenticatedError()
    if not can_assign_managers(actor):
        raise CapabilityDeniedError("assign donation managers")
    return actor
