from collections.abc import Iterable

from src.dl_mapping.domain.models import ReconcilePlan


def reconcile(desired: Iterable[str], current: Iterable[str]) -> ReconcilePlan:
    """Minimal diff between two manager-id sets.

    Managers present in both sets are left alone; their details change only
    through an explicit update, never as a side effect of saving the set.
    """
    want = frozenset(desired)
    have = frozenset(current)
    return ReconcilePlan(to_add=want - have, to_remove=have - want)
