from typing import Iterable, List, Tuple

from ..models import Warranty


def partition_warranties(
    warranties: Iterable[Warranty],
    expiring: Iterable[Warranty],
) -> Tuple[List[Warranty], List[Warranty]]:
    """
    Reconcile the full warranty list with the backend's expiring list.

    Returns (expiring, active): the backend's expiring records in their given
    order, and every record of `warranties` whose id is not among them, in
    their original order. The backend's expiring window is authoritative; no
    record is re-classified here.
    """
    expiring_out: List[Warranty] = []
    expiring_ids = set()
    for w in expiring:
        if w.id in expiring_ids:
            continue
        expiring_ids.add(w.id)
        expiring_out.append(w)
    active = [w for w in warranties if w.id not in expiring_ids]
    return expiring_out, active
