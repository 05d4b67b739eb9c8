# backend/app/domain/lifecycle.py
from __future__ import annotations

from .catalog import DRAW_STATUSES, ITEM_STATUSES
from .errors import DomainValidationError, InvalidTransition

# -----------------------------------------------------------------------------
# Status lifecycles for budget items and draws.
#
# Budget item: not_started -> in_progress -> complete
#              (any open state) -> on_hold | cancelled
#              on_hold -> not_started | in_progress | cancelled
# Draw:        pending -> approved -> paid
#              pending -> paid (paid on request)
#              approved -> pending (un-approve)
#
# complete / cancelled / paid are terminal.
# -----------------------------------------------------------------------------

ITEM_TRANSITIONS: dict[str, frozenset[str]] = {
    "not_started": frozenset({"in_progress", "on_hold", "cancelled"}),
    "in_progress": frozenset({"complete", "on_hold", "cancelled"}),
    "on_hold": frozenset({"not_started", "in_progress", "cancelled"}),
    "complete": frozenset(),
    "cancelled": frozenset(),
}

DRAW_TRANSITIONS: dict[str, frozenset[str]] = {
    "pending": frozenset({"approved", "paid"}),
    "approved": frozenset({"pending", "paid"}),
    "paid": frozenset(),
}


def _norm(s: str | None) -> str:
    return (s or "").strip().lower()


def _check(entity: str, table: dict[str, frozenset[str]], known: tuple[str, ...], current: str | None, target: str) -> str:
    cur = _norm(current) or known[0]
    nxt = _norm(target)
    if nxt not in known:
        raise DomainValidationError(f"unknown {entity} status: {target!r}")
    if cur == nxt:
        return nxt
    if nxt not in table.get(cur, frozenset()):
        raise InvalidTransition(entity, cur, nxt)
    return nxt


def ensure_item_transition(current: str | None, target: str) -> str:
    return _check("budget_item", ITEM_TRANSITIONS, ITEM_STATUSES, current, target)


def ensure_draw_transition(current: str | None, target: str) -> str:
    return _check("draw", DRAW_TRANSITIONS, DRAW_STATUSES, current, target)
