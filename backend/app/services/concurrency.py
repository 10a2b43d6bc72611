# Overview: Row locking helper for the sale unit of work.

from __future__ import annotations


def lock_for_update(query, *, of=None):
    """
    Apply row-level locking for critical operations.

    `of` restricts the lock to one entity when the query eager-joins others
    (PostgreSQL refuses FOR UPDATE on the nullable side of an outer join).

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    if of is not None:
        return query.with_for_update(of=of)
    return query.with_for_update()
