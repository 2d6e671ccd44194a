"""Helpers for reading database integrity errors."""

from sqlalchemy import Table, UniqueConstraint
from sqlalchemy.exc import IntegrityError


def is_unique_violation(exc: IntegrityError, table: Table, constraint_name: str) -> bool:
    """True when ``exc`` was raised by the named unique constraint of ``table``.

    PostgreSQL reports the constraint name. SQLite only lists the columns
    ("UNIQUE constraint failed: t.a, t.b"), so those are matched as well.
    """
    message = str(exc.orig)
    if constraint_name in message:
        return True
    for constraint in table.constraints:
        if isinstance(constraint, UniqueConstraint) and constraint.name == constraint_name:
            columns = ", ".join(f"{table.name}.{col.name}" for col in constraint.columns)
            return "UNIQUE" in message.upper() and columns in message
    return False
