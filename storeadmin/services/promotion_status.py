import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


def collect_status_changes(rows, derive, today=None) -> list[dict]:
    changes = []
    for row in rows:
        current = derive(row.start_date, row.end_date, today)
        if row.status != current:
            changes.append(
                {
                    "id": row.id,
                    "code": getattr(row, "code", None),
                    "previous": row.status,
                    "current": current,
                    "row": row,
                }
            )
    return changes


def refresh_statuses(db: Session, model, derive, *, today=None, dry_run: bool = False) -> list[dict]:
    """Recompute the stored label of every row of ``model``.

    Labels are only a cache of the date range; with ``dry_run`` the stale
    rows are reported but nothing is written.
    """
    rows = db.execute(select(model)).scalars().all()
    changes = collect_status_changes(rows, derive, today)
    if changes and not dry_run:
        for change in changes:
            change["row"].status = change["current"]
        db.commit()
        logger.info(
            "Refreshed %s %s status labels",
            len(changes),
            model.__tablename__,
        )
    for change in changes:
        change.pop("row")
    return changes


__all__ = ["collect_status_changes", "refresh_statuses"]
