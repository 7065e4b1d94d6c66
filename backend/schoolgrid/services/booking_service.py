"""Create, update, delete and bulk-create schedule entries.

Every write is preceded by reference validation and a conflict check.
The database unique constraints on (teacher|room|section, day, period)
remain the final authority: an ``IntegrityError`` after a clean check
means another writer got there first and surfaces as
``StorageConstraintError`` without a retry.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from schoolgrid.core.exceptions import (
    AppError,
    ConflictError,
    NotFoundError,
    ReferenceNotFoundError,
    StorageConstraintError,
    ValidationError,
)
from schoolgrid.models.schedule_entry import ScheduleEntry
from schoolgrid.schemas.conflict import ConflictCheckRequest, ConflictCheckResult
from schoolgrid.schemas.schedule import (
    BOOKING_FIELDS,
    BulkScheduleResult,
    ReferenceCheckRequest,
    ScheduleEntryCreate,
    ScheduleEntryOut,
    ScheduleEntryUpdate,
    SkippedEntry,
)
from schoolgrid.services.conflict_service import ConflictService, require_day

logger = logging.getLogger(__name__)


def _candidate(fields: Mapping | ScheduleEntryCreate, exclude_entry_id: str | None = None) -> ConflictCheckRequest:
    if not isinstance(fields, Mapping):
        fields = fields.model_dump()
    return ConflictCheckRequest(
        teacher_id=fields["teacher_id"],
        section_id=fields["section_id"],
        period_id=fields["period_id"],
        room_id=fields["room_id"],
        day=fields["day"],
        exclude_entry_id=exclude_entry_id,
    )


def _conflict_types(report: ConflictCheckResult) -> str:
    return ", ".join(conflict.type for conflict in report.conflicts)


class BookingService:
    def __init__(self, db: Session, conflicts: ConflictService) -> None:
        self.db = db
        self.conflicts = conflicts

    def get_entry(self, entry_id: str) -> ScheduleEntry:
        entry = self.db.get(ScheduleEntry, entry_id)
        if entry is None:
            raise NotFoundError("Schedule entry", entry_id)
        return entry

    def _require_references(self, ids: ReferenceCheckRequest, *, index: int | None = None) -> None:
        result = self.conflicts.validate_references(ids)
        if result.valid:
            return
        if index is None:
            raise ReferenceNotFoundError(result.errors)
        raise ReferenceNotFoundError(
            result.errors,
            message=f"Entry #{index}: {', '.join(result.errors)}",
            details={"index": index},
        )

    def _commit(self, action: str, **context) -> None:
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.warning("Storage constraint rejected %s %s", action, context, exc_info=True)
            raise StorageConstraintError(details={"action": action, **context}) from exc

    def create_entry(self, payload: ScheduleEntryCreate) -> ScheduleEntry:
        day = require_day(payload.day)
        self._require_references(payload)

        report = self.conflicts.check_conflicts(_candidate(payload))
        if report.has_conflict:
            logger.info(
                "Rejected booking on %s period %s: %s conflict",
                day.value,
                payload.period_id,
                _conflict_types(report),
            )
            raise ConflictError(report.first_message, report.conflicts)

        entry = ScheduleEntry(**{**payload.model_dump(), "day": day})
        self.db.add(entry)
        self._commit("create", day=day.value, period_id=payload.period_id)
        self.db.refresh(entry)
        logger.info("Created schedule entry %s on %s period %s", entry.id, day.value, entry.period_id)
        return entry

    def update_entry(self, entry_id: str, changes: ScheduleEntryUpdate) -> ScheduleEntry:
        entry = self.get_entry(entry_id)
        data = changes.model_dump(exclude_unset=True)
        null_fields = sorted(key for key, value in data.items() if value is None)
        if null_fields:
            raise ValidationError(
                f"Fields cannot be null: {', '.join(null_fields)}",
                details={"fields": null_fields},
            )

        merged = {field: data.get(field, getattr(entry, field)) for field in BOOKING_FIELDS}
        merged["day"] = require_day(merged["day"])
        self._require_references(ReferenceCheckRequest.model_validate(merged))

        report = self.conflicts.check_conflicts(_candidate(merged, exclude_entry_id=entry.id))
        if report.has_conflict:
            logger.info("Rejected update of %s: %s conflict", entry.id, _conflict_types(report))
            raise ConflictError(report.first_message, report.conflicts)

        for key, value in data.items():
            setattr(entry, key, merged[key])
        self._commit("update", entry_id=entry.id)
        self.db.refresh(entry)
        if data:
            logger.info("Updated schedule entry %s (%s)", entry.id, ", ".join(sorted(data)))
        return entry

    def delete_entry(self, entry_id: str) -> None:
        entry = self.get_entry(entry_id)
        self.db.delete(entry)
        self.db.commit()
        logger.info("Deleted schedule entry %s", entry_id)

    def bulk_create_entries(
        self,
        entries: Sequence[ScheduleEntryCreate],
        *,
        skip_conflicts: bool = False,
    ) -> BulkScheduleResult:
        """Insert ``entries`` in order inside one transaction.

        Each entry is checked against the grid as it stands at that point of
        the transaction, including entries flushed earlier in the same batch,
        so the first of two clashing entries wins. With ``skip_conflicts``
        a clashing entry is recorded in ``skipped`` and the rest proceed;
        otherwise the first clash rolls back the whole batch. Reference and
        storage errors always roll back the whole batch.
        """
        if not entries:
            raise ValidationError("At least one entry is required")

        created: list[ScheduleEntry] = []
        skipped: list[SkippedEntry] = []
        errors: list[str] = []
        try:
            for index, payload in enumerate(entries, start=1):
                day = require_day(payload.day)
                self._require_references(payload, index=index)

                report = self.conflicts.check_conflicts(_candidate(payload))
                if report.has_conflict:
                    if not skip_conflicts:
                        raise ConflictError(
                            f"Conflict in entry #{index}: {report.first_message}",
                            report.conflicts,
                            details={"index": index},
                        )
                    logger.info(
                        "Skipped bulk entry #%d on %s period %s: %s conflict",
                        index,
                        day.value,
                        payload.period_id,
                        _conflict_types(report),
                    )
                    skipped.append(SkippedEntry(index=index, entry=payload, conflicts=report.conflicts))
                    errors.append(f"Entry #{index} skipped: {report.first_message}")
                    continue

                entry = ScheduleEntry(**{**payload.model_dump(), "day": day})
                self.db.add(entry)
                # Later entries in this batch must see this row.
                self.db.flush()
                created.append(entry)
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.warning("Storage constraint rejected bulk insert of %d entries", len(entries), exc_info=True)
            raise StorageConstraintError(details={"action": "bulk_create", "entries": len(entries)}) from exc
        except AppError as exc:
            self.db.rollback()
            logger.info("Bulk insert of %d entries rolled back: %s", len(entries), exc.message)
            raise

        logger.info(
            "Bulk insert committed %d of %d entries (%d skipped)",
            len(created),
            len(entries),
            len(skipped),
        )
        return BulkScheduleResult(
            created=[ScheduleEntryOut.model_validate(entry) for entry in created],
            skipped=skipped,
            errors=errors,
        )
