# table_service.py
"""
Table operations over the entity store.
Keeps the formula x criteria matrix dense after structural edits and merges
imported snapshots. Every public function is one transaction: it commits on
success and rolls the session back on any failure.
"""

import logging
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from datetime import datetime, timezone

import models
from errors import NotFoundError, ValidationError
from models import NA, db

logger = logging.getLogger(__name__)

EXPORT_VERSION = "1.0"


@dataclass
class ImportSummary:
    columns_created: int = 0
    rows_created: int = 0
    rows_updated: int = 0
    cells_written: int = 0
    cells_skipped: int = 0

    def to_dict(self):
        return asdict(self)


@contextmanager
def transaction():
    try:
        yield db.session
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


def _require_name(value, label):
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{label} required")
    return value


def _cell_text(value):
    if value is None:
        return NA
    return value if isinstance(value, str) else str(value)


def _get_formula(name):
    row = models.find_formula_by_name(name)
    if row is None:
        raise NotFoundError(f"Formula '{name}' not found")
    return row


def _get_criterion(name):
    column = models.find_criterion_by_name(name)
    if column is None:
        raise NotFoundError(f"Criteria '{name}' not found")
    return column


# ----------------- Structural edits -----------------
def add_column(name):
    """Create a criterion and back-fill an "NA" cell for every formula."""
    _require_name(name, "Criteria name")
    with transaction():
        column = models.create_criterion(name)
        rows = models.list_formulas()
        for row in rows:
            models.create_attribute(row.id, column.id, NA)
    logger.info("Added column %r (%d cells back-filled)", name, len(rows))
    return column


def add_row(name, annotation=""):
    """Create a formula and back-fill an "NA" cell for every criterion."""
    _require_name(name, "Formula name")
    with transaction():
        row = models.create_formula(name, annotation or "")
        columns = models.list_criteria()
        for column in columns:
            models.create_attribute(row.id, column.id, NA)
    logger.info("Added row %r (%d cells back-filled)", name, len(columns))
    return row


def delete_column(name):
    with transaction():
        models.delete_criterion_cascade(_get_criterion(name))
    logger.info("Deleted column %r", name)


def delete_row(name):
    with transaction():
        models.delete_formula_cascade(_get_formula(name))
    logger.info("Deleted row %r", name)


def rename_row(old_name, new_name):
    _require_name(new_name, "New name")
    with transaction():
        models.rename_formula(_get_formula(old_name), new_name)
    logger.info("Renamed row %r to %r", old_name, new_name)


# ----------------- Cell edits -----------------
def set_cell(row_name, column_name, value):
    """
    Write one cell. Returns "updated" when the cell existed and "created"
    when it had to be made.

    An empty value resets an existing cell to "NA"; a newly created cell
    keeps the value as given.
    """
    with transaction():
        row = _get_formula(row_name)
        column = _get_criterion(column_name)
        attr = models.find_attribute(row.id, column.id)
        if attr is not None:
            attr.value = value or NA
            outcome = "updated"
        else:
            models.create_attribute(row.id, column.id, NA if value is None else value)
            outcome = "created"
    return outcome


def set_annotation(row_name, annotation):
    with transaction():
        models.update_annotation(_get_formula(row_name), annotation)


# ----------------- Snapshots -----------------
def table_snapshot():
    """Denormalized view: column names plus one attribute map per row."""
    columns = models.list_criteria()
    names = {c.id: c.name for c in columns}
    rows = models.list_formulas(with_attributes=True)
    return {
        "columns": [c.name for c in columns],
        "rows": [
            {
                "name": row.name,
                "annotation": row.annotation or "",
                "attributes": {
                    names[attr.criteria_id]: attr.value
                    for attr in row.attributes
                    if attr.criteria_id in names
                },
            }
            for row in rows
        ],
    }


def export_snapshot():
    return {
        "data": table_snapshot(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": EXPORT_VERSION,
    }


def import_snapshot(data):
    """
    Merge an exported snapshot into the store.

    Columns are reused by name or created without back-filling. Rows are
    reused by name (annotation replaced only by a non-empty import) or
    created. Cell values overwrite verbatim; cells naming a column missing
    from data["columns"] are dropped.
    """
    if not isinstance(data, dict) or "columns" not in data or "rows" not in data:
        raise ValidationError("Invalid data format: 'columns' and 'rows' are required")
    if not isinstance(data["columns"], list) or not isinstance(data["rows"], list):
        raise ValidationError("Invalid data format: 'columns' and 'rows' must be lists")

    summary = ImportSummary()
    with transaction():
        column_map = {}
        for name in data["columns"]:
            _require_name(name, "Criteria name")
            column = models.find_criterion_by_name(name)
            if column is None:
                column = models.create_criterion(name)
                summary.columns_created += 1
            column_map[name] = column

        for row_data in data["rows"]:
            if not isinstance(row_data, dict):
                raise ValidationError("Invalid data format: every row must be an object")
            _require_name(row_data.get("name"), "Formula name")
            attributes = row_data.get("attributes") or {}
            if not isinstance(attributes, dict):
                raise ValidationError("Invalid data format: row attributes must be an object")
            annotation = row_data.get("annotation")
            row = models.find_formula_by_name(row_data["name"])
            if row is None:
                row = models.create_formula(row_data["name"], annotation or "")
                summary.rows_created += 1
            else:
                if annotation:
                    models.update_annotation(row, annotation)
                summary.rows_updated += 1

            for column_name, value in attributes.items():
                column = column_map.get(column_name)
                if column is None:
                    summary.cells_skipped += 1
                    continue
                models.create_or_update_attribute(row.id, column.id, _cell_text(value))
                summary.cells_written += 1

    logger.info("Imported snapshot: %s", summary.to_dict())
    return summary
