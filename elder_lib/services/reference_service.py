# --- elder_lib/services/reference_service.py ---
import csv
import io
import logging
import os
from dataclasses import asdict, dataclass, field
from typing import List

from ..constants import KNOWN_PRIEST_SPHERES, KNOWN_WIZARD_SCHOOLS
from ..schemas import ReferenceCsvRow, ReferenceSyncCsvRow
from ..spell_rules import normalize_spell_name, split_csv_like_list

log = logging.getLogger("elder.reference")

__all__ = [
    "ReferenceService",
    "SpellReferenceMatch",
    "SyncResult",
    "classify_group_token",
    "normalize_spell_name",
    "parse_reference_csv",
]


class ReferenceCsvError(ValueError):
    """Raised when a reference CSV cannot be used."""


@dataclass
class SpellReferenceMatch:
    """Everything the reference table knows about one spell name."""

    levels: List[int] = field(default_factory=list)
    sources: List[str] = field(default_factory=list)
    schools: List[str] = field(default_factory=list)
    spheres: List[str] = field(default_factory=list)
    class_names: List[str] = field(default_factory=list)


@dataclass
class SyncResult:
    files: int
    read: int
    created: int
    updated: int
    deleted: int

    def to_dict(self) -> dict:
        return asdict(self)


def classify_group_token(class_name: str, token: str) -> tuple:
    """
    Decides whether a reference group token names a wizard school or a
    priest sphere.
    Returns:
        tuple: (school, sphere), at most one of them set.
    """
    token = (token or "").strip()
    if not token:
        return None, None

    lowered = token.lower()
    klass = (class_name or "").strip().lower()

    if "priest" in klass or "druid" in klass:
        return None, token
    if lowered in KNOWN_PRIEST_SPHERES or lowered.startswith("sphere"):
        return None, token
    if lowered in KNOWN_WIZARD_SCHOOLS or "wizard" in klass or "mage" in klass:
        return token, None
    return token, None


def parse_reference_csv(text: str, row_model=ReferenceCsvRow) -> list:
    """
    Parses a `class,group,name,lvl,source` CSV into validated rows.
    Cells are trimmed and blank lines skipped; pydantic errors propagate.
    """
    reader = csv.DictReader(io.StringIO(text or ""), skipinitialspace=True)
    rows = []
    for raw in reader:
        cells = {
            (key or "").strip(): (value or "").strip() if isinstance(value, str) else value
            for key, value in raw.items()
        }
        if not any(cells.values()):
            continue
        rows.append(row_model.model_validate(cells))
    return rows


def _row_to_record(row) -> dict:
    return {
        "class_name": row.class_name,
        "group_name": row.group_name,
        "name": row.name,
        "normalized_name": normalize_spell_name(row.name),
        "level": row.lvl,
        "source": row.source,
    }


def _row_key(record) -> str:
    return "::".join(
        [
            record["normalized_name"],
            record["class_name"],
            record["group_name"],
            str(record["level"]),
            record["source"],
        ]
    )


class ReferenceService:
    """Reads and maintains the canonical spell reference table."""

    def __init__(self, storage):
        self.storage = storage

    def find_spell_reference_by_name(self, name: str):
        """
        Collects levels, sources, groups and classes listed for a spell.
        Returns:
            SpellReferenceMatch | None: None for blank names or unknown spells.
        """
        normalized = normalize_spell_name(name)
        if not normalized:
            return None

        rows = self.storage.find_spell_references(normalized)
        if not rows:
            log.debug("No reference rows for '%s'.", normalized)
            return None

        schools, spheres = set(), set()
        for row in rows:
            for token in split_csv_like_list(row["group_name"]):
                school, sphere = classify_group_token(row["class_name"], token)
                if school:
                    schools.add(school)
                if sphere:
                    spheres.add(sphere)

        match = SpellReferenceMatch(
            levels=sorted({row["level"] for row in rows}),
            sources=sorted({row["source"].strip() for row in rows if row["source"].strip()}),
            schools=sorted(schools),
            spheres=sorted(spheres),
            class_names=sorted(
                {row["class_name"].strip().lower() for row in rows if row["class_name"].strip()}
            ),
        )
        log.debug("Reference for '%s': %s", normalized, match)
        return match

    def import_reference_csv(self, text: str) -> int:
        """Adds the CSV rows to the table. Returns how many were new."""
        rows = parse_reference_csv(text)
        if not rows:
            raise ReferenceCsvError("CSV has no rows")
        imported = self.storage.insert_spell_references([_row_to_record(row) for row in rows])
        log.info("Imported %d of %d reference rows.", imported, len(rows))
        return imported

    def sync_reference_from_csv(self, csv_path: str = None, csv_dir: str = "data") -> SyncResult:
        """
        Makes the reference table mirror one CSV file or every CSV in a
        directory: new rows are created, changed display names updated and
        rows absent from the files deleted.
        """
        paths = [os.path.abspath(csv_path)] if csv_path else self._list_csv_files(csv_dir)
        if not paths:
            raise ReferenceCsvError("No CSV files found for spell reference sync")

        incoming = []
        for path in paths:
            with open(path, encoding="utf-8") as handle:
                rows = parse_reference_csv(handle.read(), row_model=ReferenceSyncCsvRow)
            log.debug("Read %d rows from %s.", len(rows), path)
            incoming.extend(_row_to_record(row) for row in rows)

        incoming_map = {_row_key(record): record for record in incoming}
        existing_map = {_row_key(dict(row)): row for row in self.storage.get_all_spell_references()}

        creates, renames = [], []
        for key, record in incoming_map.items():
            existing = existing_map.get(key)
            if existing is None:
                creates.append(record)
            elif existing["name"] != record["name"]:
                renames.append((existing["id"], record["name"]))
        delete_ids = [row["id"] for key, row in existing_map.items() if key not in incoming_map]

        self.storage.apply_reference_sync(creates, renames, delete_ids)
        return SyncResult(
            files=len(paths),
            read=len(incoming),
            created=len(creates),
            updated=len(renames),
            deleted=len(delete_ids),
        )

    @staticmethod
    def _list_csv_files(csv_dir: str) -> list:
        directory = os.path.abspath(csv_dir or "data")
        if not os.path.isdir(directory):
            raise ReferenceCsvError(f"CSV directory not found: {directory}")
        return sorted(
            os.path.join(directory, entry)
            for entry in os.listdir(directory)
            if entry.lower().endswith(".csv") and os.path.isfile(os.path.join(directory, entry))
        )
