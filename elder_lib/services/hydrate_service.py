# --- elder_lib/services/hydrate_service.py ---
import logging
from dataclasses import dataclass

import requests

from core.llm_utils import LLMConfigError, LLMServiceError
from core.log_utils import log_context
from ..constants import SPELL_NOT_FOUND_REASON
from ..schemas import SpellPayload
from .storage_service import SPELL_COLUMNS
from ..spell_rules import build_spell_dedupe_key, merge_unique_values, normalize_spell_name, split_csv_like_list

log = logging.getLogger("elder.hydrate")

HYDRATE_UPDATE_COLUMNS = tuple(c for c in SPELL_COLUMNS if c not in ("name", "icon_url", "icon_prompt"))
HYDRATE_ERRORS = (ValueError, LLMServiceError, LLMConfigError, requests.RequestException)


@dataclass
class CandidateReference:
    normalized_name: str
    name: str
    spell_class: str
    level: int
    reference_source: str


def classify_reference_class(class_name: str):
    """wizard/mage rows are arcane, priest/druid rows divine, anything else unusable."""
    normalized = (class_name or "").strip().lower()
    if "wizard" in normalized or "mage" in normalized:
        return "arcane"
    if "priest" in normalized or "druid" in normalized:
        return "divine"
    return None


def missing_row_to_dict(row) -> dict:
    return {
        "id": row["id"],
        "normalizedName": row["normalized_name"],
        "spellName": row["spell_name"],
        "spellClass": "divine" if row["spell_class"] == "divine" else "arcane",
        "referenceSource": row["reference_source"],
        "reason": row["reason"],
        "lastUrl": row["last_url"],
        "attemptCount": row["attempt_count"],
        "updatedAt": row["updated_at"],
    }


class HydrateService:
    """
    Fills the spell table from the reference list: each pending reference
    spell is looked up on the 2e wiki, parsed and saved. Spells that cannot
    be found or parsed are remembered in the missing table for later retries.
    """

    def __init__(self, storage, parse_service, web_lookup):
        self.storage = storage
        self.parse_service = parse_service
        self.web_lookup = web_lookup

    @staticmethod
    def _key(normalized_name: str, spell_class: str) -> str:
        return f"{normalized_name}::{'divine' if spell_class == 'divine' else 'arcane'}"

    def get_candidate_spells(
        self,
        name=None,
        spell_class=None,
        limit=1,
        retry_missing=False,
        retry_only_missing=False,
        retry_order="oldest",
    ) -> list[CandidateReference]:
        wanted = normalize_spell_name(name) if name else None
        rows = self.storage.get_all_spell_references()
        rows = sorted(
            (row for row in rows if not wanted or row["normalized_name"] == wanted),
            key=lambda r: (r["normalized_name"], r["class_name"], r["level"], r["source"]),
        )

        grouped = {}
        for row in rows:
            row_class = classify_reference_class(row["class_name"])
            if not row_class or (spell_class and spell_class != row_class):
                continue
            grouped.setdefault(
                self._key(row["normalized_name"], row_class),
                CandidateReference(
                    normalized_name=row["normalized_name"],
                    name=row["name"],
                    spell_class=row_class,
                    level=row["level"],
                    reference_source=row["source"],
                ),
            )

        existing = {
            self._key(normalize_spell_name(row["name"]), row["spell_class"])
            for row in self.storage.list_spell_identities()
        }
        missing_rows = sorted(
            self.storage.get_missing_reference_keys(),
            key=lambda r: r["updated_at"],
            reverse=retry_order == "newest",
        )
        missing_keys = [self._key(r["normalized_name"], r["spell_class"]) for r in missing_rows]

        candidates = []
        if retry_missing:
            for key in missing_keys:
                row = grouped.get(key)
                if row is None or key in existing:
                    continue
                candidates.append(row)
                if len(candidates) >= limit:
                    return candidates
            if retry_only_missing:
                return candidates

        missing_set = set(missing_keys)
        for key, row in grouped.items():
            if key in existing or (not retry_missing and key in missing_set) or row in candidates:
                continue
            candidates.append(row)
            if len(candidates) >= limit:
                break
        return candidates

    def process_candidate(self, candidate: CandidateReference) -> dict:
        """
        Fetches, parses and saves one reference spell.
        Returns:
            dict: The per-spell result with status "saved" or "not-found".
        """
        with log_context(log, candidate.name):
            return self._process(candidate)

    def _result(self, candidate, status, **extra) -> dict:
        result = {
            "normalizedName": candidate.normalized_name,
            "name": candidate.name,
            "spellClass": candidate.spell_class,
            "level": candidate.level,
            "status": status,
        }
        result.update({k: v for k, v in extra.items() if v is not None})
        return result

    def _process(self, candidate: CandidateReference) -> dict:
        web = self.web_lookup.search_spell_text_strict(candidate)
        if web is None:
            log.info("No 2e source found.")
            self.storage.upsert_missing_reference(
                candidate.normalized_name,
                candidate.name,
                candidate.spell_class,
                candidate.reference_source,
                SPELL_NOT_FOUND_REASON,
            )
            return self._result(candidate, "not-found", reason=SPELL_NOT_FOUND_REASON)

        try:
            spell_id = self._parse_and_save(candidate, web.text)
        except HYDRATE_ERRORS as e:
            reason = str(e) or "PARSE_OR_SAVE_FAILED"
            log.warning("Hydration failed: %s", reason)
            self.storage.upsert_missing_reference(
                candidate.normalized_name,
                candidate.name,
                candidate.spell_class,
                candidate.reference_source,
                reason,
                web.url,
            )
            return self._result(candidate, "not-found", reason=reason, matchedUrl=web.url)

        self.storage.clear_missing_reference(candidate.normalized_name, candidate.spell_class)
        log.info("Saved as spell id %d.", spell_id)
        return self._result(candidate, "saved", spellId=spell_id, matchedUrl=web.url)

    def _parse_and_save(self, candidate: CandidateReference, web_text: str) -> int:
        header = [
            f"EXPECTED_NAME: {candidate.name}",
            f"EXPECTED_CLASS: {candidate.spell_class}",
            f"EXPECTED_LEVEL: {candidate.level}",
            f"EXPECTED_SOURCE: {candidate.reference_source}",
            "",
            web_text,
        ]
        parsed = self.parse_service.parse_spell({"text": "\n".join(header)})
        if normalize_spell_name(parsed.name) != candidate.normalized_name:
            raise ValueError(f"Nome divergente no parse ({parsed.name}).")

        schools = merge_unique_values(split_csv_like_list(parsed.school))
        spheres = merge_unique_values(split_csv_like_list(parsed.sphere))
        if candidate.spell_class == "arcane":
            schools = merge_unique_values(schools, spheres)
            spheres = []
        if candidate.spell_class == "divine" and not spheres:
            raise ValueError("Magia divina sem esfera identificada.")

        payload = SpellPayload.model_validate(
            {
                **parsed.model_dump(),
                "name": candidate.name,
                "level": candidate.level,
                "spell_class": candidate.spell_class,
                "school": ", ".join(schools) or None,
                "sphere": ", ".join(spheres) or None,
                "source": parsed.source or candidate.reference_source,
                "source_image_url": None,
            }
        )
        dedupe_key = build_spell_dedupe_key(payload)

        same_class = self.storage.find_spells_by_class(payload.spell_class)
        existing = next(
            (row for row in same_class if normalize_spell_name(row["name"]) == candidate.normalized_name),
            None,
        )
        if existing is not None:
            if not self.storage.replace_spell(existing["id"], payload, dedupe_key):
                raise ValueError("Spell update conflicts with another stored spell.")
            return existing["id"]
        return self.storage.upsert_spell(payload, dedupe_key, update_columns=HYDRATE_UPDATE_COLUMNS)

    def hydrate(self, request) -> dict:
        """Runs one hydration batch for a validated HydrateRequest."""
        candidates = self.get_candidate_spells(
            name=request.name,
            spell_class=request.spell_class,
            limit=request.limit,
            retry_missing=request.retry_missing,
            retry_only_missing=request.retry_only_missing,
            retry_order=request.retry_order,
        )
        if not candidates:
            return {
                "processed": [],
                "error": "Nenhum candidate pendente para processar com os filtros informados.",
            }

        log.info("Hydrating %d reference spell(s).", len(candidates))
        processed = [self.process_candidate(candidate) for candidate in candidates]
        return {"processed": processed, "missing": self.list_missing()}

    def list_missing(self, limit: int = 100) -> list[dict]:
        return [missing_row_to_dict(row) for row in self.storage.list_missing_references(limit)]
