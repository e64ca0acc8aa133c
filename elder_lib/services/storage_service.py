# --- elder_lib/services/storage_service.py ---
import json
import logging
import sqlite3
from datetime import datetime

log = logging.getLogger("elder.storage")

# Columns written from a SpellPayload, in table order.
SPELL_COLUMNS = (
    "name",
    "level",
    "spell_class",
    "school",
    "sphere",
    "source",
    "range_text",
    "target",
    "duration_text",
    "casting_time",
    "components",
    "component_desc",
    "component_cost",
    "component_consumed",
    "can_be_dispelled",
    "dispel_how",
    "combat",
    "utility",
    "saving_throw",
    "saving_throw_outcome",
    "magical_resistance",
    "summary_en",
    "summary_pt_br",
    "description_original",
    "description_pt_br",
    "source_image_url",
    "icon_url",
    "icon_prompt",
)

# Columns refreshed when a save collides with an existing dedupe key.
SPELL_CONFLICT_COLUMNS = (
    "spell_class",
    "component_desc",
    "component_cost",
    "component_consumed",
    "can_be_dispelled",
    "dispel_how",
    "combat",
    "utility",
    "summary_en",
    "summary_pt_br",
    "description_original",
    "description_pt_br",
    "source_image_url",
)

BOOLEAN_SPELL_COLUMNS = frozenset({"component_consumed", "can_be_dispelled", "combat", "utility"})


def _now() -> str:
    return datetime.utcnow().strftime("%Y-%m-%d %H:%M:%S")


def spell_row_to_dict(row) -> dict:
    """Converts a spells row into a plain dict with real booleans."""
    data = dict(row)
    for column in BOOLEAN_SPELL_COLUMNS:
        if column in data and data[column] is not None:
            data[column] = bool(data[column])
    return data


class StorageService:
    """
    Manages all interactions with the application's SQLite database.
    """

    def __init__(self, db_path: str):
        """
        Initializes the service with the path to the SQLite database.
        Args:
            db_path (str): The full file path to the database.
        """
        if not db_path:
            raise ValueError("Database path cannot be empty.")
        self.db_path = db_path

    def _get_connection(self) -> sqlite3.Connection:
        """
        Establishes a connection to the SQLite database.
        Enables foreign key support and sets the row factory.
        """
        conn = sqlite3.connect(self.db_path)
        conn.execute("PRAGMA foreign_keys = ON;")
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self):
        """
        Creates all necessary database tables if they do not already exist.
        This method is idempotent and safe to run on every application start.
        """
        log.info("Initializing database schema...")
        conn = self._get_connection()
        try:
            with conn:
                self._create_spells_table(conn)
                self._create_spell_references_table(conn)
                self._create_spell_reference_missing_table(conn)
                self._create_ui_text_table(conn)
                self._create_attribute_tables(conn)
                self._create_race_tables(conn)
            log.info("Database schema checked and is up to date.")
        except sqlite3.Error as e:
            log.error("An error occurred during DB initialization: %s", e)
            raise
        finally:
            conn.close()

    # --- Schema Creation ---
    def _create_spells_table(self, conn: sqlite3.Connection):
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS spells (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                dedupe_key TEXT NOT NULL UNIQUE,
                name TEXT NOT NULL,
                level INTEGER NOT NULL,
                spell_class TEXT NOT NULL DEFAULT 'arcane',
                school TEXT,
                sphere TEXT,
                source TEXT,
                range_text TEXT NOT NULL,
                target TEXT,
                duration_text TEXT NOT NULL,
                casting_time TEXT NOT NULL,
                components TEXT NOT NULL,
                component_desc TEXT,
                component_cost TEXT,
                component_consumed INTEGER NOT NULL DEFAULT 0,
                can_be_dispelled INTEGER NOT NULL DEFAULT 0,
                dispel_how TEXT,
                combat INTEGER NOT NULL DEFAULT 0,
                utility INTEGER NOT NULL DEFAULT 0,
                saving_throw TEXT NOT NULL,
                saving_throw_outcome TEXT,
                magical_resistance TEXT NOT NULL,
                summary_en TEXT NOT NULL,
                summary_pt_br TEXT NOT NULL,
                description_original TEXT NOT NULL,
                description_pt_br TEXT NOT NULL,
                source_image_url TEXT,
                icon_url TEXT,
                icon_prompt TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            );
            """
        )

    def _create_spell_references_table(self, conn: sqlite3.Connection):
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS spell_references (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                class_name TEXT NOT NULL,
                group_name TEXT NOT NULL,
                name TEXT NOT NULL,
                normalized_name TEXT NOT NULL,
                level INTEGER NOT NULL,
                source TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                UNIQUE (normalized_name, class_name, group_name, level, source)
            );
            """
        )
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_spell_references_name "
            "ON spell_references (normalized_name);"
        )

    def _create_spell_reference_missing_table(self, conn: sqlite3.Connection):
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS spell_reference_missing (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                normalized_name TEXT NOT NULL,
                spell_name TEXT NOT NULL,
                spell_class TEXT NOT NULL,
                reference_source TEXT,
                reason TEXT NOT NULL,
                last_url TEXT,
                attempt_count INTEGER NOT NULL DEFAULT 1,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                UNIQUE (normalized_name, spell_class)
            );
            """
        )

    def _create_ui_text_table(self, conn: sqlite3.Connection):
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS ui_text_translations (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                namespace TEXT NOT NULL,
                key TEXT NOT NULL,
                locale TEXT NOT NULL,
                text TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                UNIQUE (namespace, key, locale)
            );
            """
        )

    def _create_translation_table(self, conn, table: str, owner_column: str, owner_table: str):
        conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {table} (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                {owner_column} INTEGER NOT NULL,
                locale TEXT NOT NULL,
                name TEXT,
                description TEXT,
                full_description TEXT,
                UNIQUE ({owner_column}, locale),
                FOREIGN KEY ({owner_column}) REFERENCES {owner_table} (id) ON DELETE CASCADE
            );
            """
        )

    def _create_attribute_tables(self, conn: sqlite3.Connection):
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS attribute_definitions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                code TEXT NOT NULL UNIQUE,
                name TEXT NOT NULL,
                description TEXT,
                full_description TEXT,
                sort_order INTEGER NOT NULL DEFAULT 0
            );
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS sub_attribute_definitions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                attribute_id INTEGER NOT NULL,
                code TEXT NOT NULL UNIQUE,
                name TEXT NOT NULL,
                description TEXT,
                full_description TEXT,
                sort_order INTEGER NOT NULL DEFAULT 0,
                FOREIGN KEY (attribute_id) REFERENCES attribute_definitions (id) ON DELETE CASCADE
            );
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS sub_attribute_scores (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                sub_attribute_id INTEGER NOT NULL,
                sort_order INTEGER NOT NULL DEFAULT 0,
                values_json TEXT NOT NULL, -- Stored as JSON keyed by score column
                FOREIGN KEY (sub_attribute_id) REFERENCES sub_attribute_definitions (id)
                    ON DELETE CASCADE
            );
            """
        )
        self._create_translation_table(
            conn, "attribute_translations", "attribute_id", "attribute_definitions"
        )
        self._create_translation_table(
            conn, "sub_attribute_translations", "sub_attribute_id", "sub_attribute_definitions"
        )

    def _create_race_tables(self, conn: sqlite3.Connection):
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS race_bases (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL UNIQUE,
                description TEXT,
                full_description TEXT,
                class_point_budget INTEGER NOT NULL DEFAULT 0,
                strength_adjustment INTEGER NOT NULL DEFAULT 0,
                constitution_adjustment INTEGER NOT NULL DEFAULT 0,
                dexterity_adjustment INTEGER NOT NULL DEFAULT 0,
                wisdom_adjustment INTEGER NOT NULL DEFAULT 0,
                intelligence_adjustment INTEGER NOT NULL DEFAULT 0,
                charisma_adjustment INTEGER NOT NULL DEFAULT 0,
                max_level_fighter TEXT,
                max_level_paladin TEXT,
                max_level_ranger TEXT,
                max_level_thief TEXT,
                max_level_bard TEXT,
                max_level_wizard TEXT,
                max_level_illusionist TEXT,
                max_level_cleric TEXT,
                max_level_druid TEXT
            );
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS sub_races (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                race_id INTEGER NOT NULL,
                name TEXT NOT NULL,
                description TEXT,
                full_description TEXT,
                languages TEXT,
                character_point_cost INTEGER NOT NULL DEFAULT 0,
                UNIQUE (race_id, name),
                FOREIGN KEY (race_id) REFERENCES race_bases (id) ON DELETE CASCADE
            );
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS race_abilities (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                race_id INTEGER NOT NULL,
                name TEXT NOT NULL,
                kind TEXT NOT NULL DEFAULT 'BENEFIT',
                cost INTEGER NOT NULL DEFAULT 0,
                description TEXT,
                full_description TEXT,
                UNIQUE (race_id, name),
                FOREIGN KEY (race_id) REFERENCES race_bases (id) ON DELETE CASCADE
            );
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS sub_race_standard_abilities (
                sub_race_id INTEGER NOT NULL,
                race_ability_id INTEGER NOT NULL,
                PRIMARY KEY (sub_race_id, race_ability_id),
                FOREIGN KEY (sub_race_id) REFERENCES sub_races (id) ON DELETE CASCADE,
                FOREIGN KEY (race_ability_id) REFERENCES race_abilities (id) ON DELETE CASCADE
            );
            """
        )
        self._create_translation_table(conn, "race_translations", "race_id", "race_bases")
        self._create_translation_table(conn, "sub_race_translations", "sub_race_id", "sub_races")
        self._create_translation_table(
            conn, "race_ability_translations", "race_ability_id", "race_abilities"
        )

    # --- Health ---
    def ping(self) -> bool:
        with self._get_connection() as conn:
            return conn.execute("SELECT 1;").fetchone()[0] == 1

    def has_spell_class_column(self) -> bool:
        with self._get_connection() as conn:
            columns = conn.execute("PRAGMA table_info(spells);").fetchall()
            return any(column["name"] == "spell_class" for column in columns)

    # --- Spell Methods ---
    def upsert_spell(self, payload, dedupe_key: str, update_columns=SPELL_CONFLICT_COLUMNS) -> int:
        """
        Inserts a spell or, when the dedupe key already exists, refreshes the
        mutable subset of its columns.
        Args:
            payload (SpellPayload): The validated spell.
            dedupe_key (str): Identity hash of the spell.
            update_columns (tuple): Columns overwritten on a key collision.
        Returns:
            int: The id of the stored row.
        """
        values = self._spell_values(payload)
        if not values["can_be_dispelled"]:
            values["dispel_how"] = None
        log.debug("Upserting spell '%s' (key %s).", payload.name, dedupe_key[:12])

        columns = ", ".join(("dedupe_key",) + SPELL_COLUMNS)
        placeholders = ", ".join("?" for _ in range(len(SPELL_COLUMNS) + 1))
        updates = ", ".join(f"{column} = excluded.{column}" for column in update_columns)
        with self._get_connection() as conn:
            conn.execute(
                f"""
                INSERT INTO spells ({columns}) VALUES ({placeholders})
                ON CONFLICT(dedupe_key) DO UPDATE SET {updates}, updated_at = ?;
                """,
                (dedupe_key, *[values[column] for column in SPELL_COLUMNS], _now()),
            )
            row = conn.execute(
                "SELECT id FROM spells WHERE dedupe_key = ?;", (dedupe_key,)
            ).fetchone()
            return row["id"]

    def replace_spell(self, spell_id: int, payload, dedupe_key: str) -> bool:
        """Overwrites every column of an existing spell, its name and key included."""
        values = self._spell_values(payload)
        log.debug("Replacing spell id %d with '%s'.", spell_id, payload.name)
        assignments = ", ".join(f"{column} = ?" for column in SPELL_COLUMNS)
        with self._get_connection() as conn:
            try:
                cursor = conn.execute(
                    f"UPDATE spells SET dedupe_key = ?, {assignments}, updated_at = ? WHERE id = ?;",
                    (dedupe_key, *[values[c] for c in SPELL_COLUMNS], _now(), spell_id),
                )
                return cursor.rowcount > 0
            except sqlite3.IntegrityError:
                log.warning("Spell id %d collides with another spell's dedupe key.", spell_id)
                return False

    @staticmethod
    def _spell_values(payload) -> dict:
        values = {column: getattr(payload, column) for column in SPELL_COLUMNS}
        for column in BOOLEAN_SPELL_COLUMNS:
            values[column] = 1 if values[column] else 0
        return values

    def get_spell(self, spell_id: int):
        log.debug("Fetching spell with id: %d.", spell_id)
        with self._get_connection() as conn:
            return conn.execute("SELECT * FROM spells WHERE id = ?;", (spell_id,)).fetchone()

    def get_adjacent_spell_ids(self, spell_id: int) -> tuple:
        """Returns (previous id, next id) in id order, None at either end."""
        with self._get_connection() as conn:
            prev_row = conn.execute(
                "SELECT id FROM spells WHERE id < ? ORDER BY id DESC LIMIT 1;", (spell_id,)
            ).fetchone()
            next_row = conn.execute(
                "SELECT id FROM spells WHERE id > ? ORDER BY id ASC LIMIT 1;", (spell_id,)
            ).fetchone()
        return (prev_row["id"] if prev_row else None, next_row["id"] if next_row else None)

    @staticmethod
    def _spell_filter_clause(filters: dict) -> tuple:
        clauses, params = [], []
        if filters.get("name"):
            clauses.append("instr(lower(name), lower(?)) > 0")
            params.append(filters["name"])
        if filters.get("spell_class"):
            clauses.append("spell_class = ?")
            params.append(filters["spell_class"])
        if filters.get("group"):
            clauses.append(
                "(instr(lower(coalesce(school, '')), lower(?)) > 0 "
                "OR instr(lower(coalesce(sphere, '')), lower(?)) > 0)"
            )
            params.extend([filters["group"], filters["group"]])
        if filters.get("level") is not None:
            clauses.append("level = ?")
            params.append(filters["level"])
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        return where, params

    def count_spells(self, filters: dict) -> int:
        where, params = self._spell_filter_clause(filters)
        with self._get_connection() as conn:
            return conn.execute(f"SELECT COUNT(*) FROM spells {where};", params).fetchone()[0]

    def find_spells(self, filters: dict, limit: int, offset: int):
        """Lists spells matching the filters ordered by level, then name."""
        where, params = self._spell_filter_clause(filters)
        log.debug("Listing spells with filters %s (offset %d).", filters, offset)
        with self._get_connection() as conn:
            return conn.execute(
                f"""
                SELECT id, name, level, spell_class, school, sphere, source, updated_at
                FROM spells {where}
                ORDER BY level ASC, name ASC, id ASC
                LIMIT ? OFFSET ?;
                """,
                (*params, limit, offset),
            ).fetchall()

    def update_spell(self, spell_id: int, values: dict) -> bool:
        """
        Updates the given columns of a spell.
        Returns:
            bool: False when the change collides with another spell's key.
        """
        if not values:
            return True
        log.debug("Updating spell id %d columns: %s.", spell_id, ", ".join(values))
        assignments = ", ".join(f"{column} = ?" for column in values)
        params = [
            (1 if value else 0) if column in BOOLEAN_SPELL_COLUMNS else value
            for column, value in values.items()
        ]
        with self._get_connection() as conn:
            try:
                cursor = conn.execute(
                    f"UPDATE spells SET {assignments}, updated_at = ? WHERE id = ?;",
                    (*params, _now(), spell_id),
                )
                return cursor.rowcount > 0
            except sqlite3.IntegrityError:
                log.warning("Update of spell id %d violates the dedupe key.", spell_id)
                return False

    def find_spells_by_class(self, spell_class: str):
        with self._get_connection() as conn:
            return conn.execute(
                "SELECT id, name FROM spells WHERE spell_class = ? "
                "ORDER BY updated_at DESC, id DESC;",
                (spell_class,),
            ).fetchall()

    def list_spell_identities(self):
        with self._get_connection() as conn:
            return conn.execute("SELECT id, name, spell_class FROM spells;").fetchall()

    def find_corrupted_spells(self):
        """Spells whose Portuguese description carries the U+FFFD replacement char."""
        with self._get_connection() as conn:
            return conn.execute(
                "SELECT id, name, description_original, description_pt_br FROM spells "
                "WHERE description_pt_br LIKE '%' || char(65533) || '%' ORDER BY id;"
            ).fetchall()

    def update_spell_pt_br(self, spell_id: int, description_pt_br: str) -> bool:
        return self.update_spell(spell_id, {"description_pt_br": description_pt_br})

    # --- Spell Reference Methods ---
    def insert_spell_references(self, rows: list[dict]) -> int:
        """Inserts reference rows, skipping duplicates. Returns the inserted count."""
        log.debug("Inserting %d spell reference rows.", len(rows))
        inserted = 0
        with self._get_connection() as conn:
            for row in rows:
                cursor = conn.execute(
                    """
                    INSERT OR IGNORE INTO spell_references
                        (class_name, group_name, name, normalized_name, level, source)
                    VALUES (?, ?, ?, ?, ?, ?);
                    """,
                    (
                        row["class_name"],
                        row["group_name"],
                        row["name"],
                        row["normalized_name"],
                        row["level"],
                        row["source"],
                    ),
                )
                inserted += cursor.rowcount
        return inserted

    def find_spell_references(self, normalized_name: str):
        with self._get_connection() as conn:
            return conn.execute(
                """
                SELECT * FROM spell_references WHERE normalized_name = ?
                ORDER BY level ASC, source ASC, class_name ASC, group_name ASC;
                """,
                (normalized_name,),
            ).fetchall()

    def get_all_spell_references(self):
        with self._get_connection() as conn:
            return conn.execute("SELECT * FROM spell_references ORDER BY id;").fetchall()

    def apply_reference_sync(self, creates: list[dict], renames: list[tuple], delete_ids: list):
        """
        Applies a reference sync plan in a single transaction.
        Args:
            creates (list[dict]): New rows.
            renames (list[tuple]): (id, new display name) pairs.
            delete_ids (list[int]): Rows no longer present in the CSV files.
        """
        log.info(
            "Applying reference sync: %d create, %d rename, %d delete.",
            len(creates),
            len(renames),
            len(delete_ids),
        )
        conn = self._get_connection()
        try:
            with conn:
                conn.executemany(
                    "DELETE FROM spell_references WHERE id = ?;", [(i,) for i in delete_ids]
                )
                conn.executemany(
                    "UPDATE spell_references SET name = ? WHERE id = ?;",
                    [(name, ref_id) for ref_id, name in renames],
                )
                conn.executemany(
                    """
                    INSERT OR IGNORE INTO spell_references
                        (class_name, group_name, name, normalized_name, level, source)
                    VALUES (:class_name, :group_name, :name, :normalized_name, :level, :source);
                    """,
                    creates,
                )
        except sqlite3.Error as e:
            log.error("Reference sync rolled back: %s", e)
            raise
        finally:
            conn.close()

    # --- Missing Reference Methods ---
    def upsert_missing_reference(
        self,
        normalized_name: str,
        spell_name: str,
        spell_class: str,
        reference_source: str | None,
        reason: str,
        last_url: str | None = None,
    ):
        log.debug("Recording missing spell '%s' (%s): %s", spell_name, spell_class, reason)
        now = _now()
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT INTO spell_reference_missing
                    (normalized_name, spell_name, spell_class, reference_source, reason,
                     last_url, attempt_count, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, 1, ?, ?)
                ON CONFLICT(normalized_name, spell_class) DO UPDATE SET
                    spell_name = excluded.spell_name,
                    reference_source = excluded.reference_source,
                    reason = excluded.reason,
                    last_url = excluded.last_url,
                    attempt_count = spell_reference_missing.attempt_count + 1,
                    updated_at = excluded.updated_at;
                """,
                (normalized_name, spell_name, spell_class, reference_source, reason, last_url, now, now),
            )

    def clear_missing_reference(self, normalized_name: str, spell_class: str) -> bool:
        with self._get_connection() as conn:
            cursor = conn.execute(
                "DELETE FROM spell_reference_missing WHERE normalized_name = ? AND spell_class = ?;",
                (normalized_name, spell_class),
            )
            return cursor.rowcount > 0

    def list_missing_references(self, limit: int = 100):
        with self._get_connection() as conn:
            return conn.execute(
                "SELECT * FROM spell_reference_missing ORDER BY updated_at DESC, id DESC LIMIT ?;",
                (limit,),
            ).fetchall()

    def get_missing_reference_keys(self):
        with self._get_connection() as conn:
            return conn.execute(
                "SELECT normalized_name, spell_class, updated_at FROM spell_reference_missing;"
            ).fetchall()

    # --- UI Text Methods ---
    def get_ui_text_rows(self, namespaces: list[str], locale: str):
        if not namespaces:
            return []
        placeholders = ", ".join("?" for _ in namespaces)
        with self._get_connection() as conn:
            return conn.execute(
                f"SELECT namespace, key, text FROM ui_text_translations "
                f"WHERE locale = ? AND namespace IN ({placeholders});",
                (locale, *namespaces),
            ).fetchall()

    def upsert_ui_texts(self, rows: list[tuple]) -> int:
        """Upserts (namespace, key, locale, text) tuples. Returns how many were written."""
        now = _now()
        with self._get_connection() as conn:
            conn.executemany(
                """
                INSERT INTO ui_text_translations (namespace, key, locale, text, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(namespace, key, locale) DO UPDATE SET
                    text = excluded.text, updated_at = excluded.updated_at;
                """,
                [(*row, now) for row in rows],
            )
        return len(rows)

    # --- Translation helpers ---
    def _get_translations(self, table: str, owner_column: str, owner_ids: list) -> dict:
        """Returns {owner id: [translation rows]} for the given owners."""
        if not owner_ids:
            return {}
        placeholders = ", ".join("?" for _ in owner_ids)
        with self._get_connection() as conn:
            rows = conn.execute(
                f"SELECT * FROM {table} WHERE {owner_column} IN ({placeholders});",
                list(owner_ids),
            ).fetchall()
        grouped = {}
        for row in rows:
            grouped.setdefault(row[owner_column], []).append(dict(row))
        return grouped

    def _upsert_translation(self, table, owner_column, owner_id, locale, values: dict):
        with self._get_connection() as conn:
            conn.execute(
                f"""
                INSERT INTO {table} ({owner_column}, locale, name, description, full_description)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT({owner_column}, locale) DO UPDATE SET
                    name = excluded.name,
                    description = excluded.description,
                    full_description = excluded.full_description;
                """,
                (
                    owner_id,
                    locale,
                    values.get("name"),
                    values.get("description"),
                    values.get("full_description"),
                ),
            )

    # --- Attribute Methods ---
    def get_attributes(self):
        with self._get_connection() as conn:
            return conn.execute(
                "SELECT * FROM attribute_definitions ORDER BY sort_order, id;"
            ).fetchall()

    def get_attribute_translations(self, attribute_ids: list) -> dict:
        return self._get_translations("attribute_translations", "attribute_id", attribute_ids)

    def get_sub_attributes(self, attribute_ids: list):
        if not attribute_ids:
            return []
        placeholders = ", ".join("?" for _ in attribute_ids)
        with self._get_connection() as conn:
            return conn.execute(
                f"SELECT * FROM sub_attribute_definitions WHERE attribute_id IN ({placeholders}) "
                f"ORDER BY sort_order, id;",
                list(attribute_ids),
            ).fetchall()

    def get_sub_attribute_translations(self, sub_attribute_ids: list) -> dict:
        return self._get_translations(
            "sub_attribute_translations", "sub_attribute_id", sub_attribute_ids
        )

    def get_sub_attribute_scores(self, sub_attribute_id: int) -> list[dict]:
        with self._get_connection() as conn:
            rows = conn.execute(
                "SELECT values_json FROM sub_attribute_scores WHERE sub_attribute_id = ? "
                "ORDER BY sort_order, id;",
                (sub_attribute_id,),
            ).fetchall()
        return [json.loads(row["values_json"]) for row in rows]

    def upsert_attribute(self, code, name, description, full_description, sort_order=0) -> int:
        log.debug("Upserting attribute '%s'.", code)
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT INTO attribute_definitions (code, name, description, full_description, sort_order)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(code) DO UPDATE SET
                    name = excluded.name,
                    description = excluded.description,
                    full_description = excluded.full_description,
                    sort_order = excluded.sort_order;
                """,
                (code, name, description, full_description, sort_order),
            )
            return conn.execute(
                "SELECT id FROM attribute_definitions WHERE code = ?;", (code,)
            ).fetchone()["id"]

    def upsert_attribute_translation(self, attribute_id: int, locale: str, values: dict):
        self._upsert_translation("attribute_translations", "attribute_id", attribute_id, locale, values)

    def upsert_sub_attribute(
        self, attribute_id, code, name, description, full_description, sort_order=0
    ) -> int:
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT INTO sub_attribute_definitions
                    (attribute_id, code, name, description, full_description, sort_order)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(code) DO UPDATE SET
                    attribute_id = excluded.attribute_id,
                    name = excluded.name,
                    description = excluded.description,
                    full_description = excluded.full_description,
                    sort_order = excluded.sort_order;
                """,
                (attribute_id, code, name, description, full_description, sort_order),
            )
            return conn.execute(
                "SELECT id FROM sub_attribute_definitions WHERE code = ?;", (code,)
            ).fetchone()["id"]

    def upsert_sub_attribute_translation(self, sub_attribute_id: int, locale: str, values: dict):
        self._upsert_translation(
            "sub_attribute_translations", "sub_attribute_id", sub_attribute_id, locale, values
        )

    def replace_sub_attribute_scores(self, sub_attribute_id: int, scores: list[dict]):
        with self._get_connection() as conn:
            conn.execute(
                "DELETE FROM sub_attribute_scores WHERE sub_attribute_id = ?;", (sub_attribute_id,)
            )
            conn.executemany(
                "INSERT INTO sub_attribute_scores (sub_attribute_id, sort_order, values_json) "
                "VALUES (?, ?, ?);",
                [(sub_attribute_id, index, json.dumps(score)) for index, score in enumerate(scores)],
            )

    # --- Race Methods ---
    def get_races(self):
        with self._get_connection() as conn:
            return conn.execute("SELECT * FROM race_bases ORDER BY name;").fetchall()

    def get_race_translations(self, race_ids: list) -> dict:
        return self._get_translations("race_translations", "race_id", race_ids)

    def get_sub_races(self, race_id: int):
        with self._get_connection() as conn:
            return conn.execute(
                "SELECT * FROM sub_races WHERE race_id = ? ORDER BY id;", (race_id,)
            ).fetchall()

    def get_sub_race_translations(self, sub_race_ids: list) -> dict:
        return self._get_translations("sub_race_translations", "sub_race_id", sub_race_ids)

    def get_race_abilities(self, race_id: int):
        with self._get_connection() as conn:
            return conn.execute(
                "SELECT * FROM race_abilities WHERE race_id = ? ORDER BY name;", (race_id,)
            ).fetchall()

    def get_race_ability_translations(self, ability_ids: list) -> dict:
        return self._get_translations("race_ability_translations", "race_ability_id", ability_ids)

    def get_standard_abilities(self, sub_race_id: int):
        with self._get_connection() as conn:
            return conn.execute(
                """
                SELECT a.* FROM race_abilities a
                JOIN sub_race_standard_abilities l ON l.race_ability_id = a.id
                WHERE l.sub_race_id = ?
                ORDER BY a.name;
                """,
                (sub_race_id,),
            ).fetchall()

    def upsert_race(self, values: dict) -> int:
        """Upserts a race by name. `values` holds race_bases columns."""
        columns = list(values)
        placeholders = ", ".join("?" for _ in columns)
        updates = ", ".join(f"{c} = excluded.{c}" for c in columns if c != "name")
        with self._get_connection() as conn:
            conn.execute(
                f"INSERT INTO race_bases ({', '.join(columns)}) VALUES ({placeholders}) "
                f"ON CONFLICT(name) DO UPDATE SET {updates};",
                [values[c] for c in columns],
            )
            return conn.execute(
                "SELECT id FROM race_bases WHERE name = ?;", (values["name"],)
            ).fetchone()["id"]

    def upsert_race_translation(self, race_id: int, locale: str, values: dict):
        self._upsert_translation("race_translations", "race_id", race_id, locale, values)

    def upsert_sub_race(self, race_id: int, values: dict) -> int:
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT INTO sub_races
                    (race_id, name, description, full_description, languages, character_point_cost)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(race_id, name) DO UPDATE SET
                    description = excluded.description,
                    full_description = excluded.full_description,
                    languages = excluded.languages,
                    character_point_cost = excluded.character_point_cost;
                """,
                (
                    race_id,
                    values["name"],
                    values.get("description"),
                    values.get("full_description"),
                    values.get("languages"),
                    values.get("character_point_cost", 0),
                ),
            )
            return conn.execute(
                "SELECT id FROM sub_races WHERE race_id = ? AND name = ?;",
                (race_id, values["name"]),
            ).fetchone()["id"]

    def upsert_sub_race_translation(self, sub_race_id: int, locale: str, values: dict):
        self._upsert_translation("sub_race_translations", "sub_race_id", sub_race_id, locale, values)

    def upsert_race_ability(self, race_id: int, values: dict) -> int:
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT INTO race_abilities (race_id, name, kind, cost, description, full_description)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(race_id, name) DO UPDATE SET
                    kind = excluded.kind,
                    cost = excluded.cost,
                    description = excluded.description,
                    full_description = excluded.full_description;
                """,
                (
                    race_id,
                    values["name"],
                    values.get("kind", "BENEFIT"),
                    values.get("cost", 0),
                    values.get("description"),
                    values.get("full_description"),
                ),
            )
            return conn.execute(
                "SELECT id FROM race_abilities WHERE race_id = ? AND name = ?;",
                (race_id, values["name"]),
            ).fetchone()["id"]

    def upsert_race_ability_translation(self, ability_id: int, locale: str, values: dict):
        self._upsert_translation(
            "race_ability_translations", "race_ability_id", ability_id, locale, values
        )

    def link_standard_ability(self, sub_race_id: int, ability_id: int):
        with self._get_connection() as conn:
            conn.execute(
                "INSERT OR IGNORE INTO sub_race_standard_abilities (sub_race_id, race_ability_id) "
                "VALUES (?, ?);",
                (sub_race_id, ability_id),
            )
