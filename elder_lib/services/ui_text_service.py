# --- elder_lib/services/ui_text_service.py ---
import logging

log = logging.getLogger("elder.web")


class UiTextService:
    """Loads translated interface strings for the public pages."""

    def __init__(self, storage):
        self.storage = storage

    def get_ui_texts(self, namespaces: list[str], locale: str) -> dict:
        """
        Returns {"namespace.key": text} for the namespaces. Portuguese rows
        are loaded first and overridden by rows of the requested locale.
        """
        unique = list(dict.fromkeys(namespaces))
        texts = {}
        locales = ["pt"] if locale == "pt" else ["pt", locale]
        for current in locales:
            for row in self.storage.get_ui_text_rows(unique, current):
                texts[f"{row['namespace']}.{row['key']}"] = row["text"]
        log.debug("Loaded %d UI texts for %s (%s).", len(texts), ",".join(unique), locale)
        return texts

    def seed(self, entries: dict) -> int:
        """
        Upserts bundled UI strings.
        Args:
            entries (dict): {namespace: {locale: {key: text}}}.
        """
        rows = [
            (namespace, key, locale, text)
            for namespace, by_locale in entries.items()
            for locale, texts in by_locale.items()
            for key, text in texts.items()
        ]
        return self.storage.upsert_ui_texts(rows)
