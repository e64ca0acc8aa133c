# --- elder_lib/services/web_lookup_service.py ---
"""
Public web lookups used when the local data is not enough:
- DuckDuckGo, to recover a spell level the parser could not settle.
- The AD&D 2e fandom wiki, to fetch canonical spell text for hydration.
Every network failure degrades to "nothing found"; callers decide what that means.
"""
import logging
import re
import unicodedata
from dataclasses import dataclass
from urllib.parse import quote, unquote, urlparse

import requests

from ..constants import FANDOM_BASE_URL, WEB_USER_AGENT
from ..spell_rules import html_to_plain_text, pick_most_frequent_level

log = logging.getLogger("elder.web")

REQUEST_TIMEOUT_S = 20
JSON_ACCEPT = "application/json,text/plain"
HTML_ACCEPT = "text/html,application/xhtml+xml"

STAT_BLOCK_MARKERS = [
    re.compile(r"\brange\b\s*:?", re.IGNORECASE),
    re.compile(r"\bduration\b\s*:?", re.IGNORECASE),
    re.compile(r"\bcasting\s*time\b\s*:?", re.IGNORECASE),
    re.compile(r"\bcomponents\b\s*:?", re.IGNORECASE),
    re.compile(r"\bsaving\s*throw\b\s*:?", re.IGNORECASE),
]
EDITION_MARKERS = [
    re.compile(r"ad\s*&\s*d", re.IGNORECASE),
    re.compile(r"2nd\s+edition", re.IGNORECASE),
    re.compile(r"\b2e\b", re.IGNORECASE),
    re.compile(r"player'?s handbook", re.IGNORECASE),
    re.compile(r"spells\s*&\s*magic", re.IGNORECASE),
    re.compile(r"tome\s+of\s+magic", re.IGNORECASE),
]
CLASS_MARKERS = {
    "divine": re.compile(r"\bpriest\s+spell\b|\bclass\s*[:]?\s*priest\b", re.IGNORECASE),
    "arcane": re.compile(r"\bwizard\s+spell\b|\bclass\s*[:]?\s*wizard\b", re.IGNORECASE),
}
SOURCE_MARKERS = {
    "PHB": ("player's handbook", "players handbook"),
    "TOM": ("tome of magic",),
    "CWH": ("complete wizard's handbook", "complete wizards handbook"),
}
PAGE_END_MARKERS = (
    "recent images",
    "fandom homepage",
    "additional links",
    "categories community content",
    "advanced dungeons & dragons 2nd edition wiki is a fandom",
)
NOISE_PATTERNS = [
    re.compile(r"^\s*ADVERTISEMENT\s*$", re.IGNORECASE | re.MULTILINE),
    re.compile(r"^\s*SIGN IN TO EDIT\s*$", re.IGNORECASE | re.MULTILINE),
    re.compile(r"^\s*For other[^\n]*see[^\n]*\.?\s*$", re.IGNORECASE | re.MULTILINE),
    re.compile(r"^\s*Switch to Light Theme\s*$", re.IGNORECASE | re.MULTILINE),
    re.compile(r"^\s*We Care About Your Privacy[\s\S]*$", re.IGNORECASE | re.MULTILINE),
]
SECTION_RE = re.compile(
    r"\b(Spell Level|Class|School|Sphere|Details|Range|Duration|AOE|Casting Time|Save|"
    r"Requirements|Source)\b",
    re.IGNORECASE,
)
METADATA_LIKE_LINE_RE = re.compile(
    r"^(For other .* see .*|Spell Level\b|Class\b|School\b|Sphere\b|Details\b|Range\b|"
    r"Duration\b|AOE\b|Casting Time\b|Save\b|Requirements\b|Source\b|.*\(\s*[SMV, ]+\s*\))$",
    re.IGNORECASE,
)
WIKI_HREF_RES = [
    re.compile(r'href="(https://adnd2e\.fandom\.com/wiki/[^"]+)"', re.IGNORECASE),
    re.compile(r'href="(/wiki/[^"]+)"', re.IGNORECASE),
]


@dataclass
class WebSpellText:
    text: str
    url: str


# --- Text helpers ---
def normalize_for_match(value: str) -> str:
    decomposed = unicodedata.normalize("NFKD", value or "")
    value = "".join(ch for ch in decomposed if not unicodedata.combining(ch)).lower()
    value = re.sub(r"[^a-z0-9\s]", " ", value)
    return re.sub(r"\s+", " ", value).strip()


def normalize_wiki_title(title: str) -> str:
    return re.sub(r"\s+", " ", (title or "").replace("_", " ")).strip()


def cleanup_fandom_noise(text: str) -> str:
    for pattern in NOISE_PATTERNS:
        text = pattern.sub("", text)
    return text.strip()


def split_known_sections(text: str) -> str:
    text = SECTION_RE.sub(lambda m: "\n" + m.group(1), text)
    return re.sub(r"\n{3,}", "\n\n", text).strip()


def extract_narrative_body(text: str) -> str:
    lines = re.split(r"\r?\n", text)
    start = 0
    while start < len(lines):
        line = lines[start].strip()
        if not line or METADATA_LIKE_LINE_RE.match(line):
            start += 1
            continue
        break
    body = "\n".join(lines[start:]).strip()
    return body or text


def build_spell_snippet(text: str, spell_name: str) -> str:
    flat = re.sub(r"\s+", " ", text).strip()
    index = flat.lower().find(spell_name.lower())
    if index == -1:
        return flat[:6000]
    return flat[max(0, index - 1000) : min(len(flat), index + 5000)]


def extract_canonical_spell_text(text: str, spell_name: str) -> str:
    """Cuts the spell's own section out of a wiki page and drops its stat block."""
    cleaned = split_known_sections(cleanup_fandom_noise(text))
    lower = cleaned.lower()

    starts = [
        index
        for index in (lower.find("details"), lower.find("spell level"), lower.find(spell_name.lower()))
        if index >= 0
    ]
    start = max(0, min(starts) - 160) if starts else 0

    end = len(cleaned)
    for marker in PAGE_END_MARKERS:
        index = lower.find(marker, start + 200)
        if index >= 0:
            end = min(end, index)

    window = cleaned[start : min(end, start + 12000)].strip()
    if not window:
        return build_spell_snippet(cleaned, spell_name)
    return extract_narrative_body(window)


def count_stat_block_markers(text: str) -> int:
    return sum(1 for regex in STAT_BLOCK_MARKERS if regex.search(text))


def is_likely_adnd2e(text: str) -> bool:
    return any(regex.search(text) for regex in EDITION_MARKERS)


def is_strict_2e_spell_page(plain_text, spell_name, spell_class, expected_level, reference_source) -> bool:
    """
    Accepts a page only when it reads like the 2e entry for exactly this
    spell: its name, a stat block, edition markers, the class, the level and,
    for well known books, the expected source.
    """
    if normalize_for_match(spell_name) not in normalize_for_match(plain_text):
        return False
    if count_stat_block_markers(plain_text) < 3:
        return False
    if not is_likely_adnd2e(plain_text):
        return False
    if not CLASS_MARKERS[spell_class].search(plain_text):
        return False

    ordinal = re.compile(rf"\b{expected_level}(st|nd|rd|th)?\s+level\b", re.IGNORECASE)
    field = re.compile(rf"\bspell\s*level\b[\s:]*{expected_level}\b", re.IGNORECASE)
    if not ordinal.search(plain_text) and not field.search(plain_text):
        return False

    markers = SOURCE_MARKERS.get((reference_source or "").strip().upper(), ())
    if markers and not any(marker in plain_text.lower() for marker in markers):
        return False
    return True


def _wiki_urls_from_html(html: str, excluded: tuple) -> list[str]:
    urls = []
    for regex in WIKI_HREF_RES:
        for match in regex.finditer(html):
            href = match.group(1)
            urls.append(href if href.startswith("http") else f"{FANDOM_BASE_URL}{href}")
    unique = dict.fromkeys(url.split("#")[0] for url in urls)
    return [url for url in unique if not any(part in url for part in excluded)]


def extract_search_result_urls(html: str) -> list[str]:
    return _wiki_urls_from_html(html, ("Category:", "Special:"))[:10]


def extract_category_urls(html: str) -> list[str]:
    return _wiki_urls_from_html(html, ("Category:", "Special:", "File:", "Template:"))


def wiki_title_from_url(url: str):
    path = urlparse(url).path
    index = path.lower().find("/wiki/")
    if index == -1:
        return None
    raw = path[index + len("/wiki/") :]
    return normalize_wiki_title(unquote(raw)) if raw else None


class WebLookupService:
    """HTTP lookups against DuckDuckGo and the AD&D 2e fandom wiki."""

    def __init__(self, enabled: bool = True, timeout: int = REQUEST_TIMEOUT_S):
        self.enabled = enabled
        self.timeout = timeout

    def _get(self, url: str, accept: str, params: dict = None):
        response = requests.get(
            url,
            params=params,
            headers={"User-Agent": WEB_USER_AGENT, "Accept": accept},
            timeout=self.timeout,
        )
        if response.status_code >= 400:
            log.debug("GET %s answered HTTP %d.", response.url, response.status_code)
            return None
        return response

    # --- Spell level ---
    def _level_from_duckduckgo_instant(self, spell_name: str):
        response = self._get(
            "https://api.duckduckgo.com/",
            JSON_ACCEPT,
            {
                "q": f"AD&D 2e {spell_name} spell level",
                "format": "json",
                "no_html": 1,
                "skip_disambig": 1,
            },
        )
        if response is None:
            return None
        data = response.json()

        texts = [data.get("AbstractText") or "", data.get("Answer") or "", data.get("Definition") or ""]
        for topic in data.get("RelatedTopics") or []:
            if topic.get("Text"):
                texts.append(topic["Text"])
            for nested in topic.get("Topics") or []:
                if nested.get("Text"):
                    texts.append(nested["Text"])

        text = " ".join(str(t) for t in texts).strip()
        return pick_most_frequent_level(text) if text else None

    def _level_from_duckduckgo_lite(self, spell_name: str):
        response = self._get(
            "https://lite.duckduckgo.com/lite/",
            HTML_ACCEPT,
            {"q": f"AD&D 2e {spell_name} spell level"},
        )
        if response is None:
            return None
        return pick_most_frequent_level(html_to_plain_text(response.text))

    def resolve_spell_level_from_web(self, spell_name: str):
        """Returns the most cited level for a spell, or None."""
        if not self.enabled:
            log.debug("Web lookups disabled; not resolving level of '%s'.", spell_name)
            return None
        for lookup in (self._level_from_duckduckgo_instant, self._level_from_duckduckgo_lite):
            try:
                level = lookup(spell_name)
            except (requests.RequestException, ValueError) as e:
                log.warning("Level lookup for '%s' failed: %s", spell_name, e)
                continue
            if level is not None:
                log.info("Web lookup resolved '%s' to level %d.", spell_name, level)
                return level
        return None

    # --- Fandom wiki ---
    def fetch_fandom_page(self, title: str):
        """Fetches a wiki page through the parse API as plain text."""
        response = self._get(
            f"{FANDOM_BASE_URL}/api.php",
            JSON_ACCEPT,
            {"action": "parse", "page": title, "prop": "text", "formatversion": 2, "format": "json"},
        )
        if response is None:
            return None
        parsed = response.json().get("parse") or {}
        html = parsed.get("text")
        if not html:
            return None
        page_slug = re.sub(r"\s+", "_", parsed.get("title") or title)
        url = f"{FANDOM_BASE_URL}/wiki/{quote(page_slug, safe='')}"
        return WebSpellText(text=html_to_plain_text(html, keep_breaks=True), url=url)

    def candidate_titles(self, name: str, spell_class: str) -> list[str]:
        if not self.enabled:
            return []
        class_tag = "Priest_Spell" if spell_class == "divine" else "Wizard_Spell"
        titles = dict.fromkeys(
            [normalize_wiki_title(name), normalize_wiki_title(f"{name} ({class_tag.replace('_', ' ')})")]
        )

        search = self._get(
            f"{FANDOM_BASE_URL}/api.php",
            JSON_ACCEPT,
            {
                "action": "query",
                "list": "search",
                "format": "json",
                "srlimit": 6,
                "srsearch": f"{name} {class_tag}",
            },
        )
        if search is None:
            return []
        for item in (search.json().get("query") or {}).get("search") or []:
            title = normalize_wiki_title(item.get("title") or "")
            if title:
                titles.setdefault(title)

        html_search = self._get(f"{FANDOM_BASE_URL}/wiki/Special:Search", HTML_ACCEPT, {"query": name})
        if html_search is not None:
            for url in extract_search_result_urls(html_search.text):
                title = wiki_title_from_url(url)
                if title:
                    titles.setdefault(title)

        category = self._get(f"{FANDOM_BASE_URL}/wiki/Category:Spells", HTML_ACCEPT)
        if category is not None:
            needle = normalize_for_match(name)
            matching = [u for u in extract_category_urls(category.text) if needle in normalize_for_match(u)]
            for url in matching[:8]:
                title = wiki_title_from_url(url)
                if title:
                    titles.setdefault(title)

        return list(titles)

    def search_spell_text_strict(self, candidate):
        """
        Finds the canonical 2e text of a reference candidate on the fandom wiki.
        Args:
            candidate: Object with name, spell_class, level and reference_source.
        Returns:
            WebSpellText | None: The extracted spell window and its page URL.
        """
        if not self.enabled:
            log.debug("Web lookups disabled; not searching the wiki for '%s'.", candidate.name)
            return None
        try:
            titles = self.candidate_titles(candidate.name, candidate.spell_class)
        except (requests.RequestException, ValueError) as e:
            log.warning("Fandom search for '%s' failed: %s", candidate.name, e)
            return None

        for title in titles:
            try:
                page = self.fetch_fandom_page(title)
            except (requests.RequestException, ValueError) as e:
                log.debug("Skipping page '%s': %s", title, e)
                continue
            if page is None or len(page.text) < 500:
                continue
            if not is_strict_2e_spell_page(
                page.text,
                candidate.name,
                candidate.spell_class,
                candidate.level,
                candidate.reference_source,
            ):
                log.debug("Page '%s' failed the strict 2e check.", title)
                continue
            log.info("Matched '%s' to %s", candidate.name, page.url)
            return WebSpellText(text=extract_canonical_spell_text(page.text, candidate.name), url=page.url)
        return None
