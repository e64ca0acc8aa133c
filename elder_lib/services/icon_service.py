# --- elder_lib/services/icon_service.py ---
import logging
import os
import re
import time

from pydantic import ValidationError

from core.llm_utils import LLMServiceError, extract_json_from_llm_response, generate_image, query_chat_llm
from ..constants import ICON_PROMPT_TEMPLATE, ICON_STYLE_RULES, PROMPT_REGISTRY
from ..schemas import IconPromptRequest, SymbolConcept
from ..spell_rules import normalize_group_token

log = logging.getLogger("elder.icon")

ICON_GROUP_MERGES = {
    "invocation/evocation": ("invocation", "evocation", "invocation/evocation", "evocation/invocation"),
    "conjuration/summoning": ("conjuration", "summoning", "conjuration/summoning", "summoning/conjuration"),
    "illusion/phantasm": ("illusion", "phantasm", "illusion/phantasm", "phantasm/illusion"),
    "enchantment/charm": ("enchantment", "charm", "enchantment/charm", "charm/enchantment"),
}


def canonicalize_icon_group(value: str) -> str:
    token = normalize_group_token(value)
    for merged, aliases in ICON_GROUP_MERGES.items():
        if token in aliases:
            return merged
    return token


def _split_icon_groups(value) -> list[str]:
    if not value:
        return []
    parts = [part.strip() for part in re.split(r"[/,;|]+", value) if part.strip()]
    return [group for group in (canonicalize_icon_group(part) for part in parts) if group]


def choose_style_rule(school=None, sphere=None) -> tuple:
    """
    Picks the icon style rule best matching the spell's groups.
    Exact school matches outrank exact sphere matches, which outrank partial
    matches; rule weight breaks ties. No match selects the last (neutral) rule.
    Returns:
        tuple: (weight, groups, primary colour, secondary colour, carving style).
    """
    school_groups = _split_icon_groups(school)
    sphere_groups = _split_icon_groups(sphere)

    def score(rule):
        weight, groups = rule[0], [canonicalize_icon_group(g) for g in rule[1]]
        best = -1
        for rule_group in groups:
            for candidates, exact, partial in ((school_groups, 1000, 300), (sphere_groups, 700, 150)):
                for candidate in candidates:
                    if candidate == rule_group:
                        best = max(best, exact + weight)
                    elif rule_group in candidate or (
                        candidate in rule_group and len(candidate) > 4
                    ):
                        best = max(best, partial + weight)
        return best

    best_rule, best_score = ICON_STYLE_RULES[-1], -1
    for rule in ICON_STYLE_RULES:
        rule_score = score(rule)
        if rule_score > best_score:
            best_rule, best_score = rule, rule_score
    return best_rule


def build_icon_prompt(symbol_concept: str, style: tuple) -> str:
    _, _, primary, secondary, carving = style
    return ICON_PROMPT_TEMPLATE.format(
        primary=primary, secondary=secondary, symbol=symbol_concept, style=carving
    )


def sanitize_file_name(value: str) -> str:
    normalized = re.sub(r"[\s/]+", "-", normalize_group_token(value or ""))
    return normalized[:64] if normalized else "spell-icon"


class IconService:
    """Builds carved-stone icon prompts and renders them through the image model."""

    def __init__(self, api_url, api_key, text_model, image_model, assets_path, assets_url="/assets"):
        self.api_url = api_url
        self.api_key = api_key
        self.text_model = text_model
        self.image_model = image_model
        self.assets_path = assets_path
        self.assets_url = assets_url.rstrip("/")

    def create_symbol_concept(self, spell: IconPromptRequest) -> str:
        fallback = f"arcane sigil representing {spell.name}"
        user_lines = [
            f"spell name: {spell.name}",
            f"spell class: {spell.spell_class}",
            f"school: {spell.school or 'unknown'}",
            f"sphere: {spell.sphere or 'unknown'}",
            f"summary: {(spell.summary_en or '').strip() or 'unknown'}",
            f"description: {spell.description_original[:1200]}",
        ]
        try:
            content = query_chat_llm(
                [
                    {"role": "system", "content": PROMPT_REGISTRY["ICON_SYMBOL"]},
                    {"role": "user", "content": "\n".join(user_lines)},
                ],
                self.api_url,
                self.api_key,
                self.text_model,
                temperature=0.2,
                json_mode=True,
            )
        except LLMServiceError as e:
            log.warning("No symbol concept for '%s' (%s); using fallback.", spell.name, e)
            return fallback
        parsed = extract_json_from_llm_response(content)
        try:
            return SymbolConcept.model_validate(parsed).symbol
        except ValidationError:
            log.warning("Symbol concept for '%s' was unusable; using fallback.", spell.name)
            return fallback

    def generate_icon_prompt(self, raw_input) -> str:
        spell = (
            raw_input
            if isinstance(raw_input, IconPromptRequest)
            else IconPromptRequest.model_validate(raw_input)
        )
        style = choose_style_rule(spell.school, spell.sphere)
        log.debug("Style for '%s': %s", spell.name, style[4])
        return build_icon_prompt(self.create_symbol_concept(spell), style)

    def generate_and_store_icon(self, raw_input, prompt_override: str = None) -> dict:
        """
        Renders an icon and writes it under the assets directory.
        Returns:
            dict: {"iconUrl": public URL, "iconPrompt": prompt used}.
        """
        spell = IconPromptRequest.model_validate(
            raw_input.model_dump() if hasattr(raw_input, "model_dump") else raw_input
        )
        prompt = (prompt_override or "").strip() or self.generate_icon_prompt(spell)
        image = generate_image(prompt, self.api_url, self.api_key, self.image_model)

        file_name = f"{sanitize_file_name(spell.name)}-{int(time.time() * 1000)}.png"
        target_dir = os.path.join(self.assets_path, "spells")
        os.makedirs(target_dir, exist_ok=True)
        with open(os.path.join(target_dir, file_name), "wb") as f:
            f.write(image)

        icon_url = f"{self.assets_url}/spells/{file_name}"
        log.info("Stored icon for '%s' at %s", spell.name, icon_url)
        return {"iconUrl": icon_url, "iconPrompt": prompt}
