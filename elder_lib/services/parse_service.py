# --- elder_lib/services/parse_service.py ---
import logging
import re

import requests
from pydantic import ValidationError

from core.llm_utils import LLMConfigError, LLMServiceError, query_json_llm
from ..constants import PROMPT_REGISTRY
from ..schemas import (
    CreativeInterpretation,
    LlmSpellResponse,
    LocalizationResult,
    SpellParseRequest,
    SpellPayload,
)
from ..spell_rules import (
    extract_description_body,
    infer_magical_resistance,
    infer_saving_throw,
    infer_spell_class,
    is_zero_level_exception_spell,
    looks_like_non_spell_text,
    merge_unique_values,
    normalize_group_values,
    remove_corrupted_char,
    split_csv_like_list,
    split_group_list,
    title_case,
)

log = logging.getLogger("elder.parse")

FALLBACK_SOURCE = "Recovered Field Notes"
COMBAT_WORDS_RE = re.compile(r"dano|explos|combate|ataca|hostil|inimig|destr", re.IGNORECASE)
PROBABLE_EFFECTS = (
    "Versão mansa: reorganiza o caos em intenção funcional por alguns minutos.",
    "Versão instável: dá sentido narrativo improvável ao texto, com excesso de convicção arcana.",
    "Versão épica: cria uma solução brilhante, mas cobra o preço em constrangimento social ritualístico.",
)

# Errors after which a chatty text input is turned into a joke spell.
RECOVERABLE_ERRORS = (ValueError, LLMServiceError, LLMConfigError, requests.RequestException)


class SpellParseError(ValueError):
    """Raised when a parsed spell breaks a rule that cannot be repaired."""


def _clean_input_text(text: str) -> str:
    return re.sub(r"\s+", " ", remove_corrupted_char(text)).strip()


def _level_from_creative(value) -> int:
    if isinstance(value, int):
        return max(0, min(9, value))
    match = re.search(r"[0-9]", value)
    return int(match.group(0)) if match else 1


def build_humorous_fallback_spell(text: str, source_image_url=None) -> SpellPayload:
    """Deterministic joke spell used when even the creative interpretation fails."""
    cleaned = _clean_input_text(text)
    snippet = " ".join(cleaned.split(" ")[:4])
    quoted = f'"{cleaned[:240]}{"..." if len(cleaned) > 240 else ""}"'

    return SpellPayload(
        name=f"Interpretação de {title_case(snippet or 'Sinal Inesperado')}",
        level=1,
        spell_class="arcane",
        school="Wild Semiotics",
        sphere=None,
        source=FALLBACK_SOURCE,
        range_text="Linha de visão (ou alcance da conversa)",
        target="Conjurador e testemunhas do evento",
        duration_text="1d4 risadas ou até a realidade se recompor",
        casting_time="1 ação improvisada",
        components="V, S, M",
        component_desc="Uma frase fora de contexto e confiança excessiva",
        component_consumed=False,
        can_be_dispelled=True,
        dispel_how="Dispel Magic, silêncio constrangedor ou mudança de assunto",
        combat=False,
        utility=True,
        saving_throw="Spell",
        saving_throw_outcome="OTHER",
        magical_resistance="YES",
        summary_en="Interprets unusual text as an emergent spell pattern with plausible outcomes.",
        summary_pt_br="Interpreta texto incomum como padrão mágico emergente com efeitos plausíveis.",
        description_original="\n\n".join(
            [
                "Field interpretation from an unstructured incantation fragment:",
                quoted,
                "Probable effect branches:",
                *PROBABLE_EFFECTS,
            ]
        ),
        description_pt_br="\n\n".join(
            [
                "Interpretação de campo a partir de um fragmento de encantamento não estruturado:",
                quoted,
                "Prováveis versões do efeito:",
                *PROBABLE_EFFECTS,
            ]
        ),
        source_image_url=source_image_url,
        icon_prompt="Comedic arcane glyph made of floating chat bubbles and chaotic sparkles",
    )


class SpellParseService:
    """
    Turns free text or a page image into a storable spell: the LLM extracts
    the fields, the local reference corrects groups and level, and the rule
    classifiers fill what the model left out.
    """

    def __init__(
        self,
        reference_service,
        web_lookup,
        icon_service,
        api_url: str,
        api_key: str,
        model: str,
        icon_on_parse: bool = False,
        raw_response_log: bool = False,
    ):
        self.reference_service = reference_service
        self.web_lookup = web_lookup
        self.icon_service = icon_service
        self.api_url = api_url
        self.api_key = api_key
        self.model = model
        self.icon_on_parse = icon_on_parse
        self.raw_response_log = raw_response_log

    def _query(self, system_prompt: str, user_content, temperature: float) -> dict:
        return query_json_llm(
            [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_content},
            ],
            self.api_url,
            self.api_key,
            self.model,
            temperature=temperature,
            raw_response_log=self.raw_response_log,
        )

    def parse_spell(self, raw_input) -> SpellPayload:
        """
        Parses one spell.
        Args:
            raw_input (dict | SpellParseRequest): text, imageDataUrl, sourceImageUrl.
        Returns:
            SpellPayload: The validated spell, with an icon when enabled.
        Raises:
            ValidationError: The request, or the model's answer, is malformed.
            SpellParseError: The spell breaks a level or sphere rule.
        """
        request = (
            raw_input
            if isinstance(raw_input, SpellParseRequest)
            else SpellParseRequest.model_validate(raw_input or {})
        )

        try:
            return self._parse_with_llm(request)
        except RECOVERABLE_ERRORS as e:
            text = request.text or ""
            if not text or request.image_data_url or not looks_like_non_spell_text(text):
                raise
            log.info("Input does not read like a spell (%s); interpreting it creatively.", e)

        try:
            return self._build_creative_fallback_spell(text, request.source_image_url)
        except RECOVERABLE_ERRORS as e:
            log.warning("Creative interpretation failed: %s", e)
            return build_humorous_fallback_spell(text, request.source_image_url)

    def _parse_with_llm(self, request: SpellParseRequest) -> SpellPayload:
        content = []
        if (request.text or "").strip():
            content.append({"type": "text", "text": f"SPELL_TEXT:\n{request.text}"})
        if request.image_data_url:
            content.append({"type": "image_url", "image_url": {"url": request.image_data_url}})

        parsed = LlmSpellResponse.model_validate(
            self._query(PROMPT_REGISTRY["SPELL_PARSE"], content, temperature=0)
        )
        log.debug("LLM parsed '%s' (level %s, class %s).", parsed.name, parsed.level, parsed.spell_class)
        reference = self.reference_service.find_spell_reference_by_name(parsed.name)

        if parsed.description_original.strip():
            description_original = parsed.description_original
        elif (request.text or "").strip():
            description_original = extract_description_body(request.text)
        else:
            description_original = ""

        localization = self._ensure_localized_fields(parsed, description_original)
        magical_resistance = parsed.magical_resistance or infer_magical_resistance(
            parsed.name, description_original, parsed.target, parsed.saving_throw
        )

        schools, spheres, sources, spell_class = self._resolve_groups(parsed, reference)
        level = self._resolve_level(parsed, reference)
        saving_throw, outcome = infer_saving_throw(
            parsed.saving_throw, parsed.name, description_original, parsed.target
        )

        payload = SpellPayload(
            name=parsed.name,
            level=level,
            spell_class=spell_class,
            school=", ".join(schools) or None,
            sphere=", ".join(spheres) or None,
            source=", ".join(sources) or None,
            range_text=parsed.range_text,
            target=parsed.target,
            duration_text=parsed.duration_text,
            casting_time=parsed.casting_time,
            components=parsed.components,
            component_desc=parsed.component_desc,
            component_cost=parsed.component_cost,
            component_consumed=bool(parsed.component_consumed),
            can_be_dispelled=bool(parsed.can_be_dispelled),
            dispel_how=(parsed.dispel_how or None) if parsed.can_be_dispelled else None,
            combat=bool(parsed.combat),
            utility=True if parsed.utility is None else parsed.utility,
            saving_throw=saving_throw,
            saving_throw_outcome=parsed.saving_throw_outcome or outcome,
            magical_resistance=magical_resistance,
            summary_en=localization.summary_en,
            summary_pt_br=localization.summary_pt_br,
            description_original=description_original,
            description_pt_br=localization.description_pt_br,
            source_image_url=request.source_image_url,
        )

        if self.icon_on_parse and self.icon_service is not None:
            payload = self._attach_icon(payload)
        return payload

    def _ensure_localized_fields(self, parsed, description_original: str) -> LocalizationResult:
        if parsed.description_pt_br and parsed.summary_en and parsed.summary_pt_br:
            return LocalizationResult(
                description_pt_br=parsed.description_pt_br,
                summary_en=parsed.summary_en,
                summary_pt_br=parsed.summary_pt_br,
            )
        log.debug("Completing missing localization fields for '%s'.", parsed.name)
        data = self._query(
            PROMPT_REGISTRY["LOCALIZE_SPELL"],
            f"SPELL_NAME: {parsed.name}\nDESCRIPTION_ORIGINAL:\n{description_original}",
            temperature=0,
        )
        return LocalizationResult.model_validate(data)

    def _resolve_groups(self, parsed, reference) -> tuple:
        parsed_schools = normalize_group_values(split_group_list(parsed.school))
        parsed_spheres = normalize_group_values(split_group_list(parsed.sphere))
        reference_schools = normalize_group_values(reference.schools if reference else [])
        reference_spheres = normalize_group_values(reference.spheres if reference else [])

        schools = reference_schools or parsed_schools
        spheres = reference_spheres or parsed_spheres
        sources = merge_unique_values(
            split_csv_like_list(parsed.source), reference.sources if reference else []
        )
        spell_class = infer_spell_class(
            parsed.spell_class,
            parsed.school,
            parsed.sphere,
            schools,
            spheres,
            reference.class_names if reference else (),
        )

        if spell_class == "arcane":
            if not schools and spheres:
                schools = spheres
            spheres = []
        if spell_class == "divine" and not spheres and schools:
            spheres = schools
        if spell_class == "divine" and not spheres:
            raise SpellParseError(
                f'Não foi possível determinar a esfera da magia divina "{parsed.name}". '
                "Pelo menos uma esfera é obrigatória."
            )
        return schools, spheres, sources, spell_class

    def _resolve_level(self, parsed, reference) -> int:
        reference_levels = reference.levels if reference else []
        fallback = reference_levels[0] if reference_levels else None

        if parsed.level is None:
            level = fallback
        elif reference_levels and parsed.level not in reference_levels:
            log.info(
                "Parsed level %d of '%s' is not in the reference %s; using %s.",
                parsed.level,
                parsed.name,
                reference_levels,
                fallback,
            )
            level = fallback
        else:
            level = parsed.level

        zero_allowed = is_zero_level_exception_spell(parsed.name)
        if level is None or (level == 0 and not zero_allowed):
            web_level = self.web_lookup.resolve_spell_level_from_web(parsed.name)
            if web_level is not None:
                level = web_level

        if level is None:
            raise SpellParseError(
                f'Não foi possível determinar o nível da magia "{parsed.name}" '
                "na referência local nem na web."
            )
        if level == 0 and not zero_allowed:
            hint = "referência local" if reference_levels else "parse"
            raise SpellParseError(
                f'A magia "{parsed.name}" foi classificada como nível 0 por {hint}, '
                "mas apenas Cantrip e Orison podem ser nível 0."
            )
        return level

    def _attach_icon(self, payload: SpellPayload) -> SpellPayload:
        try:
            icon = self.icon_service.generate_and_store_icon(payload)
        except (LLMServiceError, LLMConfigError, OSError, ValueError, requests.RequestException) as e:
            log.error("Icon generation failed during parse of '%s': %s", payload.name, e)
            return payload
        return payload.model_copy(
            update={"icon_url": icon["iconUrl"], "icon_prompt": icon["iconPrompt"]}
        )

    def _build_creative_fallback_spell(self, text: str, source_image_url=None) -> SpellPayload:
        cleaned = _clean_input_text(text)
        data = self._query(
            PROMPT_REGISTRY["CREATIVE_FALLBACK"],
            f"Texto a interpretar como magia:\n{cleaned}",
            temperature=0.9,
        )
        spell = CreativeInterpretation.model_validate(data)
        components = (
            spell.componentes if isinstance(spell.componentes, str) else ", ".join(spell.componentes)
        )

        def clean(value):
            return remove_corrupted_char(value)

        return SpellPayload(
            name=clean(spell.nome_magia),
            level=_level_from_creative(spell.nivel),
            spell_class="arcane",
            school=clean(spell.escola_magia),
            sphere=None,
            source=FALLBACK_SOURCE,
            range_text=clean(spell.alcance),
            target="Conjurador e criaturas no raio narrativo",
            duration_text=clean(spell.duracao),
            casting_time=clean(spell.tempo_conjuracao),
            components=clean(components),
            component_desc=clean(components),
            component_consumed=False,
            can_be_dispelled=True,
            dispel_how="Dispel Magic, autoconsciência súbita ou intervenção de um arquimago mais sóbrio",
            combat=bool(COMBAT_WORDS_RE.search(spell.descricao_efeito)),
            utility=True,
            saving_throw="Spell",
            saving_throw_outcome="OTHER",
            magical_resistance="YES",
            summary_en=(
                "A creative spell interpretation extracted from unconventional text "
                "with plausible magical consequences."
            ),
            summary_pt_br=(
                "Interpretação criativa de um texto não convencional, convertida em magia "
                "com consequências plausíveis."
            ),
            description_original=clean(
                "\n\n".join(
                    [
                        spell.descricao_efeito,
                        f"Comedic Side Effect: {spell.efeito_colateral_comico}",
                        f"Possible Critical Failure: {spell.falha_critica}",
                        f"Archmage Note: {spell.nota_arquimago}",
                    ]
                )
            ),
            description_pt_br=clean(
                "\n\n".join(
                    [
                        spell.descricao_efeito,
                        f"Efeito Colateral Cômico: {spell.efeito_colateral_comico}",
                        f"Possível Falha Crítica: {spell.falha_critica}",
                        f"Nota do Arquimago: {spell.nota_arquimago}",
                    ]
                )
            ),
            source_image_url=source_image_url,
            icon_prompt=(
                f"Arcane emblem for {spell.nome_magia}, styled as {spell.escola_magia}, "
                "whimsical and mystical"
            ),
        )
