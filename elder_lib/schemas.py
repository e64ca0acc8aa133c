# --- elder_lib/schemas.py ---
"""
Pydantic models for every payload that crosses a trust boundary: request
bodies, LLM responses and reference CSV rows. Field names are snake_case in
Python and camelCase on the wire.
"""
import json
import re
from typing import Annotated, Literal, Optional, Union

from pydantic import (
    AfterValidator,
    AnyUrl,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StringConstraints,
    TypeAdapter,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

SpellClass = Literal["arcane", "divine"]
MagicalResistance = Literal["YES", "NO"]
SavingThrowOutcome = Literal["NEGATES", "HALF", "PARTIAL", "OTHER"]

CORRUPTED_CHAR = "�"

_url_adapter = TypeAdapter(AnyUrl)


def _check_url(value: Optional[str]) -> Optional[str]:
    if value is not None:
        _url_adapter.validate_python(value)
    return value


def _check_encoding(value: str) -> str:
    if CORRUPTED_CHAR in value:
        raise ValueError("contains invalid character encoding")
    return value


TrimmedStr = Annotated[str, StringConstraints(strip_whitespace=True)]
NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
CleanText = Annotated[NonEmptyStr, AfterValidator(_check_encoding)]
UrlStr = Annotated[Optional[str], AfterValidator(_check_url)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


class SpellPayload(CamelModel):
    """A complete, storable spell record."""

    name: NonEmptyStr
    level: int = Field(ge=0, le=9)
    spell_class: SpellClass
    school: Optional[TrimmedStr] = None
    sphere: Optional[TrimmedStr] = None
    source: Optional[TrimmedStr] = None
    range_text: NonEmptyStr
    target: Optional[TrimmedStr] = None
    duration_text: NonEmptyStr
    casting_time: NonEmptyStr
    components: NonEmptyStr
    component_desc: Optional[TrimmedStr] = None
    component_cost: Optional[TrimmedStr] = None
    component_consumed: bool = False
    can_be_dispelled: bool = False
    dispel_how: Optional[TrimmedStr] = None
    combat: bool = False
    utility: bool = False
    saving_throw: NonEmptyStr
    saving_throw_outcome: Optional[SavingThrowOutcome] = None
    magical_resistance: MagicalResistance
    summary_en: NonEmptyStr
    summary_pt_br: CleanText
    description_original: str = Field(min_length=1)
    description_pt_br: CleanText
    source_image_url: UrlStr = None
    icon_url: Optional[TrimmedStr] = None
    icon_prompt: Optional[TrimmedStr] = None


class LlmSpellResponse(CamelModel):
    """Spell data as returned by the parse prompt; most fields may be absent."""

    name: NonEmptyStr
    level: Optional[int] = Field(default=None, ge=0, le=9)
    spell_class: Optional[SpellClass] = None
    school: Optional[TrimmedStr] = None
    sphere: Optional[TrimmedStr] = None
    source: Optional[TrimmedStr] = None
    range_text: NonEmptyStr
    target: Optional[TrimmedStr] = None
    duration_text: NonEmptyStr
    casting_time: NonEmptyStr
    components: NonEmptyStr
    component_desc: Optional[TrimmedStr] = None
    component_cost: Optional[TrimmedStr] = None
    component_consumed: Optional[bool] = None
    can_be_dispelled: Optional[bool] = None
    dispel_how: Optional[TrimmedStr] = None
    combat: Optional[bool] = None
    utility: Optional[bool] = None
    saving_throw: NonEmptyStr
    saving_throw_outcome: Optional[SavingThrowOutcome] = None
    magical_resistance: Optional[MagicalResistance] = None
    summary_en: Optional[TrimmedStr] = None
    summary_pt_br: Optional[TrimmedStr] = None
    description_original: str = Field(min_length=1)
    description_pt_br: Optional[TrimmedStr] = None


def _flexible_text(value):
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (bool, int, float)):
        return str(value).lower() if isinstance(value, bool) else str(value)
    try:
        return json.dumps(value)
    except (TypeError, ValueError):
        return str(value)


def _optional_trimmed(value):
    if not isinstance(value, str):
        return None
    return value.strip() or None


class SpellParseRequest(CamelModel):
    text: Annotated[Optional[str], BeforeValidator(_flexible_text)] = None
    image_data_url: Annotated[Optional[str], BeforeValidator(_optional_trimmed)] = None
    source_image_url: Annotated[UrlStr, BeforeValidator(_optional_trimmed)] = None

    @model_validator(mode="after")
    def require_text_or_image(self):
        if not (self.text or "").strip() and not self.image_data_url:
            raise ValueError("Provide spell text or an image.")
        return self


class LocalizationResult(CamelModel):
    description_pt_br: NonEmptyStr
    summary_en: NonEmptyStr
    summary_pt_br: NonEmptyStr


class CreativeInterpretation(CamelModel):
    """Output of the archmage prompt used for text that is not a spell."""

    nome_magia: NonEmptyStr
    escola_magia: NonEmptyStr
    nivel: Union[Annotated[int, Field(ge=0, le=9)], NonEmptyStr]
    componentes: Union[NonEmptyStr, Annotated[list[NonEmptyStr], Field(min_length=1)]]
    tempo_conjuracao: NonEmptyStr
    alcance: NonEmptyStr
    duracao: NonEmptyStr
    descricao_efeito: NonEmptyStr
    efeito_colateral_comico: NonEmptyStr
    falha_critica: NonEmptyStr
    nota_arquimago: NonEmptyStr


class SymbolConcept(BaseModel):
    symbol: Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=120)]


# --- Spell reference rows ---
class ReferenceCsvRow(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    class_name: NonEmptyStr = Field(alias="class")
    group_name: NonEmptyStr = Field(alias="group")
    name: NonEmptyStr
    lvl: int = Field(ge=0, le=9)
    source: NonEmptyStr

    @field_validator("lvl", mode="before")
    @classmethod
    def coerce_level(cls, value):
        if isinstance(value, str):
            value = value.strip()
            return int(value) if value else 0
        return value


class ReferenceSyncCsvRow(ReferenceCsvRow):
    @field_validator("lvl", mode="before")
    @classmethod
    def coerce_level(cls, value):
        match = re.search(r"\d+", str(value if value is not None else "").strip())
        if not match:
            raise ValueError("level has no digits")
        return int(match.group(0))


class ReferenceImportRequest(BaseModel):
    csv: str = Field(min_length=1)


# --- Icon requests ---
class IconPromptRequest(CamelModel):
    name: NonEmptyStr
    spell_class: SpellClass
    school: Optional[TrimmedStr] = None
    sphere: Optional[TrimmedStr] = None
    summary_en: Optional[TrimmedStr] = None
    description_original: NonEmptyStr


class IconGenerateRequest(IconPromptRequest):
    icon_prompt: Optional[TrimmedStr] = None


class HydrateRequest(CamelModel):
    name: Optional[NonEmptyStr] = None
    spell_class: Optional[SpellClass] = None
    limit: int = Field(default=1, ge=1, le=10)
    retry_missing: bool = False
    retry_only_missing: bool = False
    retry_order: Literal["oldest", "newest"] = "oldest"


def validation_details(error) -> list:
    """Turns a pydantic ValidationError into a JSON-safe list of issues."""
    return [
        {"loc": [str(part) for part in issue["loc"]], "msg": issue["msg"], "type": issue["type"]}
        for issue in error.errors()
    ]
