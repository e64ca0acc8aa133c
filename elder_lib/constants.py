# --- elder_lib/constants.py ---
"""
elder_lib/constants.py: Stores the registry of LLM prompts, AD&D 2e rule
vocabularies used by the classifiers, icon style rules and the static
navigation/label tables of the public site.
"""

SPELL_CLASSES = ("arcane", "divine")
MAGICAL_RESISTANCE_VALUES = ("YES", "NO")
SAVING_THROW_OUTCOMES = ("NEGATES", "HALF", "PARTIAL", "OTHER")

CANONICAL_SAVING_THROWS_2E = (
    "Paralyzation, Poison, or Death Magic",
    "Rod, Staff, or Wand",
    "Petrification or Polymorph",
    "Breath Weapon",
    "Spell",
)

KNOWN_WIZARD_SCHOOLS = frozenset(
    {
        "abjuration",
        "alteration",
        "conjuration",
        "conjuration/summoning",
        "divination",
        "enchantment/charm",
        "enchantment",
        "charm",
        "evocation",
        "invocation/evocation",
        "illusion",
        "illusion/phantasm",
        "necromancy",
        "force",
    }
)

KNOWN_PRIEST_SPHERES = frozenset(
    {
        "all",
        "animal",
        "chaos",
        "charm",
        "combat",
        "creation",
        "divination",
        "elemental",
        "guardian",
        "healing",
        "law",
        "necromantic",
        "plant",
        "protection",
        "summoning",
        "sun",
        "time",
        "travelers",
        "wards",
        "weather",
        "numbers",
        "thought",
        "war",
    }
)

# Merged 2e school names, keyed by the canonical form.
GROUP_ALIASES = {
    "Invocation/Evocation": (
        "invocation",
        "evocation",
        "invocation/evocation",
        "evocation/invocation",
    ),
    "Conjuration/Summoning": (
        "conjuration",
        "summoning",
        "conjuration/summoning",
        "summoning/conjuration",
    ),
    "Illusion/Phantasm": ("illusion", "phantasm", "illusion/phantasm", "phantasm/illusion"),
    "Enchantment/Charm": ("enchantment", "charm", "enchantment/charm", "charm/enchantment"),
}

# --- SPELL EDIT FORM LIMITS ---
SPELL_FORM_REQUIRED_FIELDS = (
    ("Nome", "name"),
    ("Class", "spellClass"),
    ("Range", "rangeText"),
    ("Duração", "durationText"),
    ("Casting Time", "castingTime"),
    ("Componentes", "components"),
    ("Saving Throw", "savingThrow"),
    ("Resumo EN", "summaryEn"),
    ("Resumo PT-BR", "summaryPtBr"),
    ("Descrição Original", "descriptionOriginal"),
    ("Descrição PT-BR", "descriptionPtBr"),
)

SPELL_FORM_MAX_LENGTHS = (
    ("Nome", "name", 120),
    ("Escola", "school", 120),
    ("Esfera", "sphere", 120),
    ("Fonte", "source", 60),
    ("Range", "rangeText", 120),
    ("Alvo", "target", 160),
    ("Duração", "durationText", 120),
    ("Casting Time", "castingTime", 80),
    ("Componentes", "components", 80),
    ("Como dispersar", "dispelHow", 500),
    ("Saving Throw", "savingThrow", 120),
    ("Resumo EN", "summaryEn", 500),
    ("Resumo PT-BR", "summaryPtBr", 500),
    ("URL da imagem", "sourceImageUrl", 500),
)

SPELL_LIST_PAGE_SIZE = 50

# --- ICON STYLE RULES ---
# (weight, groups, primary color, secondary color, carving style)
ICON_STYLE_RULES = [
    (100, ("elemental fire",), "#ff3300", "#ffaa00", "magma cracked stone"),
    (100, ("elemental water",), "#0066ff", "#00ffff", "wave carved stone"),
    (100, ("elemental earth",), "#996633", "#66ff33", "rock fractured stone"),
    (100, ("elemental air",), "#ccffff", "#66ccff", "wind swirl stone"),
    (95, ("sun",), "#ffff00", "#ffaa00", "sunburst engraved stone"),
    (95, ("shadow",), "#6600aa", "#000000", "shadow mist stone"),
    (95, ("plant",), "#33aa33", "#99ff66", "root covered stone"),
    (95, ("animal",), "#cc9933", "#663300", "claw marked stone"),
    (90, ("weather",), "#66aaff", "#ffffff", "storm cracked stone"),
    (90, ("necromancy",), "#9933ff", "#33ff66", "rotting bone stone"),
    (90, ("illusion/phantasm", "illusion", "phantasm"), "#ff66ff", "#66ffff", "shimmer mirror stone"),
    (90, ("healing",), "#66ff99", "#ffffff", "soft glow marble stone"),
    (90, ("war",), "#ff0000", "#000000", "battle scarred stone"),
    (90, ("combat",), "#ff3333", "#ffaa00", "weapon etched stone"),
    (90, ("song",), "#ff66cc", "#66ffff", "vibration rune stone"),
    (85, ("summoning",), "#00aaff", "#8844ff", "portal rune stone"),
    (85, ("travelers",), "#66ccff", "#00ffff", "road etched stone"),
    (85, ("guardian",), "#66ccff", "#ffffff", "shield fortress stone"),
    (80, ("abjuration",), "#ffd700", "#ffffff", "shield rune stone"),
    (80, ("protection",), "#ffdd66", "#ffffff", "marble shield stone"),
    (80, ("wards",), "#ffaa00", "#ffffff", "rune circle stone"),
    (80, ("conjuration/summoning", "conjuration"), "#00aaff", "#8844ff", "portal carved stone"),
    (80, ("invocation/evocation", "invocation", "evocation"), "#ff5500", "#ffaa00", "burned rune stone"),
    (80, ("alteration",), "#ffff66", "#00ffcc", "shifting rune stone"),
    (75, ("divination",), "#66ffff", "#ffffff", "eye engraved stone"),
    (75, ("artifice",), "#cccccc", "#ffaa00", "gear carved stone"),
    (75, ("alchemy",), "#ffaa33", "#66ffcc", "bubbling etched stone"),
    (70, ("force",), "#66ccff", "#ffffff", "arcane energy stone"),
    (70, ("mentalism",), "#ff99cc", "#6600ff", "psychic ripple stone"),
    (70, ("thought",), "#ff99ff", "#9999ff", "mindwave stone"),
    (70, ("charm",), "#ff66aa", "#ffffff", "heart rune stone"),
    (70, ("enchantment/charm", "enchantment"), "#ff44aa", "#ffccff", "sparkle rune stone"),
    (65, ("time",), "#ffd700", "#000000", "clockwork cracked stone"),
    (65, ("geometry",), "#00ccff", "#ffaa00", "sacred pattern stone"),
    (65, ("numbers",), "#00ffff", "#00ff99", "numeric rune stone"),
    (65, ("law",), "#3366ff", "#ffffff", "ordered marble stone"),
    (65, ("chaos",), "#ff00ff", "#ff5500", "chaotic cracked stone"),
    (60, ("astral",), "#c0c0ff", "#8000ff", "starfield stone"),
    (60, ("dimension",), "#00ffff", "#0044ff", "fractured portal stone"),
    (55, ("wild magic", "generic"), "#ff00ff", "#00ffff", "unstable glowing stone"),
    (50, ("universal magic", "generic"), "#dddddd", "#aaaaaa", "faded rune stone"),
    (50, ("all", "generic"), "#ffffff", "#ffd700", "neutral rune stone"),
]

# --- PUBLIC SITE ---
PUBLIC_NAV_ITEMS = [
    # (key, ui text key, endpoint or None, fallback label)
    ("home", "nav.home", "public.home", "Home"),
    ("atributos", "nav.attributes", "public.attributes", "Attributes"),
    ("race", "nav.race", "public.races", "Race"),
    ("class", "nav.class", None, "Class"),
    ("kit", "nav.kit", None, "Kit"),
    ("traits", "nav.traits", None, "Traits"),
    ("nwp", "nav.nwp", None, "Non Weapon Proficiency"),
    ("wp", "nav.wp", None, "Weapon Proficiency"),
    ("equips", "nav.equips", None, "Equipment"),
    ("spells", "nav.spells", None, "Spells"),
]

INDEX_SECTIONS = [
    ("attributes", "public.attributes"),
    ("race", "public.races"),
    ("class", None),
    ("kit", None),
    ("traits", None),
    ("nwp", None),
    ("wp", None),
    ("equips", None),
    ("spells", None),
]

CORE_ATTRIBUTES = ("STRENGTH", "CONSTITUTION", "DEXTERITY", "WISDOM", "INTELLIGENCE", "CHARISMA")

# Score table columns shown on the attribute detail page, in display order.
SCORE_COLUMNS = (
    "scoreLabel",
    "scoreMin",
    "scoreMax",
    "baseScore",
    "attackAdjustment",
    "damageAdjustment",
    "reactionAdjustment",
    "defensiveAdjustment",
    "missileAdjustment",
    "magicDefenseAdjustment",
    "maxWizardSpellLevel",
    "maxSpellsPerLevel",
    "bonusSpellsText",
    "bonusProficiencies",
    "learnSpellPercent",
    "weightAllowance",
    "systemShockPercent",
    "poisonSaveModifier",
    "hitPointAdjustmentBase",
    "hitPointAdjustmentWarrior",
    "minimumHitDieResult",
    "resurrectionChancePercent",
    "pickPocketsPercent",
    "openLocksPercent",
    "moveSilentlyPercent",
    "climbWallsPercent",
    "openDoors",
    "openDoorsLocked",
    "bendBarsLiftGatesPercent",
    "maxPress",
    "spellFailurePercent",
    "spellImmunityLevel",
    "loyaltyBase",
    "maxHenchmen",
)
SCORE_RANGE_COLUMNS = frozenset({"scoreLabel", "scoreMin", "scoreMax", "baseScore"})

SCORE_LABELS = {
    "pt": {
        "scoreLabel": "Faixa",
        "scoreMin": "Mínimo",
        "scoreMax": "Máximo",
        "baseScore": "Base",
        "attackAdjustment": "Ajuste de Ataque",
        "damageAdjustment": "Ajuste de Dano",
        "maxPress": "Press Máximo",
        "openDoors": "Abrir Portas",
        "openDoorsLocked": "Portas mágicas",
        "bendBarsLiftGatesPercent": "Entortar/Erguer (%)",
        "weightAllowance": "Carga",
        "systemShockPercent": "Choque Sistêmico (%)",
        "poisonSaveModifier": "Teste vs Veneno",
        "hitPointAdjustmentBase": "PV (Base)",
        "hitPointAdjustmentWarrior": "PV (Guerreiro)",
        "minimumHitDieResult": "Dado de Vida Mínimo",
        "resurrectionChancePercent": "Ressurreição (%)",
        "missileAdjustment": "Ajuste de Míssil",
        "pickPocketsPercent": "Punga (%)",
        "openLocksPercent": "Abrir Fechaduras (%)",
        "reactionAdjustment": "Ajuste de Reação",
        "defensiveAdjustment": "Ajuste Defensivo",
        "moveSilentlyPercent": "Mover-se em Silêncio (%)",
        "climbWallsPercent": "Escalar Paredes (%)",
        "bonusSpellsText": "Magias Bônus",
        "spellFailurePercent": "Falha de Magia (%)",
        "magicDefenseAdjustment": "Defesa Mágica",
        "spellImmunityLevel": "Imunidade de Magia",
        "maxWizardSpellLevel": "Nível Máx de Magia",
        "maxSpellsPerLevel": "Magias Máx por Nível",
        "bonusProficiencies": "Proficiências Bônus",
        "learnSpellPercent": "Aprender Magia (%)",
        "loyaltyBase": "Lealdade Base",
        "maxHenchmen": "Máx. Aliados",
    },
    "en": {
        "scoreLabel": "Range",
        "scoreMin": "Minimum",
        "scoreMax": "Maximum",
        "baseScore": "Base",
        "attackAdjustment": "Attack Adjustment",
        "damageAdjustment": "Damage Adjustment",
        "maxPress": "Maximum Press",
        "openDoors": "Open Doors",
        "openDoorsLocked": "Magic doors",
        "bendBarsLiftGatesPercent": "Bend/Lift (%)",
        "weightAllowance": "Carry Allowance",
        "systemShockPercent": "System Shock (%)",
        "poisonSaveModifier": "Poison Save Modifier",
        "hitPointAdjustmentBase": "HP Adjustment (Base)",
        "hitPointAdjustmentWarrior": "HP Adjustment (Warrior)",
        "minimumHitDieResult": "Minimum Hit Die",
        "resurrectionChancePercent": "Resurrection Chance (%)",
        "missileAdjustment": "Missile Adjustment",
        "pickPocketsPercent": "Pick Pockets (%)",
        "openLocksPercent": "Open Locks (%)",
        "reactionAdjustment": "Reaction Adjustment",
        "defensiveAdjustment": "Defensive Adjustment",
        "moveSilentlyPercent": "Move Silently (%)",
        "climbWallsPercent": "Climb Walls (%)",
        "bonusSpellsText": "Bonus Spells",
        "spellFailurePercent": "Spell Failure (%)",
        "magicDefenseAdjustment": "Magic Defense",
        "spellImmunityLevel": "Spell Immunity",
        "maxWizardSpellLevel": "Max Wizard Spell Level",
        "maxSpellsPerLevel": "Max Spells per Level",
        "bonusProficiencies": "Bonus Proficiencies",
        "learnSpellPercent": "Learn Spell (%)",
        "loyaltyBase": "Base Loyalty",
        "maxHenchmen": "Max Henchmen",
    },
}

RACE_ADJUSTMENT_COLUMNS = (
    ("STR", "strength_adjustment"),
    ("CON", "constitution_adjustment"),
    ("DEX", "dexterity_adjustment"),
    ("WIS", "wisdom_adjustment"),
    ("INT", "intelligence_adjustment"),
    ("CHA", "charisma_adjustment"),
)

RACE_CLASS_LIMIT_COLUMNS = (
    ("Fighter", "max_level_fighter"),
    ("Paladin", "max_level_paladin"),
    ("Ranger", "max_level_ranger"),
    ("Thief", "max_level_thief"),
    ("Bard", "max_level_bard"),
    ("Wizard", "max_level_wizard"),
    ("Illusionist", "max_level_illusionist"),
    ("Cleric", "max_level_cleric"),
    ("Druid", "max_level_druid"),
)

# --- WEB LOOKUPS ---
WEB_USER_AGENT = "Mozilla/5.0 ElderDungeons/1.0"
FANDOM_BASE_URL = "https://adnd2e.fandom.com"
SPELL_NOT_FOUND_REASON = "SPELL_NOT_FOUND_IN_ADND2E_WEB_SOURCES"


# --- PROMPT REGISTRY ---
# Prompts for structured output are English-only; the creative fallback is
# written in Portuguese so the interpretation reads naturally on the pt site.

PROMPT_REGISTRY = {
    "SPELL_PARSE": """You are an AD&D 2nd Edition spell parser.
Extract structured spell data from the user content and respond with valid JSON only.

Rules:
1) descriptionOriginal must contain only the narrative spell description body.
   Exclude title/name line, school/sphere line, and stat block lines such as Range/Duration/Components/Casting Time/Saving Throw.
   Keep the narrative body exactly as written and preserve/insert sensible paragraph line breaks for fluent reading.
2) If content is image-only, transcribe the original spell text and use only its narrative body in descriptionOriginal.
3) descriptionPtBr must be a complete Brazilian Portuguese translation of descriptionOriginal with fluent paragraph breaks.
4) Create short summaries:
   - summaryEn: 1-3 concise sentences in English.
   - summaryPtBr: 1-3 concise sentences in Brazilian Portuguese.
5) Classify usage intent:
   - combat=true when spell is typically useful in combat situations.
   - utility=true when spell is typically useful outside combat.
   - both can be true.
6) spellClass must be:
   - "arcane" for wizard spells
   - "divine" for priest spells
   If uncertain, use best effort from school/sphere context.
7) magicalResistance:
   - YES: spell directly affects creatures/targets.
   - NO: environmental, area-only, object-only, or indirect effects.
   - Do NOT use mentions of "caster" alone as evidence for YES.
   - Summoning/creation spells (e.g., Mount-like effects) are usually NO unless the spell directly targets/forces effects on another creature.
8) source must be one of known books when possible (Player's Handbook, Spells & Magic, Tome of Magic, Complete Wizard's Handbook, Complete Priest's Handbook, or another explicit source in text). If unknown, return null.
9) target should be extracted from explicit Target/Targets/Area of Effect line when present.
10) Component details:
   - Parse components from abbreviations like V,S,M.
   - componentDesc: describe material component. If not explicit, infer plausible affected material/context when strongly implied by spell effect.
   - componentCost: include explicit monetary/value cost when present.
   - componentConsumed: true only if text explicitly says material is consumed/destroyed; otherwise false.
11) Dispel behavior after spell is active:
   - canBeDispelled=true when the spell effect can be ended/suppressed by Dispel Magic (or equivalent) after successful casting.
   - dispelHow: short explanation of how dispel works for this spell effect.
   - Ignore dispel/counterspell interactions during casting time or before the effect exists.
   - If unclear, prefer conservative output: canBeDispelled=false and dispelHow=null.
12) Saving Throw must follow AD&D 2e categories only. Never use ability-save terms from other editions (e.g., Constitution save).
   Allowed categories:
   - Paralyzation, Poison, or Death Magic
   - Rod, Staff, or Wand
   - Petrification or Polymorph
   - Breath Weapon
   - Spell
   Priority order when more than one could apply:
   1. If effect includes paralysis/poison/death magic, use "Paralyzation, Poison, or Death Magic".
   2. Else if it is specifically resisted as rod/staff/wand effect, use "Rod, Staff, or Wand".
   3. Else if effect includes petrification/polymorph/transformation, use "Petrification or Polymorph".
   4. Else if it is breath-weapon-type effect, use "Breath Weapon".
   5. Otherwise use "Spell".
   Also analyze save outcome words such as "Neg.", "1/2", "half", "partial":
   they indicate outcome resolution, but category must still be one of the categories above.
13) Lines starting with EXPECTED_NAME, EXPECTED_CLASS, EXPECTED_LEVEL or EXPECTED_SOURCE are authoritative hints for those fields.
14) Do not invent unknown values. Use best effort with AD&D 2e conventions.

Return this JSON shape:
{
  "name": "string",
  "level": 0,
  "spellClass": "arcane | divine",
  "school": "string | null",
  "sphere": "string | null",
  "source": "string | null",
  "rangeText": "string",
  "target": "string | null",
  "durationText": "string",
  "castingTime": "string",
  "components": "string",
  "componentDesc": "string | null",
  "componentCost": "string | null",
  "componentConsumed": false,
  "canBeDispelled": false,
  "dispelHow": "string | null",
  "combat": false,
  "utility": true,
  "savingThrow": "string",
  "savingThrowOutcome": "NEGATES | HALF | PARTIAL | OTHER | null",
  "magicalResistance": "YES | NO",
  "summaryEn": "string",
  "summaryPtBr": "string",
  "descriptionOriginal": "string",
  "descriptionPtBr": "string"
}""",
    "LOCALIZE_SPELL": (
        "You complete missing spell localization fields. Return valid JSON only with "
        "descriptionPtBr, summaryEn, summaryPtBr. descriptionPtBr must be complete "
        "Brazilian Portuguese with readable paragraph breaks."
    ),
    "TRANSLATE_PT_BR": (
        "Translate AD&D spell narrative text to Brazilian Portuguese. Preserve meaning "
        "and game terms. Return only translated plain text."
    ),
    "ICON_SYMBOL": (
        'Return JSON only with {"symbol":"..."}. Create one concise visual symbol idea '
        "for a fantasy spell icon. Keep 4-12 words. Describe only the central "
        "symbol/object, not colors/background/style/text."
    ),
    "CREATIVE_FALLBACK": """Você é um arquimago excêntrico que interpreta QUALQUER texto como se fosse uma magia de RPG.

Regras:
1) Sempre converta o texto em magia, mesmo que seja receita, lista, bula, recado, desabafo ou nonsense.
2) Tom irônico, sarcástico e divertido, como um mago veterano cansado de aprendizes.
3) Gere JSON válido com EXATAMENTE estes campos:
   nomeMagia, escolaMagia, nivel, componentes, tempoConjuracao, alcance, duracao, descricaoEfeito, efeitoColateralComico, falhaCritica, notaArquimago
4) Se o texto for absurdo, a magia deve funcionar de maneira inesperada e ridícula.
5) Nunca diga que o texto não é magia.
6) Interprete o conteúdo de verdade: extraia temas, intenções e pistas do que foi enviado, sem só copiar o texto.""",
}

ICON_PROMPT_TEMPLATE = (
    "Square icon carved into an ancient slab of rough dark basalt stone, with irregular "
    "chipped edges and worn corners, never a perfect frame. "
    "Stone outside the symbol remains flat and untouched; do not excavate the whole surface. "
    "Only the symbol lines are engraved in low relief with narrow deep grooves, sharp "
    "internal shadows, chamfered cuts and micro-fissures. "
    "The groove fill behaves like luminous liquid trapped inside the carved cavities using "
    "only {primary} and {secondary}. "
    "Glow must stay inside grooves only; no outward bloom, no painted overlays, no floating symbol. "
    "Centered magic symbol with thick lines: {symbol}. "
    "Material behavior and carving mood: {style}. "
    "Internal spaces of the symbol are filled with the same stone texture, ancient weathered "
    "underground basalt. "
    "High contrast and legible at 64px, simple silhouette, fantasy game UI icon, 1:1 ratio. "
    "Avoid hollow cutouts, recessed internal areas, perfect frames, modern UI visuals, plastic "
    "or metal textures, blur, watermark, text, letters."
)

SCORE_EXPLANATIONS = {
    "pt": {
        "scoreLabel": "Faixa de valor usada para localizar os efeitos daquele subatributo.",
        "scoreMin": "Valor mínimo da faixa de pontuação considerada.",
        "scoreMax": "Valor máximo da faixa de pontuação considerada.",
        "baseScore": "Valor-base de referência para aplicar os efeitos da linha.",
        "attackAdjustment": "Modificador aplicado às jogadas de ataque.",
        "damageAdjustment": "Modificador aplicado ao dano causado em ataques.",
        "reactionAdjustment": "Modificador nas reações de NPCs e situações de iniciativa social.",
        "defensiveAdjustment": "Ajuste defensivo que dificulta ou facilita ser atingido.",
        "missileAdjustment": "Modificador para acertos com armas de ataque à distância.",
        "magicDefenseAdjustment": "Bônus de resistência contra efeitos mágicos hostis.",
        "maxWizardSpellLevel": "Maior nível de magia arcana que o personagem pode aprender/usar.",
        "maxSpellsPerLevel": "Quantidade máxima de magias memorizáveis por nível.",
        "bonusSpellsText": "Magias bônus concedidas por alto valor do subatributo.",
        "bonusProficiencies": "Número extra de proficiências recebidas.",
        "learnSpellPercent": "Chance percentual de aprender novas magias.",
        "weightAllowance": "Capacidade de carga sem penalidades adicionais.",
        "systemShockPercent": "Chance de suportar choques físicos e efeitos traumáticos.",
        "poisonSaveModifier": "Ajuste no teste de resistência contra venenos.",
        "hitPointAdjustmentBase": "Bônus ou penalidade de pontos de vida para classes gerais.",
        "hitPointAdjustmentWarrior": "Bônus ou penalidade de pontos de vida para classes guerreiras.",
        "minimumHitDieResult": "Resultado mínimo considerado na rolagem de dado de vida.",
        "resurrectionChancePercent": "Chance de retorno bem-sucedido em efeitos de ressurreição.",
        "pickPocketsPercent": "Chance percentual de sucesso para furtar bolsos.",
        "openLocksPercent": "Chance percentual de abrir fechaduras.",
        "moveSilentlyPercent": "Chance percentual de se mover em silêncio.",
        "climbWallsPercent": "Chance percentual de escalar superfícies verticais.",
        "openDoors": "Capacidade de forçar a abertura de portas comuns.",
        "openDoorsLocked": "Capacidade de forçar abertura de portas mágicas ou resistentes.",
        "bendBarsLiftGatesPercent": "Chance percentual de entortar barras ou erguer portões.",
        "maxPress": "Peso máximo que pode ser erguido em esforço extremo.",
        "spellFailurePercent": "Chance percentual de falha ao lançar magias sacerdotais.",
        "spellImmunityLevel": "Nível de magia contra o qual o personagem pode obter imunidade.",
        "loyaltyBase": "Base de lealdade de seguidores e aliados sob comando.",
        "maxHenchmen": "Quantidade máxima de seguidores próximos sob liderança.",
    },
    "en": {
        "scoreLabel": "Value range used to locate the effects for this subattribute.",
        "scoreMin": "Minimum value considered in this score range.",
        "scoreMax": "Maximum value considered in this score range.",
        "baseScore": "Base reference score for applying this row's effects.",
        "attackAdjustment": "Modifier applied to attack rolls.",
        "damageAdjustment": "Modifier applied to damage rolls.",
        "reactionAdjustment": "Modifier affecting NPC/social reaction outcomes.",
        "defensiveAdjustment": "Defensive modifier that affects how easily you are hit.",
        "missileAdjustment": "Modifier for ranged attack accuracy.",
        "magicDefenseAdjustment": "Defense bonus against hostile magical effects.",
        "maxWizardSpellLevel": "Highest arcane spell level the character can learn/use.",
        "maxSpellsPerLevel": "Maximum number of spells known/memorized per level.",
        "bonusSpellsText": "Bonus spells granted by high subattribute values.",
        "bonusProficiencies": "Additional proficiency slots granted.",
        "learnSpellPercent": "Percent chance to learn a new spell.",
        "weightAllowance": "Carrying capacity before extra penalties apply.",
        "systemShockPercent": "Chance to survive trauma and severe bodily shock.",
        "poisonSaveModifier": "Modifier to saving throws against poison.",
        "hitPointAdjustmentBase": "Hit point bonus/penalty for most classes.",
        "hitPointAdjustmentWarrior": "Hit point bonus/penalty for warrior classes.",
        "minimumHitDieResult": "Minimum effective result when rolling hit dice.",
        "resurrectionChancePercent": "Chance to survive resurrection effects.",
        "pickPocketsPercent": "Percent chance to successfully pick pockets.",
        "openLocksPercent": "Percent chance to successfully open locks.",
        "moveSilentlyPercent": "Percent chance to move silently.",
        "climbWallsPercent": "Percent chance to climb walls and vertical surfaces.",
        "openDoors": "Ability to force open normal doors.",
        "openDoorsLocked": "Ability to force open magical or specially resistant doors.",
        "bendBarsLiftGatesPercent": "Percent chance to bend bars or lift gates.",
        "maxPress": "Maximum weight that can be pressed in extreme effort.",
        "spellFailurePercent": "Percent chance of priest spell failure.",
        "spellImmunityLevel": "Spell level threshold where immunity may apply.",
        "loyaltyBase": "Base loyalty score for followers and allies.",
        "maxHenchmen": "Maximum number of close followers under leadership.",
    },
}
