# --- elder_lib/seed_data.py ---
"""
elder_lib/seed_data.py: Bundled content for a fresh database.

This module contains:
- PUBLIC_UI_TEXTS: Interface strings for the public pages, per namespace.
- ATTRIBUTES: The six core attributes with their sub-attributes and score rows.
- RACES: Base races with subraces and purchasable racial abilities.
- seed_ui_texts / seed_attributes / seed_races: Idempotent loaders.
"""
import logging

from .constants import SCORE_EXPLANATIONS, SCORE_LABELS

log = logging.getLogger("elder_admin.seed")

# {namespace: {locale: {key: text}}}
PUBLIC_UI_TEXTS = {
    "public-shell": {
        "pt": {
            "badge": "Guia Público",
            "admin": "Admin",
            "sections": "Seções",
            "nav.home": "Home",
            "nav.attributes": "Atributos",
            "nav.race": "Raças",
            "nav.class": "Class",
            "nav.kit": "Kit",
            "nav.traits": "Traits",
            "nav.nwp": "Non Weapon Proficience",
            "nav.wp": "Weapon Proficience",
            "nav.equips": "Equips",
            "nav.spells": "Spells",
            "language": "Idioma",
            "notFound.title": "Página não encontrada",
            "notFound.text": "O conteúdo procurado não existe ou foi movido.",
            "notFound.back": "Voltar para o início",
        },
        "en": {
            "badge": "Public Guide",
            "admin": "Admin",
            "sections": "Sections",
            "nav.home": "Home",
            "nav.attributes": "Attributes",
            "nav.race": "Races",
            "nav.class": "Class",
            "nav.kit": "Kit",
            "nav.traits": "Traits",
            "nav.nwp": "Non Weapon Proficiency",
            "nav.wp": "Weapon Proficiency",
            "nav.equips": "Equipment",
            "nav.spells": "Spells",
            "language": "Language",
            "notFound.title": "Page not found",
            "notFound.text": "The content you are looking for does not exist or was moved.",
            "notFound.back": "Back to home",
        },
    },
    "home": {
        "pt": {
            "badge": "Player's Option · Skills & Powers",
            "title": "Elder Dungeons",
            "intro": "Uma enciclopédia pública de regras do Elder Dungeons, feita para ajudar "
            "jogadores a entender criação e evolução de personagem de forma prática e clara.",
            "sectionTitle": "O que você encontra aqui",
            "sectionText": "O site organiza as regras por tema: atributos e detalhes, raças, "
            "classes, kits, proficiências, equipamentos e magias. Cada página explica o impacto "
            "mecânico de forma direta para apoiar decisões durante a criação do personagem.",
            "useTitle": "Como usar",
            "useText": "Use o menu lateral esquerdo para navegar por assunto e altere o idioma "
            "no seletor do cabeçalho quando quiser.",
            "cta": "Começar por Atributos",
        },
        "en": {
            "badge": "Player's Option · Skills & Powers",
            "title": "Elder Dungeons",
            "intro": "A public rules encyclopedia for Elder Dungeons, designed to help players "
            "understand character creation and progression in a practical, easy-to-read format.",
            "sectionTitle": "What you find here",
            "sectionText": "The site organizes game rules by topic: attributes and derived "
            "values, races, classes, kits, proficiencies, equipment, and spells. Each page "
            "explains mechanical impact clearly, so you can make better decisions while "
            "building your character.",
            "useTitle": "How to use",
            "useText": "Use the left menu to navigate by subject and switch language in the "
            "header selection box any time.",
            "cta": "Start with Attributes",
        },
    },
    "index": {
        "pt": {
            "title": "Índice",
            "description": "Escolha um tema para entender as regras e opções disponíveis na "
            "criação e evolução do personagem.",
            "badge": "Navegação pública",
            "viewDetails": "Ver detalhes",
            "soon": "Em breve: páginas de detalhe completas para cada tópico, com navegação dedicada.",
            "section.attributes.title": "Atributos",
            "section.attributes.status": "Pronto",
            "section.attributes.note": "Aqui você entende os atributos principais do personagem "
            "e como eles influenciam testes, combate e interações.",
            "section.race.title": "Raças",
            "section.race.status": "Pronto",
            "section.race.note": "Mostra as raças e subraças disponíveis, com seus traços, "
            "vantagens naturais e impacto na criação do personagem.",
            "section.class.title": "Class",
            "section.class.note": "Explica o papel de cada classe, suas capacidades, limitações "
            "e estilo de jogo.",
            "section.kit.title": "Kit",
            "section.kit.note": "Kits são especializações dentro das classes, trazendo "
            "identidade, bônus e restrições para o personagem.",
            "section.traits.title": "Traits",
            "section.traits.note": "Apresenta vantagens e desvantagens para personalizar o "
            "personagem, equilibrando pontos fortes e fraquezas.",
            "section.nwp.title": "Non Weapon Proficience",
            "section.nwp.note": "Reúne perícias não ligadas a combate, úteis para exploração, "
            "conhecimento, interação social e sobrevivência.",
            "section.wp.title": "Weapon Proficience",
            "section.wp.note": "Mostra proficiências de armas, estilos de luta e níveis de "
            "especialização para definir como seu personagem combate.",
            "section.equips.title": "Equips",
            "section.equips.note": "Catálogo de equipamentos para apoiar o personagem em "
            "aventura, combate, viagem e utilidade no dia a dia.",
            "section.spells.title": "Spells",
            "section.spells.status": "Em evolução",
            "section.spells.note": "Área de magias em expansão, com descrição dos efeitos e uso "
            "prático para jogo.",
        },
        "en": {
            "title": "Index",
            "description": "Choose a topic to understand rules and options for character "
            "creation and progression.",
            "badge": "Public navigation",
            "viewDetails": "View details",
            "soon": "Soon: full detail pages for each topic, with dedicated navigation.",
            "section.attributes.title": "Attributes",
            "section.attributes.status": "Ready",
            "section.attributes.note": "Understand core character attributes and how they "
            "affect tests, combat, and interactions.",
            "section.race.title": "Races",
            "section.race.status": "Ready",
            "section.race.note": "Shows available races and subraces, including traits and "
            "how they shape character creation.",
            "section.class.title": "Class",
            "section.class.note": "Explains each class role, strengths, limits, and play style.",
            "section.kit.title": "Kit",
            "section.kit.note": "Kits are class specializations that add identity, perks, and "
            "trade-offs.",
            "section.traits.title": "Traits",
            "section.traits.note": "Traits and disadvantages help customize your character's "
            "strengths and weaknesses.",
            "section.nwp.title": "Non Weapon Proficiency",
            "section.nwp.note": "Non-combat proficiencies for exploration, knowledge, social "
            "scenes, and survival.",
            "section.wp.title": "Weapon Proficiency",
            "section.wp.note": "Weapon proficiencies, fighting styles, and specialization "
            "levels that define combat approach.",
            "section.equips.title": "Equipment",
            "section.equips.note": "Equipment catalog to support adventure, combat, travel, "
            "and day-to-day utility.",
            "section.spells.title": "Spells",
            "section.spells.status": "In progress",
            "section.spells.note": "Spells area in progress, with practical spell effect "
            "descriptions.",
        },
    },
    "attributes-list": {
        "pt": {
            "title": "Atributos",
            "description": "Os atributos representam as capacidades básicas do personagem. "
            "Cada um possui subatributos que detalham efeitos práticos em combate, resistência, "
            "perícias, magia e interações.",
            "badge": "Criação de personagem",
            "openDerived": "Abrir detalhes",
            "subattributes": "Subatributos",
            "fallbackAttributeDesc": "Este atributo define parte central do desempenho do personagem.",
        },
        "en": {
            "title": "Attributes",
            "description": "Attributes represent your character's core capabilities. Each one "
            "has derived subattributes that detail practical effects in combat, resilience, "
            "skills, magic, and interactions.",
            "badge": "Character creation",
            "openDerived": "Open details",
            "subattributes": "Subattributes",
            "fallbackAttributeDesc": "This attribute defines a core part of character performance.",
        },
    },
    "races-list": {
        "pt": {
            "title": "Raças",
            "description": "Explore cada raça e subraça com detalhes práticos para criação de personagem.",
            "badge": "Opções de personagem",
            "subraces": "Subraças",
            "cpCost": "Custo em CP",
            "fallbackRaceDesc": "Raça base com identidade própria e impacto na progressão do personagem.",
            "fallbackSubraceDesc": "Variação de subraça com traços próprios e escolhas de estilo de jogo.",
            "backToAttributes": "Voltar para Atributos",
            "overview": "Visão geral",
            "fallbackOverview": "Esta raça define identidade base, acesso a subraças e limites de progressão.",
            "adjustments": "Ajustes de atributo",
            "classLimits": "Limites de nível por classe",
            "classPoints": "Pontos de classe",
            "budget": "Orçamento de pontos de classe",
            "languages": "Idiomas",
            "standardAbilities": "Habilidades padrão",
            "benefits": "Habilidades compráveis",
            "penalties": "Penalidades",
            "ability": "Habilidade",
            "cost": "Custo",
            "none": "Nenhuma habilidade cadastrada.",
            "viewCosts": "Ver custos e habilidades",
            "backToRaces": "Voltar para raças",
        },
        "en": {
            "title": "Races",
            "description": "Explore each race and subrace with practical character creation details.",
            "badge": "Character options",
            "subraces": "Subraces",
            "cpCost": "CP Cost",
            "fallbackRaceDesc": "Core race with unique identity and progression impact.",
            "fallbackSubraceDesc": "Subrace variation with specific traits and playstyle trade-offs.",
            "backToAttributes": "Back to Attributes",
            "overview": "Overview",
            "fallbackOverview": "This race defines baseline identity, subrace access, and progression constraints.",
            "adjustments": "Attribute adjustments",
            "classLimits": "Class level limits",
            "classPoints": "Class points",
            "budget": "Class point budget",
            "languages": "Languages",
            "standardAbilities": "Standard abilities",
            "benefits": "Purchasable abilities",
            "penalties": "Penalties",
            "ability": "Ability",
            "cost": "Cost",
            "none": "No abilities registered.",
            "viewCosts": "View costs and abilities",
            "backToRaces": "Back to races",
        },
    },
}

ATTRIBUTE_DETAIL_UI = {
    "pt": {
        "ui.attributesAndDerived": "Atributos e detalhes",
        "ui.backToAttributes": "Voltar para Atributos",
        "ui.index": "Índice",
        "ui.subattributes": "Subatributos",
        "ui.subattributeItemDetails": "Detalhes dos itens do subatributo",
        "ui.booleanTrue": "Sim",
        "ui.booleanFalse": "Não",
        "ui.explanationFallback": "Indicador mecânico usado para definir efeitos deste "
        "subatributo nas regras.",
    },
    "en": {
        "ui.attributesAndDerived": "Attributes and details",
        "ui.backToAttributes": "Back to Attributes",
        "ui.index": "Index",
        "ui.subattributes": "Subattributes",
        "ui.subattributeItemDetails": "Subattribute item details",
        "ui.booleanTrue": "Yes",
        "ui.booleanFalse": "No",
        "ui.explanationFallback": "Mechanical indicator used to determine this subattribute's "
        "rule effects.",
    },
}


def build_ui_text_entries() -> dict:
    """Every bundled UI string, with the attribute-detail labels derived from the score tables."""
    entries = {namespace: {loc: dict(texts) for loc, texts in by_locale.items()}
               for namespace, by_locale in PUBLIC_UI_TEXTS.items()}
    detail = {}
    for locale, ui_strings in ATTRIBUTE_DETAIL_UI.items():
        texts = {f"label.{k}": v for k, v in SCORE_LABELS[locale].items()}
        texts.update({f"explain.{k}": v for k, v in SCORE_EXPLANATIONS[locale].items()})
        texts.update(ui_strings)
        detail[locale] = texts
    entries["attribute-detail"] = detail
    return entries


def _score(label, low, high, **values):
    return {"scoreLabel": label, "scoreMin": low, "scoreMax": high, **values}


# Each attribute: base (English) text, translations and two sub-attributes.
ATTRIBUTES = [
    {
        "code": "STRENGTH",
        "name": "Strength",
        "translations": {
            "pt": ("Força", "Força representa potência física, impacto em combate corporal e "
                   "capacidade de esforço bruto.",
                   "A Força define o quanto o personagem domina ações físicas intensas, como "
                   "causar dano em combate corpo a corpo, forçar passagens e sustentar esforço "
                   "de carga em situações críticas."),
            "en": ("Strength", "Strength measures physical power, impact potential, and "
                   "performance in feats of force.",
                   "Strength defines how effectively a character applies raw physical force in "
                   "combat, lifting, forcing doors, and other power-based actions."),
        },
        "sub_attributes": [
            {
                "code": "MUSCLE",
                "name": "Muscle",
                "translations": {
                    "pt": ("Musculatura", "Subatributo de força explosiva para impacto físico "
                           "e dano corpo a corpo."),
                    "en": ("Muscle", "Defines applied physical force in melee attacks and "
                           "power-based feats."),
                },
                "scores": [
                    _score("3", 3, 3, attackAdjustment=-3, damageAdjustment=-1, maxPress=10,
                           openDoors="2", bendBarsLiftGatesPercent=0),
                    _score("4-5", 4, 5, attackAdjustment=-2, damageAdjustment=-1, maxPress=25,
                           openDoors="3", bendBarsLiftGatesPercent=0),
                    _score("8-9", 8, 9, attackAdjustment=0, damageAdjustment=0, maxPress=90,
                           openDoors="5", bendBarsLiftGatesPercent=1),
                    _score("16", 16, 16, attackAdjustment=0, damageAdjustment=1, maxPress=195,
                           openDoors="9", bendBarsLiftGatesPercent=10),
                    _score("18", 18, 18, attackAdjustment=1, damageAdjustment=2, maxPress=255,
                           openDoors="11", bendBarsLiftGatesPercent=16),
                ],
            },
            {
                "code": "STAMINA",
                "name": "Stamina",
                "translations": {
                    "pt": ("Vigor", "Subatributo de resistência prolongada e capacidade de carga."),
                    "en": ("Stamina", "Represents sustained endurance and carrying capacity over time."),
                },
                "scores": [
                    _score("3", 3, 3, weightAllowance=5),
                    _score("8-9", 8, 9, weightAllowance=35),
                    _score("16", 16, 16, weightAllowance=70),
                    _score("18", 18, 18, weightAllowance=110),
                ],
            },
        ],
    },
    {
        "code": "CONSTITUTION",
        "name": "Constitution",
        "translations": {
            "pt": ("Constituição", "Constituição mede resistência orgânica, vigor e tolerância "
                   "a desgaste físico.", None),
            "en": ("Constitution", "Constitution represents physical endurance, overall health, "
                   "and resilience under stress.", None),
        },
        "sub_attributes": [
            {
                "code": "HEALTH",
                "name": "Health",
                "translations": {
                    "pt": ("Saúde", "Subatributo ligado à estabilidade corporal e resistência "
                           "a choques fisiológicos."),
                    "en": ("Health", "Relates to bodily stability and resistance to shock and "
                           "harmful effects."),
                },
                "scores": [
                    _score("3", 3, 3, systemShockPercent=35, poisonSaveModifier=0),
                    _score("10", 10, 10, systemShockPercent=75, poisonSaveModifier=0),
                    _score("18", 18, 18, systemShockPercent=99, poisonSaveModifier=0),
                    _score("19", 19, 19, systemShockPercent=99, poisonSaveModifier=1),
                ],
            },
            {
                "code": "FITNESS",
                "name": "Fitness",
                "translations": {
                    "pt": ("Condicionamento", "Subatributo de resistência contínua e "
                           "sustentação física ao longo do tempo."),
                    "en": ("Fitness", "Shows conditioning to absorb damage, fatigue, and "
                           "sustained pressure."),
                },
                "scores": [
                    _score("3", 3, 3, hitPointAdjustmentBase=-2, resurrectionChancePercent=40),
                    _score("7-14", 7, 14, hitPointAdjustmentBase=0, resurrectionChancePercent=80),
                    _score("16", 16, 16, hitPointAdjustmentBase=2, resurrectionChancePercent=96),
                    _score("18", 18, 18, hitPointAdjustmentBase=2, hitPointAdjustmentWarrior=4,
                           resurrectionChancePercent=100),
                ],
            },
        ],
    },
    {
        "code": "DEXTERITY",
        "name": "Dexterity",
        "translations": {
            "pt": ("Destreza", "Destreza expressa coordenação, precisão, agilidade e controle "
                   "de movimento.", None),
            "en": ("Dexterity", "Dexterity defines precision, coordination, reaction time, and "
                   "movement control.", None),
        },
        "sub_attributes": [
            {
                "code": "AIM",
                "name": "Aim",
                "translations": {
                    "pt": ("Mira", "Mede a precisão de golpes e disparos, afetando ataques à distância."),
                    "en": ("Aim", "Measures precision in attacks, especially ranged and targeting actions."),
                },
                "scores": [
                    _score("3", 3, 3, missileAdjustment=-3, pickPocketsPercent=-30, openLocksPercent=-30),
                    _score("9", 9, 9, missileAdjustment=0, pickPocketsPercent=-15, openLocksPercent=-10),
                    _score("16", 16, 16, missileAdjustment=1, pickPocketsPercent=0, openLocksPercent=5),
                    _score("18", 18, 18, missileAdjustment=2, pickPocketsPercent=10, openLocksPercent=15),
                ],
            },
            {
                "code": "BALANCE",
                "name": "Balance",
                "translations": {
                    "pt": ("Equilíbrio", "Reflete controle corporal, agilidade defensiva e "
                           "movimentos seguros."),
                    "en": ("Balance", "Reflects body control, agility, and defensive movement quality."),
                },
                "scores": [
                    _score("3", 3, 3, reactionAdjustment=-3, defensiveAdjustment=4,
                           moveSilentlyPercent=-30, climbWallsPercent=-30),
                    _score("9", 9, 9, reactionAdjustment=0, defensiveAdjustment=0,
                           moveSilentlyPercent=-10, climbWallsPercent=-10),
                    _score("18", 18, 18, reactionAdjustment=2, defensiveAdjustment=-4,
                           moveSilentlyPercent=10, climbWallsPercent=5),
                ],
            },
        ],
    },
    {
        "code": "WISDOM",
        "name": "Wisdom",
        "translations": {
            "pt": ("Sabedoria", "Sabedoria reflete percepção prática, intuição e firmeza mental.", None),
            "en": ("Wisdom", "Wisdom expresses perception, intuition, mental fortitude, and "
                   "practical judgment.", None),
        },
        "sub_attributes": [
            {
                "code": "INTUITION",
                "name": "Intuition",
                "translations": {
                    "pt": ("Intuição", "Abrange percepção de contexto, sensibilidade a riscos e "
                           "leitura de situações."),
                    "en": ("Intuition", "Covers situational awareness, instinct, and risk perception."),
                },
                "scores": [
                    _score("3", 3, 3, bonusSpellsText="—", spellFailurePercent=50),
                    _score("13", 13, 13, bonusSpellsText="1st", spellFailurePercent=0),
                    _score("18", 18, 18, bonusSpellsText="4th", spellFailurePercent=0),
                ],
            },
            {
                "code": "WILLPOWER",
                "name": "Willpower",
                "translations": {
                    "pt": ("Força de Vontade", "Indica firmeza mental para resistir a "
                           "influências mágicas, medo e compulsões."),
                    "en": ("Willpower", "Indicates mental resolve against fear, compulsion, and "
                           "hostile magic."),
                },
                "scores": [
                    _score("3", 3, 3, magicDefenseAdjustment=-3),
                    _score("8-14", 8, 14, magicDefenseAdjustment=0),
                    _score("18", 18, 18, magicDefenseAdjustment=4),
                    _score("19", 19, 19, magicDefenseAdjustment=4, spellImmunityLevel="1st"),
                ],
            },
        ],
    },
    {
        "code": "INTELLIGENCE",
        "name": "Intelligence",
        "translations": {
            "pt": ("Inteligência", "Inteligência representa raciocínio, aprendizado e "
                   "profundidade de conhecimento.", None),
            "en": ("Intelligence", "Intelligence reflects reasoning, learning capacity, memory, "
                   "and technical understanding.", None),
        },
        "sub_attributes": [
            {
                "code": "REASON",
                "name": "Reason",
                "translations": {
                    "pt": ("Raciocínio", "Representa análise lógica, compreensão técnica e "
                           "solução racional de problemas."),
                    "en": ("Reason", "Represents logical analysis and problem-solving capability."),
                },
                "scores": [
                    _score("9", 9, 9, maxWizardSpellLevel="4th", maxSpellsPerLevel="6"),
                    _score("13", 13, 13, maxWizardSpellLevel="6th", maxSpellsPerLevel="9"),
                    _score("18", 18, 18, maxWizardSpellLevel="9th", maxSpellsPerLevel="18"),
                ],
            },
            {
                "code": "KNOWLEDGE",
                "name": "Knowledge",
                "translations": {
                    "pt": ("Conhecimento", "Expressa repertório adquirido, estudo e facilidade "
                           "de aprender novos conteúdos."),
                    "en": ("Knowledge", "Expresses learned repertoire and ability to acquire "
                           "new information."),
                },
                "scores": [
                    _score("9", 9, 9, bonusProficiencies=2, learnSpellPercent=35),
                    _score("13", 13, 13, bonusProficiencies=3, learnSpellPercent=55),
                    _score("18", 18, 18, bonusProficiencies=7, learnSpellPercent=85),
                ],
            },
        ],
    },
    {
        "code": "CHARISMA",
        "name": "Charisma",
        "translations": {
            "pt": ("Carisma", "Carisma define presença social, influência e poder de liderança.", None),
            "en": ("Charisma", "Charisma measures presence, social influence, and leadership "
                   "potential.", None),
        },
        "sub_attributes": [
            {
                "code": "APPEARANCE",
                "name": "Appearance",
                "translations": {
                    "pt": ("Aparência", "Afeta primeira impressão e reações sociais baseadas "
                           "em presença e imagem."),
                    "en": ("Appearance", "Affects first impressions and social reaction to your presence."),
                },
                "scores": [
                    _score("3", 3, 3, reactionAdjustment=-5),
                    _score("9-11", 9, 11, reactionAdjustment=0),
                    _score("18", 18, 18, reactionAdjustment=7),
                ],
            },
            {
                "code": "LEADERSHIP",
                "name": "Leadership",
                "translations": {
                    "pt": ("Liderança", "Mede capacidade de coordenar aliados, conquistar "
                           "lealdade e manter autoridade."),
                    "en": ("Leadership", "Measures command, loyalty building, and group coordination."),
                },
                "scores": [
                    _score("3", 3, 3, loyaltyBase=-6, maxHenchmen=1),
                    _score("9-11", 9, 11, loyaltyBase=0, maxHenchmen=4),
                    _score("18", 18, 18, loyaltyBase=8, maxHenchmen=15),
                ],
            },
        ],
    },
]


def _race(name, budget, adjustments=None, limits=None, **extra):
    values = {"name": name, "class_point_budget": budget}
    values.update(adjustments or {})
    values.update(limits or {})
    values.update(extra)
    return values


RACES = [
    {
        "values": _race(
            "Dwarf",
            45,
            {"constitution_adjustment": 1, "charisma_adjustment": -1},
            {"max_level_fighter": "15", "max_level_thief": "12", "max_level_cleric": "10"},
            description="Short, stocky folk of the mountains and the deep halls.",
        ),
        "translations": {
            "pt": {
                "name": "Anão",
                "description": "Povo baixo e robusto das montanhas e dos salões profundos.",
                "full_description": "Os anões são uma raça baixa e robusta, com altura média em "
                "torno de 1,22 m a 1,37 m. Vivem por cerca de 350 anos e costumam ser sérios, "
                "reservados e obstinados.",
            },
            "en": {
                "name": "Dwarf",
                "description": "Short, stocky folk of the mountains and the deep halls.",
                "full_description": "Dwarves are a short, stocky people, averaging roughly 4 to "
                "4 1/2 feet in height. Their natural life span is around 350 years, and they "
                "are usually serious, reserved and stubborn.",
            },
        },
        "abilities": [
            {"name": "Infravision, 60'", "cost": 10, "description": "Dwarves have infravision to 60 feet.",
             "pt": "A infravisão tem alcance de 60 pés, permitindo detectar padrões de calor no escuro."},
            {"name": "Melee Combat Bonuses", "cost": 10,
             "description": "+1 attack vs. orcs, half-orcs, goblins and hobgoblins; ogres, "
             "trolls and giants suffer -4 to hit dwarves.",
             "pt": "+1 de ataque contra orcs, meio-orcs, goblins e hobgoblins; ogros, trolls e "
             "gigantes sofrem -4 para acertar anões."},
            {"name": "Saving Throw Bonuses", "cost": 10,
             "description": "Bonuses to saves vs. poison, rods, wands and spells based on "
             "Constitution/Health.",
             "pt": "Bônus em testes contra veneno, bastões, varinhas e magias de acordo com "
             "Constituição/Health."},
            {"name": "Mining Detection Abilities", "cost": 10,
             "description": "By concentrating for one round the dwarf can judge depth, grade "
             "and shifting walls underground.",
             "pt": "Concentrando-se por 1 rodada, o anão estima profundidade, declives e paredes "
             "móveis no subterrâneo."},
            {"name": "Axe Bonus", "cost": 5, "description": "+1 to attack rolls with hand or battle axes.",
             "pt": "+1 nas jogadas de ataque com machado de mão ou machado de batalha."},
            {"name": "Hit Point Bonus", "cost": 10,
             "description": "One additional hit point each time a new level is attained.",
             "pt": "O anão ganha +1 ponto de vida cada vez que sobe de nível."},
            {"name": "Hill Dwarf Water Unease", "cost": 0, "kind": "PENALTY",
             "description": "-2 to reaction rolls when in or adjacent to rivers, lakes and seas.",
             "pt": "Penalidade de -2 em reações quando estão em rios, lagos ou mares, ou "
             "adjacentes a eles."},
        ],
        "sub_races": [
            {
                "name": "Hill Dwarf",
                "character_point_cost": 40,
                "languages": "Common, dwarf, gnome, goblin, kobold, orc",
                "description": "The most common dwarves, living in hill country.",
                "pt": {"name": "Anão das Colinas", "description": "Os anões mais comuns, que "
                       "vivem em regiões de colinas."},
                "standard": [
                    "Infravision, 60'",
                    "Melee Combat Bonuses",
                    "Mining Detection Abilities",
                    "Saving Throw Bonuses",
                    "Hill Dwarf Water Unease",
                ],
            },
            {
                "name": "Mountain Dwarf",
                "character_point_cost": 45,
                "languages": "Common, dwarf, gnome, goblin, kobold, orc",
                "description": "Taller dwarves dwelling deep inside mountains.",
                "pt": {"name": "Anão das Montanhas", "description": "Anões mais altos que vivem "
                       "no interior das montanhas."},
                "standard": [],
            },
        ],
    },
    {
        "values": _race(
            "Elf",
            45,
            {"dexterity_adjustment": 1, "constitution_adjustment": -1},
            {
                "max_level_fighter": "12",
                "max_level_ranger": "15",
                "max_level_thief": "12",
                "max_level_wizard": "15",
                "max_level_cleric": "12",
            },
            description="Graceful, long-lived folk of the forests.",
        ),
        "translations": {
            "pt": {
                "name": "Elfo",
                "description": "Povo gracioso e longevo das florestas.",
                "full_description": "Os elfos tendem a ser mais altos que os anões, e mais baixos "
                "e esguios que os humanos. Seus traços são angulares e bem definidos.",
            },
            "en": {
                "name": "Elf",
                "description": "Graceful, long-lived folk of the forests.",
                "full_description": "Elves tend to be taller than dwarves, and shorter and "
                "slimmer than humans. Their features are angular and finely chiseled.",
            },
        },
        "abilities": [
            {"name": "Infravision, 60'", "cost": 10, "description": "Infravision to 60 feet.",
             "pt": "A infravisão tem alcance de 60 pés, permitindo percepção por contraste térmico no escuro."},
            {"name": "Bow Bonus", "cost": 5, "description": "+1 on attack rolls with short or long bows.",
             "pt": "+1 nas jogadas de ataque ao usar arcos curtos ou longos."},
            {"name": "Resistance", "cost": 5,
             "description": "90% resistance against sleep and charm-related magical effects.",
             "pt": "90% de resistência contra efeitos mágicos de sono e encantamento."},
            {"name": "Secret Doors", "cost": 5,
             "description": "Chance to notice concealed and secret doors when passing or searching.",
             "pt": "Chance de notar portas escondidas e secretas ao passar ou procurar."},
            {"name": "Stealth", "cost": 10,
             "description": "When alone and not in metal armor, opponents suffer -4 to surprise.",
             "pt": "Quando sozinho e sem armadura metálica, oponentes sofrem -4 na surpresa."},
            {"name": "High Elf Illusion Credulity Penalty", "cost": 0, "kind": "PENALTY",
             "description": "-2 when attempting to disbelieve a true illusion.",
             "pt": "Penalidade de -2 ao tentar desacreditar uma ilusão verdadeira."},
        ],
        "sub_races": [
            {
                "name": "High Elf",
                "character_point_cost": 40,
                "languages": "Common, elf, gnome, halfling, goblin, hobgoblin, orc, gnoll",
                "description": "The most common elves, open and trusting.",
                "pt": {"name": "Alto Elfo", "description": "Os elfos mais comuns, abertos e confiantes."},
                "standard": [
                    "Bow Bonus",
                    "Infravision, 60'",
                    "Resistance",
                    "Secret Doors",
                    "Stealth",
                    "High Elf Illusion Credulity Penalty",
                ],
            },
        ],
    },
    {
        "values": _race(
            "Human",
            10,
            limits={
                "max_level_fighter": "U",
                "max_level_paladin": "U",
                "max_level_ranger": "U",
                "max_level_thief": "U",
                "max_level_bard": "U",
                "max_level_wizard": "U",
                "max_level_illusionist": "U",
                "max_level_cleric": "U",
                "max_level_druid": "U",
            },
            description="Adaptable and ambitious, the most widespread race.",
        ),
        "translations": {
            "pt": {
                "name": "Humano",
                "description": "Adaptáveis e ambiciosos, a raça mais difundida.",
            },
        },
        "abilities": [
            {"name": "Experience Bonus", "cost": 10, "description": "+5% experience points earned.",
             "pt": "+5% de pontos de experiência recebidos."},
            {"name": "Hit Point Bonus", "cost": 10,
             "description": "One additional hit point at 1st level.",
             "pt": "Um ponto de vida adicional no 1º nível."},
        ],
        "sub_races": [],
    },
]


def seed_ui_texts(ui_text_service) -> int:
    count = ui_text_service.seed(build_ui_text_entries())
    log.info("Upserted %d UI text rows.", count)
    return count


def seed_attributes(storage) -> int:
    """Upserts the core attributes, their sub-attributes, translations and score tables."""
    count = 0
    for order, attribute in enumerate(ATTRIBUTES):
        en_name, en_desc, en_full = attribute["translations"]["en"]
        attribute_id = storage.upsert_attribute(
            attribute["code"], attribute["name"], en_desc, en_full, order
        )
        for locale, (name, description, full_description) in attribute["translations"].items():
            storage.upsert_attribute_translation(
                attribute_id,
                locale,
                {"name": name, "description": description, "full_description": full_description},
            )
        for sub_order, sub in enumerate(attribute["sub_attributes"]):
            sub_en = sub["translations"]["en"]
            sub_id = storage.upsert_sub_attribute(
                attribute_id, sub["code"], sub["name"], sub_en[1], None, sub_order
            )
            for locale, (name, description) in sub["translations"].items():
                storage.upsert_sub_attribute_translation(
                    sub_id, locale, {"name": name, "description": description}
                )
            storage.replace_sub_attribute_scores(sub_id, sub["scores"])
        count += 1
    log.info("Seeded %d attributes.", count)
    return count


def seed_races(storage) -> int:
    """Upserts the bundled races with their abilities, subraces and standard packages."""
    for race in RACES:
        race_id = storage.upsert_race(race["values"])
        for locale, values in race["translations"].items():
            storage.upsert_race_translation(race_id, locale, values)

        ability_ids = {}
        for ability in race["abilities"]:
            ability_id = storage.upsert_race_ability(
                race_id,
                {
                    "name": ability["name"],
                    "kind": ability.get("kind", "BENEFIT"),
                    "cost": ability["cost"],
                    "description": ability["description"],
                },
            )
            storage.upsert_race_ability_translation(
                ability_id, "pt", {"description": ability["pt"]}
            )
            ability_ids[ability["name"]] = ability_id

        for sub in race["sub_races"]:
            sub_id = storage.upsert_sub_race(race_id, sub)
            storage.upsert_sub_race_translation(sub_id, "pt", sub["pt"])
            for ability_name in sub["standard"]:
                storage.link_standard_ability(sub_id, ability_ids[ability_name])
    log.info("Seeded %d races.", len(RACES))
    return len(RACES)
