"""Fixed card catalogs offered in run drafts.

Order matters: draws index into these tuples, so reordering or inserting
cards changes every seeded draft (and breaks client replay validation).
"""

from __future__ import annotations

from buildarena.runs.schemas import ChoiceItem, ChoiceType

MAX_SLOTS = 10

START_HP = 100
START_POWER = 12
START_ECONOMY = 0

TRAITS: tuple[ChoiceItem, ...] = (
    ChoiceItem(id="berserk", label="Berserk", power=7),
    ChoiceItem(id="guardian", label="Guardian", power=5),
    ChoiceItem(id="arcane", label="Arcane", power=6),
    ChoiceItem(id="swift", label="Swift", power=4),
    ChoiceItem(id="vampiric", label="Vampiric", power=6),
    ChoiceItem(id="fortified", label="Fortified", power=5),
)

UNITS: tuple[ChoiceItem, ...] = (
    ChoiceItem(id="orb_knight", label="Orb Knight", power=8),
    ChoiceItem(id="ember_mage", label="Ember Mage", power=9),
    ChoiceItem(id="void_hunter", label="Void Hunter", power=10),
    ChoiceItem(id="crystal_tank", label="Crystal Tank", power=11),
    ChoiceItem(id="storm_scout", label="Storm Scout", power=7),
)

MODIFIERS: tuple[ChoiceItem, ...] = (
    ChoiceItem(id="hp_boost", label="+12 HP", power=2, hp=12),
    ChoiceItem(id="econ_boost", label="+3 Economy", power=1, economy=3),
    ChoiceItem(id="crit_core", label="Crit Core", power=5),
    ChoiceItem(id="stability", label="Stability Matrix", power=4),
)

# Draft slot order: slot 0 is always a trait, 1 a unit, 2 a modifier.
DRAFT_SLOTS: tuple[tuple[ChoiceType, tuple[ChoiceItem, ...]], ...] = (
    ("trait", TRAITS),
    ("unit", UNITS),
    ("modifier", MODIFIERS),
)
