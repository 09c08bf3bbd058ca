"""
Data models for compendium content.

These models represent the seven categories of reference entries held in a
compendium document (items, spells, monsters, classes, races, feats and
backgrounds). Each entry model declares the XML tags it is read from and
written to, so the decoder and encoder share one field order per category.
"""

import re
from enum import Enum
from typing import Annotated, ClassVar, Iterator

from pydantic import AfterValidator, BaseModel, Field, computed_field, field_validator


class CompendiumError(Exception):
    """Base class for all compendium errors."""
    pass


# =============================================================================
# Enums and Constants
# =============================================================================

class Category(str, Enum):
    """The fixed partitions of a compendium, in document order."""
    ITEMS = "items"
    SPELLS = "spells"
    MONSTERS = "monsters"
    CLASSES = "classes"
    RACES = "races"
    FEATS = "feats"
    BACKGROUNDS = "backgrounds"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def element_tag(self) -> str:
        """XML element name of a single entry in this category."""
        return _ELEMENT_TAGS[self]


_DISPLAY_NAMES = {
    Category.ITEMS: "Equipment",
    Category.SPELLS: "Spells",
    Category.MONSTERS: "Bestiary",
    Category.CLASSES: "Classes",
    Category.RACES: "Races",
    Category.FEATS: "Feats",
    Category.BACKGROUNDS: "Backgrounds",
}

_ELEMENT_TAGS = {
    Category.ITEMS: "item",
    Category.SPELLS: "spell",
    Category.MONSTERS: "monster",
    Category.CLASSES: "class",
    Category.RACES: "race",
    Category.FEATS: "feat",
    Category.BACKGROUNDS: "background",
}

# Residual pass-through keys become element names on export
_XML_NAME_RE = re.compile(r"^[^\W\d][\w.-]*$")

# Characters outside the XML 1.0 Char production cannot appear in a document
_XML_INVALID_CHAR_RE = re.compile(
    "[^\u0009\u000a\u000d\u0020-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]"
)


def check_xml_text(value: str) -> str:
    """Reject text that cannot be written into an XML 1.0 document."""
    match = _XML_INVALID_CHAR_RE.search(value)
    if match:
        raise ValueError(
            f"Character U+{ord(match.group()):04X} at position {match.start()} "
            "is not allowed in XML text"
        )
    return value


XmlText = Annotated[str, AfterValidator(check_xml_text)]


# =============================================================================
# Nested Models
# =============================================================================

class Trait(BaseModel):
    """A named text block, used for monster traits/actions, racial and background traits."""
    name: XmlText = Field(default="", description="Trait name")
    text: XmlText = Field(default="", description="Trait description")
    attack: list[XmlText] | None = Field(
        default=None,
        description="Attack-mode tokens; None means no attack data, [] means explicitly none",
    )

    @field_validator("attack")
    @classmethod
    def drop_blank_attack(cls, value: list[str] | None) -> list[str] | None:
        # A lone empty token is written as an empty <attack/> element
        if value == [""]:
            return []
        return value


class Feature(BaseModel):
    """A class feature gained at some level."""
    name: XmlText = Field(default="", description="Feature name")
    text: XmlText = Field(default="", description="Feature description")
    optional: bool = Field(default=False, description="Whether the feature is an optional choice")


class LevelInfo(BaseModel):
    """Features gained at one class level."""
    level: XmlText = Field(default="", description="Level number, kept as text")
    features: list[Feature] = Field(default_factory=list)


def compose_trait_text(traits: list[Trait]) -> str:
    """Render traits as the canonical display body: ``**<name>**\\n<text>`` blocks."""
    return "\n\n".join(f"**{trait.name}**\n{trait.text}" for trait in traits)


def compose_level_text(levels: list[LevelInfo]) -> str:
    """Flatten class levels in level then feature order."""
    return "\n\n".join(
        f"**{feature.name} (Level {level.level})**\n{feature.text}"
        for level in levels
        for feature in level.features
    )


# =============================================================================
# Base Models
# =============================================================================

class CompendiumEntry(BaseModel):
    """Base class for all compendium entries.

    ``name`` is the unique key of an entry within its category, compared
    case-insensitively. Subclasses provide ``text`` either as a stored field
    or, for categories with nested blocks, as derived text.
    """
    name: XmlText = Field(default="", description="Display name, unique per category")

    CATEGORY: ClassVar[Category]
    XML_FIELDS: ClassVar[tuple[tuple[str, str], ...]] = ()
    TRAIT_LISTS: ClassVar[tuple[tuple[str, str], ...]] = ()

    @property
    def name_key(self) -> str:
        """Case-insensitive key used for uniqueness checks and merges."""
        return self.name.lower()

    def field_values(self) -> Iterator[tuple[str, str]]:
        """Yield ``(xml_tag, value)`` for each known scalar field, in wire order."""
        for tag, attribute in self.XML_FIELDS:
            yield tag, getattr(self, attribute)


class SimpleEntry(CompendiumEntry):
    """Entry whose body is stored literally, with pass-through for unknown tags."""
    text: XmlText = Field(default="", description="Descriptive body")
    extra_fields: dict[str, XmlText] = Field(
        default_factory=dict,
        description="Unknown child tags (lower-cased) carried through import and export",
    )

    @field_validator("extra_fields")
    @classmethod
    def check_extra_keys(cls, value: dict[str, str]) -> dict[str, str]:
        for key in value:
            if not _XML_NAME_RE.match(key):
                raise ValueError(f"Invalid field name {key!r}: must be a valid XML element name")
        return value


# =============================================================================
# Simple Categories
# =============================================================================

class Item(SimpleEntry):
    """Equipment: weapons, armor, gear and magic items."""
    CATEGORY: ClassVar[Category] = Category.ITEMS
    XML_FIELDS: ClassVar[tuple[tuple[str, str], ...]] = (
        ("name", "name"),
        ("type", "type"),
        ("magic", "magic"),
        ("detail", "detail"),
        ("weight", "weight"),
        ("value", "value"),
        ("dmg1", "dmg1"),
        ("dmg2", "dmg2"),
        ("dmgType", "dmg_type"),
        ("property", "properties"),
        ("range", "range"),
        ("ac", "ac"),
        ("strength", "strength"),
        ("text", "text"),
    )

    type: XmlText = Field(default="", description="Item type code (e.g. 'M', 'LA', 'G')")
    magic: XmlText = ""
    detail: XmlText = Field(default="", description="Rarity and attunement line")
    weight: XmlText = ""
    value: XmlText = Field(default="", description="Cost in gold pieces")
    dmg1: XmlText = Field(default="", description="One-handed damage dice")
    dmg2: XmlText = Field(default="", description="Versatile damage dice")
    dmg_type: XmlText = ""
    properties: XmlText = Field(default="", description="Weapon property codes")
    range: XmlText = ""
    ac: XmlText = ""
    strength: XmlText = Field(default="", description="Strength requirement")


class Spell(SimpleEntry):
    """A spell."""
    CATEGORY: ClassVar[Category] = Category.SPELLS
    XML_FIELDS: ClassVar[tuple[tuple[str, str], ...]] = (
        ("name", "name"),
        ("level", "level"),
        ("school", "school"),
        ("ritual", "ritual"),
        ("time", "time"),
        ("range", "range"),
        ("components", "components"),
        ("duration", "duration"),
        ("classes", "classes"),
        ("text", "text"),
    )

    level: XmlText = Field(default="", description="Spell level, '0' for cantrips")
    school: XmlText = ""
    ritual: XmlText = ""
    time: XmlText = Field(default="", description="Casting time")
    range: XmlText = ""
    components: XmlText = ""
    duration: XmlText = ""
    classes: XmlText = Field(default="", description="Comma-separated class list")


class Feat(SimpleEntry):
    """A feat."""
    CATEGORY: ClassVar[Category] = Category.FEATS
    XML_FIELDS: ClassVar[tuple[tuple[str, str], ...]] = (
        ("name", "name"),
        ("prerequisite", "prerequisite"),
        ("text", "text"),
    )

    prerequisite: XmlText = ""


# =============================================================================
# Structured Categories
# =============================================================================

class Monster(CompendiumEntry):
    """A creature stat block."""
    CATEGORY: ClassVar[Category] = Category.MONSTERS
    XML_FIELDS: ClassVar[tuple[tuple[str, str], ...]] = (
        ("name", "name"),
        ("size", "size"),
        ("type", "type"),
        ("alignment", "alignment"),
        ("ac", "armor_class"),
        ("hp", "hit_points"),
        ("speed", "speed"),
        ("str", "strength"),
        ("dex", "dexterity"),
        ("con", "constitution"),
        ("int", "intelligence"),
        ("wis", "wisdom"),
        ("cha", "charisma"),
        ("save", "saving_throws"),
        ("skill", "skills"),
        ("resist", "resistances"),
        ("vulnerable", "vulnerabilities"),
        ("immune", "immunities"),
        ("conditionImmune", "condition_immunities"),
        ("senses", "senses"),
        ("passive", "passive_perception"),
        ("languages", "languages"),
        ("cr", "challenge_rating"),
        ("spells", "spells"),
        ("environment", "environment"),
    )
    TRAIT_LISTS: ClassVar[tuple[tuple[str, str], ...]] = (
        ("trait", "traits"),
        ("action", "actions"),
        ("legendary", "legendary_actions"),
        ("reaction", "reactions"),
    )

    size: XmlText = Field(default="", description="Size code (e.g. 'M', 'L')")
    type: XmlText = Field(default="", description="Creature type")
    alignment: XmlText = ""
    armor_class: XmlText = ""
    hit_points: XmlText = ""
    speed: XmlText = ""
    strength: XmlText = ""
    dexterity: XmlText = ""
    constitution: XmlText = ""
    intelligence: XmlText = ""
    wisdom: XmlText = ""
    charisma: XmlText = ""
    saving_throws: XmlText = ""
    skills: XmlText = ""
    resistances: XmlText = ""
    vulnerabilities: XmlText = ""
    immunities: XmlText = ""
    condition_immunities: XmlText = ""
    senses: XmlText = ""
    passive_perception: XmlText = ""
    languages: XmlText = ""
    challenge_rating: XmlText = ""
    spells: XmlText = Field(default="", description="Spellcasting summary")
    environment: XmlText = ""
    traits: list[Trait] = Field(default_factory=list)
    actions: list[Trait] = Field(default_factory=list)
    legendary_actions: list[Trait] = Field(default_factory=list)
    reactions: list[Trait] = Field(default_factory=list)

    @computed_field
    @property
    def text(self) -> str:
        return compose_trait_text(
            [*self.traits, *self.actions, *self.legendary_actions, *self.reactions]
        )


class Race(CompendiumEntry):
    """A playable race."""
    CATEGORY: ClassVar[Category] = Category.RACES
    XML_FIELDS: ClassVar[tuple[tuple[str, str], ...]] = (
        ("name", "name"),
        ("size", "size"),
        ("speed", "speed"),
        ("ability", "ability"),
    )
    TRAIT_LISTS: ClassVar[tuple[tuple[str, str], ...]] = (
        ("trait", "traits"),
    )

    size: XmlText = ""
    speed: XmlText = ""
    ability: XmlText = Field(default="", description="Ability score increase summary")
    traits: list[Trait] = Field(default_factory=list)

    @computed_field
    @property
    def text(self) -> str:
        return compose_trait_text(self.traits)


class Background(CompendiumEntry):
    """A character background."""
    CATEGORY: ClassVar[Category] = Category.BACKGROUNDS
    XML_FIELDS: ClassVar[tuple[tuple[str, str], ...]] = (
        ("name", "name"),
        ("proficiency", "proficiency"),
    )
    TRAIT_LISTS: ClassVar[tuple[tuple[str, str], ...]] = (
        ("trait", "traits"),
    )

    proficiency: XmlText = Field(default="", description="Starting proficiency summary")
    traits: list[Trait] = Field(default_factory=list)

    @computed_field
    @property
    def text(self) -> str:
        return compose_trait_text(self.traits)


class DndClass(CompendiumEntry):
    """A character class with its level progression."""
    CATEGORY: ClassVar[Category] = Category.CLASSES
    XML_FIELDS: ClassVar[tuple[tuple[str, str], ...]] = (
        ("name", "name"),
        ("hd", "hit_die"),
        ("proficiency", "proficiency"),
        ("spellAbility", "spell_ability"),
    )

    hit_die: XmlText = Field(default="", description="Hit die size (e.g. '8')")
    proficiency: XmlText = Field(default="", description="Proficiency summary")
    spell_ability: XmlText = Field(default="", description="Spellcasting ability, if any")
    levels: list[LevelInfo] = Field(default_factory=list, description="Autolevel progression")

    @computed_field
    @property
    def text(self) -> str:
        return compose_level_text(self.levels)


ENTRY_MODELS: dict[Category, type[CompendiumEntry]] = {
    Category.ITEMS: Item,
    Category.SPELLS: Spell,
    Category.MONSTERS: Monster,
    Category.CLASSES: DndClass,
    Category.RACES: Race,
    Category.FEATS: Feat,
    Category.BACKGROUNDS: Background,
}

SIMPLE_CATEGORIES = frozenset({Category.ITEMS, Category.SPELLS, Category.FEATS})


# =============================================================================
# Collection
# =============================================================================

class CompendiumCollection(BaseModel):
    """All entries of a compendium, partitioned by category.

    Collections are treated as values: operations that change content return
    a new collection built with ``with_entries`` instead of mutating lists.
    """
    items: list[Item] = Field(default_factory=list)
    spells: list[Spell] = Field(default_factory=list)
    monsters: list[Monster] = Field(default_factory=list)
    classes: list[DndClass] = Field(default_factory=list)
    races: list[Race] = Field(default_factory=list)
    feats: list[Feat] = Field(default_factory=list)
    backgrounds: list[Background] = Field(default_factory=list)

    def entries(self, category: Category | str) -> list[CompendiumEntry]:
        return getattr(self, Category(category).value)

    def with_entries(
        self,
        category: Category | str,
        entries: list[CompendiumEntry],
    ) -> "CompendiumCollection":
        """Return a copy of this collection with one category replaced."""
        return self.model_copy(update={Category(category).value: list(entries)})

    def counts(self) -> dict[Category, int]:
        return {category: len(self.entries(category)) for category in Category}

    def non_empty_categories(self) -> list[Category]:
        return [category for category in Category if self.entries(category)]

    def total_entries(self) -> int:
        return sum(self.counts().values())

    def is_empty(self) -> bool:
        return self.total_entries() == 0
