"""
Unit tests for compendium data models.

Tests cover:
- Category ordering, display names and element tags
- Derived text for monsters, races, backgrounds and classes
- Pass-through field validation on simple entries
- Rejection of characters XML 1.0 cannot carry
- CompendiumCollection helpers
"""

import pytest
from pydantic import ValidationError

from compendium_keeper.models import (
    Background,
    Category,
    CompendiumCollection,
    DndClass,
    Feat,
    Feature,
    Item,
    LevelInfo,
    Monster,
    Race,
    Spell,
    Trait,
    ENTRY_MODELS,
    compose_trait_text,
)


class TestCategory:
    """Tests for the Category enum."""

    def test_fixed_order(self) -> None:
        assert [c.value for c in Category] == [
            "items", "spells", "monsters", "classes", "races", "feats", "backgrounds",
        ]

    def test_display_names(self) -> None:
        assert Category.ITEMS.display_name == "Equipment"
        assert Category.MONSTERS.display_name == "Bestiary"
        assert Category.FEATS.display_name == "Feats"

    def test_element_tags(self) -> None:
        assert Category.CLASSES.element_tag == "class"
        assert Category.BACKGROUNDS.element_tag == "background"

    def test_from_string(self) -> None:
        assert Category("spells") is Category.SPELLS

    def test_every_category_has_a_model(self) -> None:
        assert set(ENTRY_MODELS) == set(Category)
        for category, model in ENTRY_MODELS.items():
            assert model.CATEGORY == category


class TestDerivedText:
    """Tests for text synthesized from nested blocks."""

    def test_monster_single_trait(self) -> None:
        monster = Monster(
            name="Wolf",
            traits=[Trait(name="Keen Smell", text="Advantage on smell checks.")],
        )
        assert monster.text == "**Keen Smell**\nAdvantage on smell checks."

    def test_monster_block_order(self) -> None:
        monster = Monster(
            name="Dragon",
            reactions=[Trait(name="Tail", text="R")],
            legendary_actions=[Trait(name="Wing", text="L")],
            actions=[Trait(name="Bite", text="A")],
            traits=[Trait(name="Amphibious", text="T")],
        )
        assert monster.text == (
            "**Amphibious**\nT\n\n**Bite**\nA\n\n**Wing**\nL\n\n**Tail**\nR"
        )

    def test_text_regenerates_after_edit(self) -> None:
        monster = Monster(name="Wolf", traits=[Trait(name="Keen Smell", text="Sniff.")])
        before = monster.text
        monster.traits.append(Trait(name="Pack Tactics", text="Advantage with allies."))
        assert monster.text == before + "\n\n**Pack Tactics**\nAdvantage with allies."
        monster.traits.pop()
        assert monster.text == before

    def test_text_is_not_assignable_input(self) -> None:
        monster = Monster(name="Wolf", text="ignored")
        assert monster.text == ""

    def test_race_and_background(self) -> None:
        traits = [Trait(name="A", text="one"), Trait(name="B", text="two")]
        assert Race(name="Elf", traits=traits).text == "**A**\none\n\n**B**\ntwo"
        assert Background(name="Sage", traits=traits).text == compose_trait_text(traits)

    def test_class_levels(self) -> None:
        dnd_class = DndClass(
            name="Fighter",
            levels=[
                LevelInfo(level="1", features=[
                    Feature(name="Second Wind", text="Heal."),
                    Feature(name="Fighting Style", text="Pick one.", optional=True),
                ]),
                LevelInfo(level="2", features=[Feature(name="Action Surge", text="Act.")]),
            ],
        )
        assert dnd_class.text == (
            "**Second Wind (Level 1)**\nHeal.\n\n"
            "**Fighting Style (Level 1)**\nPick one.\n\n"
            "**Action Surge (Level 2)**\nAct."
        )

    def test_empty_nested_lists(self) -> None:
        assert Monster(name="Blob").text == ""
        assert DndClass(name="Commoner").text == ""

    def test_derived_text_in_dump(self) -> None:
        race = Race(name="Elf", traits=[Trait(name="Trance", text="Meditate.")])
        assert race.model_dump()["text"] == "**Trance**\nMeditate."


class TestSimpleEntries:
    """Tests for items, spells and feats."""

    def test_defaults_are_empty_strings(self) -> None:
        item = Item(name="Rope")
        assert item.text == ""
        assert item.dmg_type == ""
        assert item.extra_fields == {}

    def test_text_is_stored(self) -> None:
        spell = Spell(name="Light", text="Touch an object.")
        assert spell.text == "Touch an object."

    def test_extra_fields_accept_xml_names(self) -> None:
        feat = Feat(name="Alert", extra_fields={"modifier": "+5", "source_book": "PHB"})
        assert feat.extra_fields["modifier"] == "+5"

    @pytest.mark.parametrize("key", ["", "two words", "1st", "<tag>"])
    def test_extra_fields_reject_invalid_names(self, key: str) -> None:
        with pytest.raises(ValidationError):
            Item(name="Rope", extra_fields={key: "x"})

    def test_name_key_is_case_insensitive(self) -> None:
        assert Item(name="Dagger").name_key == Item(name="DAGGER").name_key

    def test_field_values_follow_wire_order(self) -> None:
        item = Item(name="Longsword", dmg_type="S", properties="V")
        tags = [tag for tag, _ in item.field_values()]
        assert tags[0] == "name"
        assert tags[-1] == "text"
        assert dict(item.field_values())["dmgType"] == "S"
        assert dict(item.field_values())["property"] == "V"


class TestXmlText:
    """Text fields only accept characters an XML 1.0 document can carry."""

    @pytest.mark.parametrize("build", [
        lambda: Item(name="Bad\x01Name"),
        lambda: Spell(name="Light", text="Ring\x07"),
        lambda: Feat(name="Alert", extra_fields={"note": "\x0b"}),
        lambda: Monster(name="Wolf", challenge_rating="1\x00"),
        lambda: Trait(name="Bite", attack=["Bite", "\x1f"]),
        lambda: Feature(name="Surge\ufffe"),
        lambda: LevelInfo(level="\ud800"),
    ])
    def test_rejects_invalid_characters(self, build) -> None:
        with pytest.raises(ValidationError):
            build()

    def test_accepts_whitespace_and_non_ascii(self) -> None:
        item = Item(name="Café 🐉", text="Line one\n\tLine two\r\n")
        assert item.name == "Café 🐉"

    def test_lone_blank_attack_token_is_empty_list(self) -> None:
        assert Trait(name="Slam", attack=[""]).attack == []
        assert Trait(name="Spit", attack=["", ""]).attack == ["", ""]


class TestCompendiumCollection:
    """Tests for the collection container."""

    def test_default_is_empty(self) -> None:
        collection = CompendiumCollection()
        assert collection.is_empty()
        assert collection.non_empty_categories() == []
        assert all(count == 0 for count in collection.counts().values())

    def test_entries_by_category(self) -> None:
        collection = CompendiumCollection(spells=[Spell(name="Light")])
        assert collection.entries(Category.SPELLS)[0].name == "Light"
        assert collection.entries("spells")[0].name == "Light"

    def test_unknown_category_raises(self) -> None:
        with pytest.raises(ValueError):
            CompendiumCollection().entries("vehicles")

    def test_with_entries_returns_new_collection(self) -> None:
        original = CompendiumCollection(feats=[Feat(name="Alert")])
        updated = original.with_entries(Category.FEATS, [Feat(name="Lucky")])
        assert [f.name for f in original.feats] == ["Alert"]
        assert [f.name for f in updated.feats] == ["Lucky"]

    def test_counts_and_total(self) -> None:
        collection = CompendiumCollection(
            items=[Item(name="A"), Item(name="B")],
            races=[Race(name="Elf")],
        )
        assert collection.counts()[Category.ITEMS] == 2
        assert collection.total_entries() == 3
        assert collection.non_empty_categories() == [Category.ITEMS, Category.RACES]
