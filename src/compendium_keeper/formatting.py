"""
Markdown rendering of compendium entries for tool output.
"""

from .models import (
    Category,
    CompendiumCollection,
    CompendiumEntry,
    Item,
    Monster,
    Spell,
    Trait,
)


def format_table_of_contents(collection: CompendiumCollection) -> str:
    """List the non-empty categories with their entry counts."""
    categories = collection.non_empty_categories()
    if not categories:
        return "📚 The compendium is empty. Import an XML file to get started."

    lines = ["**Compendium:**"]
    for category in categories:
        count = len(collection.entries(category))
        lines.append(f"• {category.display_name} ({category.value}): {count} entries")
    return "\n".join(lines)


def format_entry_list(entries: list[CompendiumEntry], category: Category) -> str:
    if not entries:
        return f"No {category.display_name} found."
    names = "\n".join(f"• {entry.name}" for entry in entries)
    return f"**{category.display_name}** ({len(entries)}):\n{names}"


def _format_trait(trait: Trait) -> str:
    return f"***{trait.name}.*** {trait.text}"


def _labelled(label: str, value: str) -> str | None:
    return f"**{label}** {value}" if value else None


def format_monster(monster: Monster) -> str:
    subtitle = f"*{monster.size} {monster.type}, {monster.alignment}*"
    lines = [f"# {monster.name}", subtitle, ""]
    lines.append(f"**Armor Class** {monster.armor_class}")
    lines.append(f"**Hit Points** {monster.hit_points}")
    lines.append(f"**Speed** {monster.speed}")
    lines.append("")
    lines.append("| STR | DEX | CON | INT | WIS | CHA |")
    lines.append("|---|---|---|---|---|---|")
    lines.append(
        f"| {monster.strength} | {monster.dexterity} | {monster.constitution} "
        f"| {monster.intelligence} | {monster.wisdom} | {monster.charisma} |"
    )
    lines.append("")

    details = [
        _labelled("Saving Throws", monster.saving_throws),
        _labelled("Skills", monster.skills),
        _labelled("Damage Vulnerabilities", monster.vulnerabilities),
        _labelled("Damage Resistances", monster.resistances),
        _labelled("Damage Immunities", monster.immunities),
        _labelled("Condition Immunities", monster.condition_immunities),
        _labelled("Senses", monster.senses),
        _labelled("Languages", monster.languages),
        _labelled("Challenge", monster.challenge_rating),
    ]
    lines.extend(d for d in details if d)

    if monster.traits:
        lines.append("")
        lines.extend(_format_trait(t) for t in monster.traits)

    for heading, traits in (
        ("Actions", monster.actions),
        ("Legendary Actions", monster.legendary_actions),
        ("Reactions", monster.reactions),
    ):
        if traits:
            lines.append("")
            lines.append(f"## {heading}")
            lines.extend(_format_trait(t) for t in traits)

    return "\n".join(lines)


def format_spell(spell: Spell) -> str:
    level_text = "Cantrip" if spell.level == "0" else f"Level {spell.level}"
    school_text = spell.school.lower() if spell.school else ""
    subtitle = " ".join(part for part in (level_text, school_text) if part)

    lines = [
        f"# {spell.name}",
        f"*{subtitle}*",
        "",
        f"**Casting Time:** {spell.time}",
        f"**Range:** {spell.range}",
        f"**Components:** {spell.components}",
        f"**Duration:** {spell.duration}",
        "",
        spell.text,
        "",
        f"**Classes:** {spell.classes}",
    ]
    return "\n".join(lines)


def format_item(item: Item) -> str:
    lines = [f"# {item.name}"]
    if item.detail:
        lines.append(f"*{item.detail}*")
    lines.extend(["", item.text, ""])

    if item.dmg1:
        versatile = f" ({item.dmg2})" if item.dmg2 else ""
        damage = f"{item.dmg1}{versatile} {item.dmg_type}".rstrip()
    else:
        damage = ""

    details = [
        _labelled("Type:", item.type),
        _labelled("Cost:", f"{item.value} gp" if item.value else ""),
        _labelled("Weight:", f"{item.weight} lb." if item.weight else ""),
        _labelled("Damage:", damage),
        _labelled("AC:", item.ac),
        _labelled("Strength Req:", item.strength),
        _labelled("Range:", item.range),
        _labelled("Properties:", item.properties),
    ]
    lines.extend(d for d in details if d)
    return "\n".join(lines).rstrip()


def format_entry(entry: CompendiumEntry) -> str:
    """Render an entry as a Markdown detail card."""
    if isinstance(entry, Monster):
        return format_monster(entry)
    if isinstance(entry, Spell):
        return format_spell(entry)
    if isinstance(entry, Item):
        return format_item(entry)
    return f"# {entry.name}\n\n{entry.text}"
