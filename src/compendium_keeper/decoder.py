"""
Decoder: compendium XML document -> CompendiumCollection.

Parsing fails only when the document itself is not well-formed XML. Individual
entries are read with whatever fields they carry: a missing child element
yields an empty string for that field.
"""

import logging

from lxml import etree as ET

from .models import (
    Category,
    CompendiumCollection,
    CompendiumEntry,
    CompendiumError,
    DndClass,
    Feature,
    LevelInfo,
    SimpleEntry,
    Trait,
    ENTRY_MODELS,
    SIMPLE_CATEGORIES,
)

logger = logging.getLogger("compendium-keeper")

ROOT_TAG = "compendium"
ATTACK_SEPARATOR = "|"
OPTIONAL_TOKEN = "YES"

# Element some XML toolchains substitute for the document when parsing fails
_PARSER_ERROR_TAG = "parsererror"


class MalformedDocumentError(CompendiumError):
    """The input is not a well-formed XML document."""
    pass


def _new_parser(encoding: str | None = None) -> ET.XMLParser:
    return ET.XMLParser(
        encoding=encoding, resolve_entities=False, no_network=True, huge_tree=True
    )


def _any_ns(tag: str) -> str:
    """Match ``tag`` by local name, in any namespace or none."""
    return f"{{*}}{tag}"


def _local_name(element: ET._Element) -> str:
    return ET.QName(element).localname


def _text_of(element: ET._Element) -> str:
    """Trimmed text content of an element, including nested markup."""
    return "".join(element.itertext()).strip()


def _child_text(node: ET._Element, tag: str) -> str:
    child = node.find(_any_ns(tag))
    if child is None:
        return ""
    return _text_of(child)


# ---------------------------------------------------------------------------
# Nested blocks
# ---------------------------------------------------------------------------

def decode_trait(element: ET._Element) -> Trait:
    """Read a trait/action/legendary/reaction block.

    ``attack`` stays None when the block has no attack element, so that
    "no attack data" is distinguishable from an explicitly empty attack list.
    """
    attack_element = element.find(_any_ns("attack"))
    attack: list[str] | None = None
    if attack_element is not None:
        attack_text = _text_of(attack_element)
        attack = attack_text.split(ATTACK_SEPARATOR) if attack_text else []

    return Trait(
        name=_child_text(element, "name"),
        text=_child_text(element, "text"),
        attack=attack,
    )


def _decode_traits(node: ET._Element, tag: str) -> list[Trait]:
    return [decode_trait(element) for element in node.findall(_any_ns(tag))]


def _decode_levels(node: ET._Element) -> list[LevelInfo]:
    levels = []
    for level_element in node.findall(_any_ns("autolevel")):
        features = [
            Feature(
                name=_child_text(feature_element, "name"),
                text=_child_text(feature_element, "text"),
                optional=feature_element.get("optional") == OPTIONAL_TOKEN,
            )
            for feature_element in level_element.findall(_any_ns("feature"))
        ]
        levels.append(LevelInfo(level=level_element.get("level", ""), features=features))
    return levels


# ---------------------------------------------------------------------------
# Entries
# ---------------------------------------------------------------------------

def _decode_simple(node: ET._Element, model: type[SimpleEntry]) -> SimpleEntry:
    """Project every direct child element into a field keyed by its lower-cased tag.

    Known tags populate typed fields; anything else lands in ``extra_fields``.
    A repeated tag keeps its last value.
    """
    known = {tag.lower(): attribute for tag, attribute in model.XML_FIELDS}
    values: dict[str, str] = {}
    extra: dict[str, str] = {}

    for child in node:
        if not isinstance(child.tag, str):
            continue  # comments and processing instructions
        key = _local_name(child).lower()
        value = _text_of(child)
        if key in known:
            values[known[key]] = value
        else:
            extra[key] = value

    return model(**values, extra_fields=extra)


def _decode_structured(node: ET._Element, model: type[CompendiumEntry]) -> CompendiumEntry:
    values: dict = {
        attribute: _child_text(node, tag) for tag, attribute in model.XML_FIELDS
    }
    for tag, attribute in model.TRAIT_LISTS:
        values[attribute] = _decode_traits(node, tag)
    if model is DndClass:
        values["levels"] = _decode_levels(node)
    return model(**values)


def decode_entry(node: ET._Element, category: Category) -> CompendiumEntry:
    """Decode a single entry element of the given category."""
    model = ENTRY_MODELS[category]
    if category in SIMPLE_CATEGORIES:
        return _decode_simple(node, model)
    return _decode_structured(node, model)


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------

def parse_document(xml_text: str | bytes) -> ET._Element:
    """Parse raw document text into its root element.

    ``str`` input is already decoded, so any encoding declaration it carries
    is ignored. ``bytes`` input is decoded as its declaration says (UTF-8
    when it has none).

    Raises:
        MalformedDocumentError: If the input is empty, not well-formed, or
            is a parser-error document in place of content.
    """
    if isinstance(xml_text, str):
        data, parser = xml_text.encode("utf-8"), _new_parser(encoding="utf-8")
    else:
        data, parser = xml_text, _new_parser()
    if not data.strip():
        raise MalformedDocumentError("Document is empty")

    try:
        root = ET.fromstring(data, parser)
    except ET.XMLSyntaxError as e:
        raise MalformedDocumentError(f"Document is not well-formed XML: {e}") from e

    if _is_parser_error(root):
        raise MalformedDocumentError("Document contains a parser error element")

    return root


def _is_parser_error(root: ET._Element) -> bool:
    """True for a parser-error document: the error is the root or its only child."""
    if _local_name(root) == _PARSER_ERROR_TAG:
        return True
    children = list(root.iterchildren(ET.Element))
    return len(children) == 1 and _local_name(children[0]) == _PARSER_ERROR_TAG


def decode(xml_text: str | bytes) -> CompendiumCollection:
    """Decode a compendium document into a CompendiumCollection.

    Entries are the direct children of the root element, grouped by their
    element name. Unrecognised top-level elements are ignored.

    Args:
        xml_text: Document text, either ``str`` or UTF-8 (or declared
            encoding) ``bytes``.

    Returns:
        A new CompendiumCollection, with entries in document order.

    Raises:
        MalformedDocumentError: If the document is not well-formed XML.
    """
    root = parse_document(xml_text)

    root_name = _local_name(root)
    if root_name != ROOT_TAG:
        logger.warning(f"Unexpected root element '{root_name}', expected '{ROOT_TAG}'")
    logger.debug(f"Decoding compendium document (version {root.get('version', 'unknown')})")

    sections: dict[str, list[CompendiumEntry]] = {}
    for category in Category:
        sections[category.value] = [
            decode_entry(node, category)
            for node in root.iterchildren(_any_ns(category.element_tag))
        ]
        logger.debug(f"Decoded {len(sections[category.value])} {category.value}")

    return CompendiumCollection(**sections)
