"""
XML parser for BGG XML API2 responses.

Turns ``search`` and ``thing`` payloads into domain models, correcting BGG's
unreliable base-game/expansion classification from inbound links.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Dict, List, Optional

from ..config import (
    BOARDGAME,
    BOARDGAME_EXPANSION,
    BOARDGAME_INTEGRATION,
    BOARDGAME_VERSION,
)
from ..models import GameMetadata, GameType, GameVersion, InboundLink, SearchItem
from .dimensions import format_dimensions, weight_info
from .text import child_value, clean_xml, node_value, to_float, to_int

logger = logging.getLogger(__name__)

EXPANSION_LINK_TYPES = (BOARDGAME_EXPANSION, BOARDGAME_INTEGRATION)


def parse_xml(xml_text: str) -> Optional[ET.Element]:
    """
    Parse an XML document, cleaning it first.

    Args:
        xml_text: Raw XML text

    Returns:
        Root element, or None when the document cannot be parsed
    """
    if not xml_text or not isinstance(xml_text, str):
        logger.error(f"XML parser: invalid input ({type(xml_text).__name__})")
        return None

    try:
        return ET.fromstring(clean_xml(xml_text).encode('utf-8'))
    except ET.ParseError as e:
        logger.error(f"XML parsing failed: {e}; input starts with {xml_text[:200]!r}")
        return None


def _items(root: Optional[ET.Element]) -> List[ET.Element]:
    if root is None:
        return []
    if root.tag == 'item':
        return [root]
    if root.tag == 'items':
        return root.findall('item')
    return []


def primary_name(element: ET.Element) -> str:
    """Pick the name tagged type="primary", else the first non-empty one."""
    names = element.findall('name')
    for name in names:
        if name.get('type') == 'primary':
            return node_value(name)
    for name in names:
        value = node_value(name)
        if value:
            return value
    return ''


def extract_search_items(xml_text: str) -> List[SearchItem]:
    """Extract search hits from a ``search`` response."""
    items = []
    for item in _items(parse_xml(xml_text)):
        item_id = item.get('id')
        name = primary_name(item)
        if not item_id or not name:
            continue
        items.append(SearchItem(
            id=item_id,
            name=name,
            type=item.get('type') or BOARDGAME,
            year_published=to_int(child_value(item, 'yearpublished')),
            thumbnail=child_value(item, 'thumbnail'),
            image=child_value(item, 'image'),
        ))

    logger.debug(f"Extracted {len(items)} search items")
    return items


def extract_metadata(xml_text: str) -> List[GameMetadata]:
    """
    Extract game metadata from a ``thing`` response.

    Items without id, name or type are skipped.
    """
    results = []
    for item in _items(parse_xml(xml_text)):
        if not item.get('id') or not item.get('type') or not primary_name(item):
            continue
        results.append(_metadata_from_item(item))

    logger.debug(f"Extracted metadata for {len(results)} items")
    return results


def _metadata_from_item(item: ET.Element) -> GameMetadata:
    inbound_links = [
        link for link in extract_inbound_links(item)
        if link.type in EXPANSION_LINK_TYPES
    ]
    has_inbound_expansion = bool(inbound_links)

    if has_inbound_expansion or item.get('type') == BOARDGAME_EXPANSION:
        game_type = GameType.EXPANSION
    else:
        game_type = GameType.BOARDGAME

    ratings = item.find('statistics/ratings')

    return GameMetadata(
        id=item.get('id'),
        name=primary_name(item),
        type=game_type,
        year_published=to_int(child_value(item, 'yearpublished')),
        rank=extract_rank(ratings),
        bayes_average=to_float(child_value(ratings, 'bayesaverage')),
        average=to_float(child_value(ratings, 'average')),
        thumbnail=child_value(item, 'thumbnail'),
        image=child_value(item, 'image'),
        alternate_names=extract_alternate_names(item),
        min_players=to_int(child_value(item, 'minplayers')),
        max_players=to_int(child_value(item, 'maxplayers')),
        playing_time=to_int(child_value(item, 'playingtime')),
        min_age=to_int(child_value(item, 'minage')),
        description=child_value(item, 'description'),
        weight=to_float(child_value(ratings, 'averageweight')),
        mechanics=extract_links(item, 'boardgamemechanic'),
        categories=extract_links(item, 'boardgamecategory'),
        designers=extract_links(item, 'boardgamedesigner'),
        versions=extract_versions(item),
        has_inbound_expansion_link=has_inbound_expansion,
        inbound_expansion_links=inbound_links,
    )


def extract_inbound_links(item: ET.Element) -> List[InboundLink]:
    """All links on the item marked inbound="true"."""
    return [
        InboundLink(
            id=link.get('id', ''),
            type=link.get('type', ''),
            value=node_value(link),
        )
        for link in item.findall('link')
        if link.get('inbound') == 'true'
    ]


def extract_links(element: ET.Element, link_type: str) -> List[str]:
    """Values of direct child links of the given type, de-duplicated in order."""
    values = []
    for link in element.findall('link'):
        if link.get('type') != link_type:
            continue
        value = node_value(link)
        if value:
            values.append(value)
    return list(dict.fromkeys(values))


def extract_alternate_names(item: ET.Element) -> List[str]:
    names = []
    for name in item.findall('name'):
        if name.get('type') != 'alternate':
            continue
        value = node_value(name)
        if value:
            names.append(value)
    return names


def extract_rank(ratings: Optional[ET.Element]) -> Optional[int]:
    """Overall board game rank; None when BGG says "Not Ranked"."""
    if ratings is None:
        return None
    for rank in ratings.findall('ranks/rank'):
        if rank.get('name') == 'boardgame':
            return to_int(node_value(rank))
    return None


def extract_versions(item: ET.Element) -> List[GameVersion]:
    """
    Extract the versions (physical printings) of a game.

    Full records come from ``<versions><item>``; bare ``boardgameversion``
    links on the game item add id/name-only entries.
    """
    versions: Dict[str, GameVersion] = {}

    for version_item in item.findall('versions/item'):
        version = extract_version_data(version_item)
        if version is None:
            logger.debug(f"Dropping version without id/name on item {item.get('id')}")
            continue
        versions.setdefault(version.id, version)

    for link in item.findall('link'):
        if link.get('type') != BOARDGAME_VERSION or not link.get('id'):
            continue
        versions.setdefault(link.get('id'), GameVersion(
            id=link.get('id'),
            name=node_value(link) or 'Unknown Version',
        ))

    return list(versions.values())


def extract_version_data(version_item: ET.Element) -> Optional[GameVersion]:
    version_id = version_item.get('id')
    name = primary_name(version_item)
    if not version_id or not name:
        return None

    width = child_value(version_item, 'width')
    length = child_value(version_item, 'length')
    depth = child_value(version_item, 'depth')
    weight = child_value(version_item, 'weight')

    return GameVersion(
        id=version_id,
        name=name,
        year_published=to_int(child_value(version_item, 'yearpublished')),
        publishers=extract_links(version_item, 'boardgamepublisher'),
        languages=extract_links(version_item, 'language'),
        product_code=child_value(version_item, 'productcode'),
        thumbnail=child_value(version_item, 'thumbnail'),
        image=child_value(version_item, 'image'),
        width=width,
        length=length,
        depth=depth,
        weight=weight,
        dimensions=format_dimensions(width, length, depth),
        weight_info=weight_info(weight),
    )
