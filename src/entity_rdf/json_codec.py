"""
Decoding of Wikibase JSON entity documents.

Supported input files:
- a JSON array of entity documents
- a JSON object ``{"entities": {"Q1": {...}, ...}}`` (EntityData output)
- a single entity document
- JSON lines, one entity document per line (``.jsonl``, ``.ndjson``,
  or any file that is not one JSON value)
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from entity_rdf.lookup import InMemoryEntityLookup, InMemoryPropertyDataTypeLookup
from entity_rdf.models import (
    CALENDAR_GREGORIAN,
    GLOBE_EARTH,
    DataValue,
    Entity,
    EntityIdValue,
    EntityRevision,
    GlobeCoordinateValue,
    Item,
    MonolingualTextValue,
    Property,
    PropertyNoValueSnak,
    PropertySomeValueSnak,
    PropertyValueSnak,
    QuantityValue,
    Rank,
    Reference,
    SiteLink,
    Snak,
    Statement,
    StatementList,
    StringValue,
    TimeValue,
    UnknownValue,
    entity_id_for_type,
    parse_entity_id,
)

logger = logging.getLogger(__name__)


class EntityDecodingError(ValueError):
    """Raised when an entity document is malformed."""
    pass


# =============================================================================
# Values and snaks
# =============================================================================

def decode_data_value(data: Dict[str, Any]) -> DataValue:
    value_type = data["type"]
    value = data["value"]

    if value_type == "string":
        return StringValue(value)
    if value_type == "monolingualtext":
        return MonolingualTextValue(value["text"], value["language"])
    if value_type == "time":
        return TimeValue(
            time=value["time"],
            timezone=int(value.get("timezone", 0)),
            before=int(value.get("before", 0)),
            after=int(value.get("after", 0)),
            precision=int(value.get("precision", 11)),
            calendar_model=value.get("calendarmodel") or CALENDAR_GREGORIAN,
        )
    if value_type == "quantity":
        return QuantityValue(
            amount=str(value["amount"]),
            unit=value.get("unit", "1"),
            upper_bound=_optional_str(value.get("upperBound")),
            lower_bound=_optional_str(value.get("lowerBound")),
        )
    if value_type == "globecoordinate":
        precision = value.get("precision")
        return GlobeCoordinateValue(
            latitude=float(value["latitude"]),
            longitude=float(value["longitude"]),
            precision=float(precision) if precision is not None else None,
            globe=value.get("globe") or GLOBE_EARTH,
        )
    if value_type == "wikibase-entityid":
        if "id" in value:
            entity_id = parse_entity_id(value["id"])
        else:
            entity_id = entity_id_for_type(value["entity-type"], int(value["numeric-id"]))
        return EntityIdValue(entity_id)

    logger.debug(f"Unknown data value type {value_type!r}, keeping it as an unknown value")
    return UnknownValue(value_type, value)


def _optional_str(value: Any):
    return None if value is None else str(value)


def decode_snak(data: Dict[str, Any]) -> Snak:
    property_id = parse_entity_id(data["property"])
    snak_type = data["snaktype"]
    if snak_type == "value":
        return PropertyValueSnak(property_id, decode_data_value(data["datavalue"]))
    if snak_type == "somevalue":
        return PropertySomeValueSnak(property_id)
    if snak_type == "novalue":
        return PropertyNoValueSnak(property_id)
    raise EntityDecodingError(f"Unknown snak type: {snak_type!r}")


def decode_snak_map(data: Dict[str, List[Dict[str, Any]]], order: Optional[Iterable[str]] = None) -> List[Snak]:
    """Flatten a property id to snak list map, following the explicit order if given."""
    data = _as_map(data)
    keys = list(order) if order else list(data)
    keys += [key for key in data if key not in keys]
    return [decode_snak(snak) for key in keys for snak in data.get(key, [])]


def decode_reference(data: Dict[str, Any]) -> Reference:
    return Reference(decode_snak_map(data.get("snaks", {}), data.get("snaks-order")))


def decode_statement(data: Dict[str, Any]) -> Statement:
    return Statement(
        main_snak=decode_snak(data["mainsnak"]),
        qualifiers=decode_snak_map(data.get("qualifiers", {}), data.get("qualifiers-order")),
        references=[decode_reference(ref) for ref in data.get("references", [])],
        rank=Rank.from_name(data.get("rank", "normal")),
        guid=data.get("id"),
    )


# =============================================================================
# Entities
# =============================================================================

def _as_map(data: Any) -> Dict[str, Any]:
    # empty maps may come encoded as empty lists
    if not data:
        return {}
    if not isinstance(data, dict):
        raise EntityDecodingError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def _decode_terms(data: Dict[str, Any]) -> Dict[str, str]:
    return {lang: term["value"] for lang, term in _as_map(data).items()}


def _decode_aliases(data: Dict[str, Any]) -> Dict[str, List[str]]:
    return {lang: [alias["value"] for alias in aliases] for lang, aliases in _as_map(data).items()}


def _decode_statements(data: Dict[str, Any]) -> StatementList:
    # "claims" is a map in full documents but may be a plain list
    if isinstance(data, list):
        groups = [data]
    else:
        groups = list(_as_map(data).values())
    return StatementList([decode_statement(st) for group in groups for st in group])


def _decode_entity(data: Dict[str, Any]) -> Entity:
    entity_id = parse_entity_id(data["id"])
    entity_type = data.get("type", entity_id.entity_type)
    if entity_type != entity_id.entity_type:
        raise EntityDecodingError(f"Entity {entity_id} has mismatched type {entity_type!r}")

    common = dict(
        id=entity_id,
        labels=_decode_terms(data.get("labels")),
        descriptions=_decode_terms(data.get("descriptions")),
        aliases=_decode_aliases(data.get("aliases")),
        statements=_decode_statements(data.get("claims", data.get("statements"))),
    )
    if entity_type == "item":
        sitelinks = [
            SiteLink(
                site_id=link.get("site", site_id),
                page_name=link["title"],
                badges=[parse_entity_id(badge) for badge in link.get("badges", [])],
            )
            for site_id, link in _as_map(data.get("sitelinks")).items()
        ]
        return Item(sitelinks=sitelinks, **common)
    if entity_type == "property":
        return Property(data_type=data.get("datatype", "string"), **common)
    raise EntityDecodingError(f"Unsupported entity type: {entity_type!r}")


def decode_entity(data: Dict[str, Any]) -> Entity:
    """
    Decode one entity document.

    Raises:
        EntityDecodingError: if the document is malformed
    """
    try:
        return _decode_entity(data)
    except EntityDecodingError:
        raise
    except (KeyError, TypeError, AttributeError, ValueError) as e:
        doc_id = data.get("id", "?") if isinstance(data, dict) else "?"
        raise EntityDecodingError(f"Malformed entity document {doc_id}: {type(e).__name__}: {e}")


def decode_entity_revision(data: Dict[str, Any]) -> EntityRevision:
    entity = decode_entity(data)
    return EntityRevision(
        entity=entity,
        revision_id=int(data.get("lastrevid", 0) or 0),
        timestamp=data.get("modified", ""),
    )


def collect_property_data_types(documents: Iterable[Dict[str, Any]]) -> Dict[str, str]:
    """
    Property data types found in property documents and in the ``datatype``
    field of snaks.
    """
    data_types: Dict[str, str] = {}

    def visit_snak(snak: Dict[str, Any]) -> None:
        if "datatype" in snak and "property" in snak:
            data_types.setdefault(snak["property"], snak["datatype"])

    for doc in documents:
        if doc.get("type") == "property" and "datatype" in doc:
            data_types[doc["id"]] = doc["datatype"]
        claims = doc.get("claims", doc.get("statements")) or {}
        groups = [claims] if isinstance(claims, list) else list(claims.values())
        for group in groups:
            for statement in group:
                visit_snak(statement.get("mainsnak", {}))
                for qualifiers in (statement.get("qualifiers") or {}).values():
                    for snak in qualifiers:
                        visit_snak(snak)
                for reference in statement.get("references") or []:
                    for snaks in (reference.get("snaks") or {}).values():
                        for snak in snaks:
                            visit_snak(snak)
    return data_types


# =============================================================================
# Files
# =============================================================================

def parse_entity_documents(text: str) -> List[Dict[str, Any]]:
    """
    Split input text into entity documents.

    Raises:
        EntityDecodingError: if the text is neither JSON nor JSON lines
    """
    stripped = text.strip()
    if not stripped:
        return []
    try:
        data = json.loads(stripped)
    except json.JSONDecodeError:
        return _parse_json_lines(stripped)

    if isinstance(data, list):
        documents = data
    elif isinstance(data, dict) and isinstance(data.get("entities"), dict):
        documents = list(data["entities"].values())
    elif isinstance(data, dict):
        documents = [data]
    else:
        raise EntityDecodingError(f"Expected a JSON array or object, got {type(data).__name__}")

    for doc in documents:
        if not isinstance(doc, dict):
            raise EntityDecodingError(f"Entity document must be an object, got {type(doc).__name__}")
    return documents


def _parse_json_lines(text: str) -> List[Dict[str, Any]]:
    documents = []
    for line_no, line in enumerate(text.splitlines(), 1):
        # dump files wrap lines in "[", "]" and trailing commas
        line = line.strip().rstrip(",")
        if not line or line in ("[", "]"):
            continue
        try:
            doc = json.loads(line)
        except json.JSONDecodeError as e:
            raise EntityDecodingError(f"Invalid JSON on line {line_no}: {e}")
        if not isinstance(doc, dict):
            raise EntityDecodingError(f"Entity document on line {line_no} must be an object")
        documents.append(doc)
    return documents


def read_entity_documents(path: Union[str, Path]) -> List[Dict[str, Any]]:
    path = Path(path)
    return parse_entity_documents(path.read_text(encoding="utf-8"))


def load_entities(path: Union[str, Path]) -> List[EntityRevision]:
    """
    Load all entity revisions from a file.

    Raises:
        EntityDecodingError: if the file or one of its documents is malformed
    """
    documents = read_entity_documents(path)
    revisions = [decode_entity_revision(doc) for doc in documents]
    logger.info(f"Loaded {len(revisions)} entities from {path}")
    return revisions


def load_lookups(path: Union[str, Path]) -> Tuple[InMemoryEntityLookup, InMemoryPropertyDataTypeLookup]:
    """Load a file into an entity lookup and a property data type lookup."""
    documents = read_entity_documents(path)
    entity_lookup = InMemoryEntityLookup(decode_entity_revision(doc) for doc in documents)
    property_lookup = InMemoryPropertyDataTypeLookup(collect_property_data_types(documents))
    logger.info(f"Loaded {len(entity_lookup)} entities from {path}")
    return entity_lookup, property_lookup
