"""
Entity data model.

Provides:
- Entity ids (items and properties) and id parsing
- Data values: a closed set of value types plus an explicit unknown arm
- Snaks: value, some-value and no-value assertions about a property
- Statements, references and statement lists with rank selection
- Items, properties, sitelinks and entity revisions

Every data value, snak and reference has a stable content hash
(SHA-1 over a canonical JSON form), used to name and deduplicate value
and reference nodes in the RDF output.
"""

import hashlib
import json
import re
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, Iterator, List, Optional, Type


def content_hash(data: Any) -> str:
    """SHA-1 hex digest of the canonical JSON form of ``data``."""
    canonical = json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha1(canonical.encode("utf-8")).hexdigest()


# =============================================================================
# Entity ids
# =============================================================================

class EntityIdParsingError(ValueError):
    """Raised when a string is not a valid entity id."""
    pass


@dataclass(frozen=True)
class EntityId:
    """
    Opaque entity identifier.

    The serialization is normalized so the leading letter is upper case
    (``q42`` and ``Q42`` are the same id).
    """
    serialization: str

    ENTITY_TYPE = "entity"
    PATTERN = re.compile(r"^[A-Z]\d+$")

    def __post_init__(self):
        if not isinstance(self.serialization, str):
            raise EntityIdParsingError(f"Entity id must be a string: {self.serialization!r}")
        normalized = self.serialization[:1].upper() + self.serialization[1:]
        if not self.PATTERN.match(normalized):
            raise EntityIdParsingError(f"Invalid {self.ENTITY_TYPE} id: {self.serialization!r}")
        object.__setattr__(self, "serialization", normalized)

    @property
    def entity_type(self) -> str:
        return self.ENTITY_TYPE

    @property
    def numeric_id(self) -> int:
        return int(self.serialization[1:])

    def __str__(self) -> str:
        return self.serialization


@dataclass(frozen=True)
class ItemId(EntityId):
    ENTITY_TYPE = "item"
    PATTERN = re.compile(r"^Q[1-9]\d*$")


@dataclass(frozen=True)
class PropertyId(EntityId):
    ENTITY_TYPE = "property"
    PATTERN = re.compile(r"^P[1-9]\d*$")


ENTITY_ID_TYPES: Dict[str, Type[EntityId]] = {
    "Q": ItemId,
    "P": PropertyId,
}


def parse_entity_id(serialization: str) -> EntityId:
    """
    Parse an entity id, dispatching on its leading letter.

    Raises:
        EntityIdParsingError: if the string is not a known kind of id
    """
    if not isinstance(serialization, str) or not serialization.strip():
        raise EntityIdParsingError(f"Entity id must be a non-empty string: {serialization!r}")
    serialization = serialization.strip()
    id_class = ENTITY_ID_TYPES.get(serialization[0].upper())
    if id_class is None:
        raise EntityIdParsingError(f"Unknown entity id type: {serialization!r}")
    return id_class(serialization)


def entity_id_for_type(entity_type: str, numeric_id: int) -> EntityId:
    """Build an id from an entity type name and a numeric id."""
    for prefix, id_class in ENTITY_ID_TYPES.items():
        if id_class.ENTITY_TYPE == entity_type:
            return id_class(f"{prefix}{numeric_id}")
    raise EntityIdParsingError(f"Unknown entity type: {entity_type!r}")


# =============================================================================
# Data values
# =============================================================================

GLOBE_EARTH = "http://www.wikidata.org/entity/Q2"
CALENDAR_GREGORIAN = "http://www.wikidata.org/entity/Q1985727"
CALENDAR_JULIAN = "http://www.wikidata.org/entity/Q1985786"


class DataValue:
    """Base class of all data values."""

    value_type = "unknown"

    def get_value(self) -> Any:
        raise NotImplementedError

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.value_type, "value": self.get_value()}

    def get_hash(self) -> str:
        return content_hash(self.to_dict())


@dataclass(frozen=True)
class StringValue(DataValue):
    value: str

    value_type = "string"

    def get_value(self) -> Any:
        return self.value


@dataclass(frozen=True)
class MonolingualTextValue(DataValue):
    text: str
    language: str

    value_type = "monolingualtext"

    def get_value(self) -> Any:
        return {"text": self.text, "language": self.language}


@dataclass(frozen=True)
class TimeValue(DataValue):
    """
    A point in time, always stored in the proleptic Gregorian calendar.

    ``time`` uses the signed ISO 8601 form, e.g. ``+2013-01-01T00:00:00Z``.
    ``precision`` follows the usual scale (9 = year, 11 = day, 14 = second).
    """
    time: str
    timezone: int = 0
    before: int = 0
    after: int = 0
    precision: int = 11
    calendar_model: str = CALENDAR_GREGORIAN

    value_type = "time"

    def get_value(self) -> Any:
        return {
            "time": self.time,
            "timezone": self.timezone,
            "before": self.before,
            "after": self.after,
            "precision": self.precision,
            "calendarmodel": self.calendar_model,
        }


@dataclass(frozen=True)
class QuantityValue(DataValue):
    """Decimal amounts are kept as strings, e.g. ``+12.5``. A unit of ``1`` means none."""
    amount: str
    unit: str = "1"
    upper_bound: Optional[str] = None
    lower_bound: Optional[str] = None

    value_type = "quantity"

    def get_value(self) -> Any:
        data = {"amount": self.amount, "unit": self.unit}
        if self.upper_bound is not None:
            data["upperBound"] = self.upper_bound
        if self.lower_bound is not None:
            data["lowerBound"] = self.lower_bound
        return data


@dataclass(frozen=True)
class GlobeCoordinateValue(DataValue):
    latitude: float
    longitude: float
    precision: Optional[float] = None
    globe: str = GLOBE_EARTH

    value_type = "globecoordinate"

    def get_value(self) -> Any:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "precision": self.precision,
            "globe": self.globe,
        }


@dataclass(frozen=True)
class EntityIdValue(DataValue):
    entity_id: EntityId

    value_type = "wikibase-entityid"

    def get_value(self) -> Any:
        return {
            "entity-type": self.entity_id.entity_type,
            "numeric-id": self.entity_id.numeric_id,
            "id": self.entity_id.serialization,
        }


@dataclass(frozen=True, eq=False)
class UnknownValue(DataValue):
    """A value of a type this package has no dedicated class for."""
    type_name: str
    value: Any = None

    @property
    def value_type(self) -> str:
        return self.type_name

    def get_value(self) -> Any:
        return self.value


# =============================================================================
# Snaks
# =============================================================================

@dataclass(frozen=True)
class Snak:
    """Base class of the three snak kinds."""
    property_id: PropertyId

    snak_type = "snak"

    def to_dict(self) -> Dict[str, Any]:
        return {"snaktype": self.snak_type, "property": self.property_id.serialization}

    def get_hash(self) -> str:
        return content_hash(self.to_dict())


@dataclass(frozen=True)
class PropertyValueSnak(Snak):
    data_value: DataValue

    snak_type = "value"

    def __post_init__(self):
        if not isinstance(self.data_value, DataValue):
            raise TypeError(f"PropertyValueSnak needs a DataValue, got {type(self.data_value).__name__}")

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["datavalue"] = self.data_value.to_dict()
        return data


@dataclass(frozen=True)
class PropertySomeValueSnak(Snak):
    snak_type = "somevalue"


@dataclass(frozen=True)
class PropertyNoValueSnak(Snak):
    snak_type = "novalue"


# =============================================================================
# Statements
# =============================================================================

class Rank(IntEnum):
    """Statement rank. Higher values win when selecting best statements."""
    DEPRECATED = 0
    NORMAL = 1
    PREFERRED = 2

    @property
    def json_name(self) -> str:
        return self.name.lower()

    @classmethod
    def from_name(cls, name: str) -> "Rank":
        try:
            return cls[name.upper()]
        except KeyError:
            raise ValueError(f"Unknown rank: {name!r}")


@dataclass
class Reference:
    """An ordered list of snaks supporting a statement."""
    snaks: List[Snak] = field(default_factory=list)

    def get_hash(self) -> str:
        return content_hash([snak.get_hash() for snak in self.snaks])

    def is_empty(self) -> bool:
        return not self.snaks

    def __len__(self) -> int:
        return len(self.snaks)


@dataclass
class Statement:
    """
    A snak with qualifiers, references and a rank.

    References are kept unique by content hash, in insertion order.
    """
    main_snak: Snak
    qualifiers: List[Snak] = field(default_factory=list)
    references: List[Reference] = field(default_factory=list)
    rank: Rank = Rank.NORMAL
    guid: Optional[str] = None

    def __post_init__(self):
        references = self.references
        self.references = []
        for reference in references:
            self.add_reference(reference)

    @property
    def property_id(self) -> PropertyId:
        return self.main_snak.property_id

    def add_reference(self, reference: Reference) -> bool:
        """Add a reference unless an identical one is present. Returns True if added."""
        ref_hash = reference.get_hash()
        if any(existing.get_hash() == ref_hash for existing in self.references):
            return False
        self.references.append(reference)
        return True

    def get_hash(self) -> str:
        return content_hash({
            "mainsnak": self.main_snak.get_hash(),
            "qualifiers": [q.get_hash() for q in self.qualifiers],
            "references": [r.get_hash() for r in self.references],
            "rank": self.rank.json_name,
        })


class StatementList:
    """Ordered list of statements."""

    def __init__(self, statements: Optional[List[Statement]] = None):
        self._statements: List[Statement] = list(statements or [])

    def add_statement(self, statement: Statement) -> None:
        self._statements.append(statement)

    def get_property_ids(self) -> List[PropertyId]:
        seen: Dict[PropertyId, None] = {}
        for statement in self._statements:
            seen.setdefault(statement.property_id, None)
        return list(seen)

    def get_by_property(self, property_id: PropertyId) -> "StatementList":
        return StatementList([s for s in self._statements if s.property_id == property_id])

    def get_best_statements(self) -> "StatementList":
        """All statements of the highest non-deprecated rank present."""
        best_rank = None
        best: List[Statement] = []
        for statement in self._statements:
            if statement.rank is Rank.DEPRECATED:
                continue
            if best_rank is None or statement.rank > best_rank:
                best_rank = statement.rank
                best = [statement]
            elif statement.rank == best_rank:
                best.append(statement)
        return StatementList(best)

    def get_best_statements_per_property(self) -> "StatementList":
        """
        Best statements of each property, properties in order of first appearance.

        Preferred beats Normal; Deprecated statements are never returned.
        """
        result: List[Statement] = []
        for property_id in self.get_property_ids():
            result.extend(self.get_by_property(property_id).get_best_statements())
        return StatementList(result)

    def to_list(self) -> List[Statement]:
        return list(self._statements)

    def __iter__(self) -> Iterator[Statement]:
        return iter(self._statements)

    def __len__(self) -> int:
        return len(self._statements)

    def __bool__(self) -> bool:
        return bool(self._statements)

    def __eq__(self, other) -> bool:
        if not isinstance(other, StatementList):
            return NotImplemented
        return self._statements == other._statements

    def __repr__(self) -> str:
        return f"StatementList({self._statements!r})"


# =============================================================================
# Entities
# =============================================================================

@dataclass
class SiteLink:
    site_id: str
    page_name: str
    badges: List[ItemId] = field(default_factory=list)


@dataclass
class Entity:
    """Common fields of all entities: id, terms and statements."""
    id: EntityId
    labels: Dict[str, str] = field(default_factory=dict)
    descriptions: Dict[str, str] = field(default_factory=dict)
    aliases: Dict[str, List[str]] = field(default_factory=dict)
    statements: StatementList = field(default_factory=StatementList)

    def __post_init__(self):
        if not isinstance(self.statements, StatementList):
            self.statements = StatementList(self.statements)

    @property
    def entity_type(self) -> str:
        return self.id.entity_type


@dataclass
class Item(Entity):
    sitelinks: List[SiteLink] = field(default_factory=list)

    def get_sitelink(self, site_id: str) -> Optional[SiteLink]:
        for sitelink in self.sitelinks:
            if sitelink.site_id == site_id:
                return sitelink
        return None


@dataclass
class Property(Entity):
    data_type: str = "string"


@dataclass
class EntityRevision:
    """An entity as of one revision. ``timestamp`` is ISO 8601, e.g. ``2015-03-01T12:00:00Z``."""
    entity: Entity
    revision_id: int = 0
    timestamp: str = ""

    @property
    def entity_id(self) -> EntityId:
        return self.entity.id
