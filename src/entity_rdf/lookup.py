"""
Lookup interfaces for entity data.

The RDF builders never load entities themselves. They reach storage
through these small interfaces; in-memory implementations back the
JSON dump input, the HTTP router and the tests.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Union

from entity_rdf.models import (
    Entity,
    EntityId,
    EntityRevision,
    Property,
    PropertyId,
    parse_entity_id,
)

logger = logging.getLogger(__name__)


class EntityLookupError(LookupError):
    """Raised when an entity cannot be loaded (as opposed to not existing)."""
    pass


class PropertyDataTypeLookupError(LookupError):
    """Raised when the data type of a property is not known."""
    pass


class EntityLookup(ABC):
    @abstractmethod
    def get_entity(self, entity_id: EntityId) -> Optional[Entity]:
        """
        Returns:
            The entity, or None if it does not exist

        Raises:
            EntityLookupError: if the entity could not be loaded
        """
        ...

    def has_entity(self, entity_id: EntityId) -> bool:
        return self.get_entity(entity_id) is not None


class EntityRevisionLookup(ABC):
    @abstractmethod
    def get_entity_revision(self, entity_id: EntityId) -> Optional[EntityRevision]:
        ...


class PropertyDataTypeLookup(ABC):
    @abstractmethod
    def get_data_type_id_for_property(self, property_id: PropertyId) -> str:
        """
        Raises:
            PropertyDataTypeLookupError: if the property is unknown
        """
        ...


class InMemoryEntityLookup(EntityLookup, EntityRevisionLookup):
    """Entity and revision lookup over a dict of entity revisions."""

    def __init__(self, entities: Optional[Iterable[Union[Entity, EntityRevision]]] = None):
        self._revisions: Dict[EntityId, EntityRevision] = {}
        for entity in entities or []:
            if isinstance(entity, EntityRevision):
                self.add_entity_revision(entity)
            else:
                self.add_entity(entity)

    def add_entity(self, entity: Entity, revision_id: int = 0, timestamp: str = "") -> None:
        self.add_entity_revision(EntityRevision(entity, revision_id, timestamp))

    def add_entity_revision(self, revision: EntityRevision) -> None:
        self._revisions[revision.entity_id] = revision

    def get_entity(self, entity_id: EntityId) -> Optional[Entity]:
        revision = self._revisions.get(entity_id)
        return revision.entity if revision is not None else None

    def get_entity_revision(self, entity_id: EntityId) -> Optional[EntityRevision]:
        return self._revisions.get(entity_id)

    def get_entity_ids(self) -> List[EntityId]:
        return list(self._revisions)

    def __contains__(self, entity_id: EntityId) -> bool:
        return entity_id in self._revisions

    def __len__(self) -> int:
        return len(self._revisions)


class InMemoryPropertyDataTypeLookup(PropertyDataTypeLookup):
    """Data type lookup over a dict of property id to data type id."""

    def __init__(self, data_types: Optional[Dict[Union[str, PropertyId], str]] = None):
        self._data_types: Dict[PropertyId, str] = {}
        for property_id, data_type in (data_types or {}).items():
            self.set_data_type_for_property(property_id, data_type)

    def set_data_type_for_property(self, property_id: Union[str, PropertyId], data_type: str) -> None:
        if isinstance(property_id, str):
            property_id = parse_entity_id(property_id)
        self._data_types[property_id] = data_type

    def get_data_type_id_for_property(self, property_id: PropertyId) -> str:
        try:
            return self._data_types[property_id]
        except KeyError:
            raise PropertyDataTypeLookupError(f"Unknown property: {property_id}")

    def to_dict(self) -> Dict[str, str]:
        return {pid.serialization: data_type for pid, data_type in self._data_types.items()}


class EntityLookupPropertyDataTypeLookup(PropertyDataTypeLookup):
    """Reads the data type from the property entity itself."""

    def __init__(self, entity_lookup: EntityLookup):
        self.entity_lookup = entity_lookup

    def get_data_type_id_for_property(self, property_id: PropertyId) -> str:
        try:
            entity = self.entity_lookup.get_entity(property_id)
        except EntityLookupError as e:
            raise PropertyDataTypeLookupError(f"Failed to load property {property_id}: {e}")
        if not isinstance(entity, Property):
            raise PropertyDataTypeLookupError(f"Unknown property: {property_id}")
        return entity.data_type


class CachingPropertyDataTypeLookup(PropertyDataTypeLookup):
    """
    Caches data types of another lookup.

    The cache is an injected mapping, so callers decide its scope (one per
    run, or shared between runs). Failed lookups are not cached.
    """

    def __init__(self, inner: PropertyDataTypeLookup, cache: Optional[Dict[PropertyId, str]] = None):
        self.inner = inner
        self.cache = cache if cache is not None else {}

    def get_data_type_id_for_property(self, property_id: PropertyId) -> str:
        data_type = self.cache.get(property_id)
        if data_type is None:
            data_type = self.inner.get_data_type_id_for_property(property_id)
            self.cache[property_id] = data_type
        return data_type
