"""
entity-rdf: Streaming RDF export of Wikibase-style knowledge-base entities.

Writes items and properties with their terms, statements, qualifiers,
references, sitelinks and expanded values as Turtle, N3 or N-Triples.
"""

__version__ = "0.1.0"

from entity_rdf.flavor import Flavor
from entity_rdf.models import (
    EntityId,
    ItemId,
    PropertyId,
    Item,
    Property,
    EntityRevision,
    Statement,
    StatementList,
    Reference,
    Rank,
    parse_entity_id,
)
from entity_rdf.vocabulary import RdfVocabulary
from entity_rdf.dedup import HashDedupBag, NullDedupBag
from entity_rdf.rdf_builder import RdfBuilder
from entity_rdf.serializer import RdfSerializer, create_rdf_serializer
from entity_rdf.dump import RdfDumpGenerator, DumpStats
from entity_rdf.config import ExportConfig, ConfigValidator, ConfigValidationError
from entity_rdf.writer import RdfWriterFactory, ProtocolError, UnknownFormatError

__all__ = [
    "Flavor",
    "EntityId",
    "ItemId",
    "PropertyId",
    "Item",
    "Property",
    "EntityRevision",
    "Statement",
    "StatementList",
    "Reference",
    "Rank",
    "parse_entity_id",
    "RdfVocabulary",
    "HashDedupBag",
    "NullDedupBag",
    "RdfBuilder",
    "RdfSerializer",
    "create_rdf_serializer",
    "RdfDumpGenerator",
    "DumpStats",
    "ExportConfig",
    "ConfigValidator",
    "ConfigValidationError",
    "RdfWriterFactory",
    "ProtocolError",
    "UnknownFormatError",
]
