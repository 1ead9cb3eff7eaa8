"""
Serializer facade: one RDF document per entity revision.
"""

import logging
from typing import Dict, Iterable, Optional

from entity_rdf.dedup import DedupBag, HashDedupBag
from entity_rdf.flavor import Flavor
from entity_rdf.lookup import (
    CachingPropertyDataTypeLookup,
    EntityLookup,
    EntityLookupPropertyDataTypeLookup,
    PropertyDataTypeLookup,
)
from entity_rdf.models import EntityRevision
from entity_rdf.rdf_builder import RdfBuilder, Timestamp
from entity_rdf.sites import SiteList
from entity_rdf.vocabulary import RdfVocabulary
from entity_rdf.writer import RdfWriter, RdfWriterFactory

logger = logging.getLogger(__name__)


class RdfSerializer:
    """
    Serializes entity revisions with a fixed format and flavor.

    Each call produces a complete document with its own prolog and its own
    dedup bag. Mentioned entities are resolved into stubs when the flavor
    includes RESOLVED_ENTITIES.

    Args:
        format_name: Format name, file extension or MIME type
        vocabulary: Namespace registry
        sites: Site registry for sitelinks
        property_lookup: Property data type lookup
        entity_lookup: Lookup used to resolve mentioned entities
        flavor: Aspects to produce
        dedup_cutoff: Bucket key length of each document's dedup bag (None to remember every hash)
        languages: Only write terms and sitelinks in these languages (None for all)

    Raises:
        UnknownFormatError: if the format is not supported
    """

    def __init__(
        self,
        format_name: str,
        vocabulary: RdfVocabulary,
        sites: SiteList,
        property_lookup: PropertyDataTypeLookup,
        entity_lookup: EntityLookup,
        flavor: Flavor,
        dedup_cutoff: Optional[int] = 5,
        languages: Optional[Iterable[str]] = None,
        writer_factory: Optional[RdfWriterFactory] = None,
    ):
        self.writer_factory = writer_factory or RdfWriterFactory()
        self.format_name = self.writer_factory.get_writer(format_name).format_name
        self.vocabulary = vocabulary
        self.sites = sites
        self.property_lookup = property_lookup
        self.entity_lookup = entity_lookup
        self.flavor = Flavor(flavor)
        self.dedup_cutoff = dedup_cutoff
        self.languages = list(languages) if languages is not None else None

    def new_writer(self) -> RdfWriter:
        return self.writer_factory.get_writer(self.format_name)

    def new_dedup_bag(self) -> DedupBag:
        return HashDedupBag(cutoff=self.dedup_cutoff)

    def new_rdf_builder(self, writer: Optional[RdfWriter] = None, dedup: Optional[DedupBag] = None) -> RdfBuilder:
        """Create a builder over a fresh writer and dedup bag unless given."""
        return RdfBuilder(
            self.sites,
            self.vocabulary,
            self.property_lookup,
            self.flavor,
            writer if writer is not None else self.new_writer(),
            dedup if dedup is not None else self.new_dedup_bag(),
            self.languages,
        )

    def get_namespaces(self) -> Dict[str, str]:
        return self.vocabulary.get_namespaces()

    @property
    def default_mime_type(self) -> str:
        return self.new_writer().mime_type

    @property
    def file_extension(self) -> str:
        return self.writer_factory.get_file_extension(self.format_name)

    def serialize_entity_revision(self, revision: EntityRevision) -> str:
        builder = self.new_rdf_builder()
        builder.start_document()
        self.write_entity_revision(builder, revision)
        return builder.get_rdf()

    def write_entity_revision(self, builder: RdfBuilder, revision: EntityRevision) -> int:
        """
        Write one revision into an already started builder.

        Returns:
            Number of stubs written for mentioned entities
        """
        builder.add_entity_revision_info(revision.entity_id, revision.revision_id, revision.timestamp)
        builder.add_entity(revision.entity)
        if builder.should_produce(Flavor.RESOLVED_ENTITIES):
            return builder.resolve_mentioned_entities(self.entity_lookup)
        return 0

    def dump_header(self, timestamp: Timestamp = 0) -> str:
        builder = self.new_rdf_builder()
        builder.start_document()
        builder.add_dump_header(timestamp)
        return builder.get_rdf()


def create_rdf_serializer(
    format_name: str,
    config,
    entity_lookup: EntityLookup,
    property_lookup: Optional[PropertyDataTypeLookup] = None,
    flavor: Optional[Flavor] = None,
) -> RdfSerializer:
    """
    Build a serializer from an :class:`~entity_rdf.config.ExportConfig`.

    Without an explicit property lookup, data types are read from the
    property entities themselves, cached per serializer.

    Raises:
        UnknownFormatError: if the format is not supported
    """
    if property_lookup is None:
        property_lookup = CachingPropertyDataTypeLookup(EntityLookupPropertyDataTypeLookup(entity_lookup))

    return RdfSerializer(
        format_name,
        RdfVocabulary(config.namespaces.base_uri, config.namespaces.data_uri),
        config.get_site_list(),
        property_lookup,
        entity_lookup,
        flavor if flavor is not None else config.get_flavor(),
        dedup_cutoff=config.output.dedup_cutoff or None,
        languages=config.output.languages,
    )
