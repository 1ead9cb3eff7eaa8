"""
Entity orchestrator.

RdfBuilder composes the per-aspect builders selected by a flavor and
drives whole-entity emission into one writer. It also tracks entities
that are only mentioned (as properties or entity values) so they can be
emitted as stubs at the end of the document.

Usage::

    builder = RdfBuilder(sites, vocabulary, property_lookup, Flavor.FULL, writer)
    builder.start_document()
    builder.add_entity(item)
    builder.resolve_mentioned_entities(entity_lookup)
    turtle = builder.get_rdf()
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Union

from entity_rdf.builders import (
    ComplexValueRdfHelper,
    EntityRdfBuilder,
    FullStatementRdfBuilder,
    PropertyRdfBuilder,
    SiteLinksRdfBuilder,
    SnakRdfBuilder,
    TermsRdfBuilder,
    TruthyStatementRdfBuilder,
    create_value_builder,
)
from entity_rdf.dedup import DedupBag, HashDedupBag
from entity_rdf.flavor import Flavor
from entity_rdf.lookup import EntityLookup, EntityLookupError, PropertyDataTypeLookup
from entity_rdf.mentions import MentionTracker
from entity_rdf.models import Entity, EntityId
from entity_rdf.sites import SiteList
from entity_rdf.vocabulary import (
    FORMAT_VERSION,
    LICENSE,
    NS_CC,
    NS_DATA,
    NS_ENTITY,
    NS_ONTOLOGY,
    NS_SCHEMA_ORG,
    NS_XSD,
    RdfVocabulary,
)
from entity_rdf.writer import RdfWriter

logger = logging.getLogger(__name__)

Timestamp = Union[str, int, float, datetime, None]


def format_timestamp(timestamp: Timestamp) -> str:
    """
    Normalize a timestamp to the ``xsd:dateTime`` form ``YYYY-MM-DDThh:mm:ssZ``.

    Accepts datetimes, Unix timestamps, 14 digit ``YYYYMMDDhhmmss`` strings
    and ISO 8601 strings (returned unchanged).
    """
    if timestamp is None or timestamp == "":
        timestamp = 0
    if isinstance(timestamp, str) and len(timestamp) == 14 and timestamp.isdigit():
        timestamp = datetime.strptime(timestamp, "%Y%m%d%H%M%S").replace(tzinfo=timezone.utc)
    if isinstance(timestamp, (int, float)) and not isinstance(timestamp, bool):
        timestamp = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    if isinstance(timestamp, datetime):
        if timestamp.tzinfo is not None:
            timestamp = timestamp.astimezone(timezone.utc)
        return timestamp.strftime("%Y-%m-%dT%H:%M:%SZ")
    if isinstance(timestamp, str):
        return timestamp
    raise ValueError(f"Unsupported timestamp: {timestamp!r}")


class RdfBuilder:
    """
    Writes entities into one RDF document.

    One builder serves one export run: it owns the run's mention table and
    uses the run's dedup bag.

    Args:
        sites: Site registry for sitelinks
        vocabulary: Namespace registry
        property_lookup: Property data type lookup
        flavor: Aspects to produce
        writer: Document writer
        dedup: Dedup bag for value and reference nodes (a fresh HashDedupBag by default)
        languages: Only write terms and sitelinks in these languages (None for all)
    """

    def __init__(
        self,
        sites: SiteList,
        vocabulary: RdfVocabulary,
        property_lookup: PropertyDataTypeLookup,
        flavor: Flavor,
        writer: RdfWriter,
        dedup: Optional[DedupBag] = None,
        languages: Optional[Iterable[str]] = None,
    ):
        self.sites = sites
        self.vocabulary = vocabulary
        self.property_lookup = property_lookup
        self.flavor = Flavor(flavor)
        self.writer = writer
        self.dedup = dedup if dedup is not None else HashDedupBag()
        self.languages = list(languages) if languages is not None else None
        self.mentions = MentionTracker()

        self._terms_builder = TermsRdfBuilder(vocabulary, writer, self.languages)
        self._builders = self._create_builders()

    # -------------------------------------------------------------------------
    # Composition
    # -------------------------------------------------------------------------

    def _create_builders(self) -> List[EntityRdfBuilder]:
        builders: List[EntityRdfBuilder] = [self._terms_builder]

        if self.should_produce(Flavor.SITELINKS):
            builders.append(SiteLinksRdfBuilder(self.vocabulary, self.writer, self.sites, self.languages))

        if self.should_produce(Flavor.TRUTHY_STATEMENTS):
            simple_values = create_value_builder(self.vocabulary, self.mentions)
            snak_builder = SnakRdfBuilder(self.vocabulary, simple_values, self.property_lookup, self.mentions)
            builders.append(TruthyStatementRdfBuilder(self.vocabulary, self.writer, snak_builder))

        if self.should_produce(Flavor.ALL_STATEMENTS):
            complex_helper = None
            if self.should_produce(Flavor.FULL_VALUES):
                complex_helper = ComplexValueRdfHelper(self.vocabulary, self.writer, self.dedup)
            values = create_value_builder(self.vocabulary, self.mentions, complex_helper)
            snak_builder = SnakRdfBuilder(self.vocabulary, values, self.property_lookup, self.mentions)
            builders.append(FullStatementRdfBuilder(
                self.vocabulary,
                self.writer,
                snak_builder,
                self.dedup,
                produce_qualifiers=self.should_produce(Flavor.QUALIFIERS),
                produce_references=self.should_produce(Flavor.REFERENCES),
            ))

        if self.should_produce(Flavor.PROPERTIES):
            builders.append(PropertyRdfBuilder(self.vocabulary, self.writer))

        return builders

    def should_produce(self, aspect: Flavor) -> bool:
        return bool(self.flavor & aspect)

    # -------------------------------------------------------------------------
    # Document
    # -------------------------------------------------------------------------

    def get_namespaces(self) -> Dict[str, str]:
        return self.vocabulary.get_namespaces()

    def start_document(self) -> None:
        """Start the document and write the prefix declarations."""
        self.writer.start()
        for prefix, uri in self.vocabulary.get_namespaces().items():
            self.writer.prefix(prefix, uri)

    def finish_document(self) -> None:
        self.writer.finish()

    def get_rdf(self) -> str:
        """Drain the writer. A drained document needs :meth:`start_document` or ``writer.start()`` before reuse."""
        return self.writer.drain()

    def get_mime_type(self) -> str:
        return self.writer.mime_type

    # -------------------------------------------------------------------------
    # Entities
    # -------------------------------------------------------------------------

    def add_entity(self, entity: Entity) -> None:
        """Write an entity with every aspect of the flavor, then mark it resolved."""
        self._add_entity_meta_data(entity)
        for builder in self._builders:
            builder.add_entity(entity)
        self.mentions.entity_resolved(entity.id)

    def add_entity_stub(self, entity: Entity) -> None:
        """Write metadata, labels and descriptions only, then mark the entity resolved."""
        self._add_entity_meta_data(entity)
        self._terms_builder.add_entity_stub(entity)
        self.mentions.entity_resolved(entity.id)

    def _add_entity_meta_data(self, entity: Entity) -> None:
        entity_lname = self.vocabulary.get_entity_lname(entity.id)

        self.writer.about(NS_DATA, entity_lname) \
            .a(NS_SCHEMA_ORG, "Dataset") \
            .say(NS_SCHEMA_ORG, "about").is_(NS_ENTITY, entity_lname)

        if self.should_produce(Flavor.VERSION_INFO):
            # dumps carry this once, in the dump header
            self.writer.say(NS_CC, "license").is_(LICENSE)
            self.writer.say(NS_SCHEMA_ORG, "softwareVersion").text(FORMAT_VERSION)

        self.writer.about(NS_ENTITY, entity_lname) \
            .a(NS_ONTOLOGY, self.vocabulary.get_entity_type_name(entity.entity_type))

    def add_entity_revision_info(self, entity_id: EntityId, revision: int, timestamp: Timestamp) -> None:
        """Write the revision id and modification time of an entity's data document."""
        self.writer.about(NS_DATA, self.vocabulary.get_entity_lname(entity_id)) \
            .say(NS_SCHEMA_ORG, "version").value(int(revision), NS_XSD, "integer") \
            .say(NS_SCHEMA_ORG, "dateModified").value(format_timestamp(timestamp), NS_XSD, "dateTime")

    def add_dump_header(self, timestamp: Timestamp = 0) -> None:
        """Write the dataset description at the top of a dump."""
        self.writer.about(NS_ONTOLOGY, "Dump") \
            .a(NS_SCHEMA_ORG, "Dataset") \
            .say(NS_CC, "license").is_(LICENSE) \
            .say(NS_SCHEMA_ORG, "softwareVersion").text(FORMAT_VERSION) \
            .say(NS_SCHEMA_ORG, "dateModified").value(format_timestamp(timestamp), NS_XSD, "dateTime")

    def resolve_mentioned_entities(self, entity_lookup: EntityLookup) -> int:
        """
        Write stubs for entities mentioned but not written.

        Stubs never pull in further entities. Ids the lookup does not know,
        or fails to load, are skipped.

        Returns:
            Number of stubs written
        """
        count = 0
        for entity_id in self.mentions.get_unresolved():
            try:
                entity = entity_lookup.get_entity(entity_id)
            except EntityLookupError as e:
                logger.info(f"Failed to load mentioned entity {entity_id}, skipping: {e}")
                continue
            if entity is None:
                logger.debug(f"Mentioned entity {entity_id} not found, skipping")
                continue
            self.add_entity_stub(entity)
            count += 1
        return count
