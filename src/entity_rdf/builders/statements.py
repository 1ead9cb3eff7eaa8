"""
Statement builders.

Truthy statements are the best-ranked statements of each property,
written directly on the entity under the direct claim namespace::

    entity:Q1 direct:P2 entity:Q5 .

Full statements get a node of their own::

    entity:Q1 entity:P2 statement:Q1-4b2c .

    statement:Q1-4b2c a wikibase:Statement ;
        value:P2 entity:Q5 ;
        wikibase:rank wikibase:PreferredRank ;
        qualifier:P3 "x" ;
        prov:wasDerivedFrom reference:9f0d .

    reference:9f0d a wikibase:Reference ;
        value:P4 <http://example.com> .
"""

import logging
from typing import List, Tuple

from entity_rdf.builders.base import EntityRdfBuilder
from entity_rdf.builders.snaks import SnakRdfBuilder
from entity_rdf.dedup import DedupBag
from entity_rdf.models import Entity, Rank, Reference, Statement
from entity_rdf.vocabulary import (
    NS_DIRECT_CLAIM,
    NS_ENTITY,
    NS_ONTOLOGY,
    NS_PROV,
    NS_QUALIFIER,
    NS_REFERENCE,
    NS_STATEMENT,
    NS_VALUE,
    RdfVocabulary,
)
from entity_rdf.writer import RdfWriter

logger = logging.getLogger(__name__)


class TruthyStatementRdfBuilder(EntityRdfBuilder):
    """Writes the best statements of each property as direct claims."""

    def __init__(self, vocabulary: RdfVocabulary, writer: RdfWriter, snak_builder: SnakRdfBuilder):
        self.vocabulary = vocabulary
        self.writer = writer
        self.snak_builder = snak_builder

    def add_entity(self, entity: Entity) -> None:
        best = entity.statements.get_best_statements_per_property()
        snaks = [s.main_snak for s in best if self.snak_builder.can_add_snak(s.main_snak)]
        if not snaks:
            return

        self.writer.about(NS_ENTITY, self.vocabulary.get_entity_lname(entity.id))
        for snak in snaks:
            self.snak_builder.add_snak(self.writer, snak, NS_DIRECT_CLAIM)


class FullStatementRdfBuilder(EntityRdfBuilder):
    """
    Writes every statement as a statement node.

    Args:
        vocabulary: Namespace registry
        writer: Document writer
        snak_builder: Snak builder, with expanded values when full values are on
        dedup: Dedup bag for reference nodes
        produce_qualifiers: Write qualifier snaks
        produce_references: Write references
    """

    def __init__(
        self,
        vocabulary: RdfVocabulary,
        writer: RdfWriter,
        snak_builder: SnakRdfBuilder,
        dedup: DedupBag,
        produce_qualifiers: bool = True,
        produce_references: bool = True,
    ):
        self.vocabulary = vocabulary
        self.writer = writer
        self.snak_builder = snak_builder
        self.dedup = dedup
        self.produce_qualifiers = produce_qualifiers
        self.produce_references = produce_references

    def add_entity(self, entity: Entity) -> None:
        entity_lname = self.vocabulary.get_entity_lname(entity.id)
        for statement in entity.statements:
            self.add_statement(entity_lname, statement)

    def add_statement(self, entity_lname: str, statement: Statement) -> None:
        statement_lname = self.vocabulary.get_statement_lname(statement)
        property_lname = self.vocabulary.get_entity_lname(statement.property_id)

        self.writer.about(NS_ENTITY, entity_lname) \
            .say(NS_ENTITY, property_lname) \
            .is_(NS_STATEMENT, statement_lname)

        self.writer.about(NS_STATEMENT, statement_lname).a(NS_ONTOLOGY, "Statement")
        self.snak_builder.add_snak(self.writer, statement.main_snak, NS_VALUE)

        if statement.rank is not Rank.NORMAL:
            self.writer.say(NS_ONTOLOGY, "rank") \
                .is_(NS_ONTOLOGY, self.vocabulary.get_rank_name(statement.rank))

        if self.produce_qualifiers:
            for qualifier in statement.qualifiers:
                self.snak_builder.add_snak(self.writer, qualifier, NS_QUALIFIER)

        if self.produce_references:
            self._add_references(statement)

    def _add_references(self, statement: Statement) -> None:
        # links first, the statement block must stay open until all are written
        new_references: List[Tuple[str, Reference]] = []
        for reference in statement.references:
            reference_lname = self.vocabulary.get_reference_lname(reference)
            self.writer.say(NS_PROV, "wasDerivedFrom").is_(NS_REFERENCE, reference_lname)
            if not self.dedup.already_seen(reference_lname, "R"):
                new_references.append((reference_lname, reference))

        for reference_lname, reference in new_references:
            self.writer.about(NS_REFERENCE, reference_lname).a(NS_ONTOLOGY, "Reference")
            for snak in reference.snaks:
                self.snak_builder.add_snak(self.writer, snak, NS_VALUE)
