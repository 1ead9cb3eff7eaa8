"""
Property declaration builder.

Links a property entity to its data type and to the predicates it
appears as in the rest of the output.
"""

from entity_rdf.builders.base import EntityRdfBuilder
from entity_rdf.models import Entity, Property
from entity_rdf.vocabulary import (
    NS_DIRECT_CLAIM,
    NS_ENTITY,
    NS_NOVALUE,
    NS_ONTOLOGY,
    NS_QUALIFIER,
    NS_VALUE,
    RdfVocabulary,
)
from entity_rdf.writer import RdfWriter

# predicate linking the property to each of its derived predicates
PREDICATE_LINKS = (
    ("directClaim", NS_DIRECT_CLAIM),
    ("claim", NS_ENTITY),
    ("statementProperty", NS_VALUE),
    ("qualifier", NS_QUALIFIER),
    ("reference", NS_VALUE),
    ("novalue", NS_NOVALUE),
)


class PropertyRdfBuilder(EntityRdfBuilder):
    def __init__(self, vocabulary: RdfVocabulary, writer: RdfWriter):
        self.vocabulary = vocabulary
        self.writer = writer

    def add_entity(self, entity: Entity) -> None:
        if not isinstance(entity, Property):
            return

        lname = self.vocabulary.get_entity_lname(entity.id)
        self.writer.about(NS_ENTITY, lname) \
            .say(NS_ONTOLOGY, "propertyType") \
            .is_(NS_ONTOLOGY, self.vocabulary.get_data_type_name(entity.data_type))

        for link, namespace in PREDICATE_LINKS:
            self.writer.say(NS_ONTOLOGY, link).is_(namespace, lname)
