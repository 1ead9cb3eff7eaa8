"""
Snak builder: writes one snak under a given predicate namespace.
"""

import logging
from typing import Optional

from entity_rdf.builders.values import DispatchingValueRdfBuilder
from entity_rdf.lookup import PropertyDataTypeLookup, PropertyDataTypeLookupError
from entity_rdf.mentions import MentionTracker
from entity_rdf.models import (
    PropertyNoValueSnak,
    PropertySomeValueSnak,
    PropertyValueSnak,
    Snak,
)
from entity_rdf.vocabulary import NS_NOVALUE, RdfVocabulary
from entity_rdf.writer import RdfWriter
from entity_rdf.writer.base import BLANK_BASE

logger = logging.getLogger(__name__)


class SnakRdfBuilder:
    """
    Writes value, some-value and no-value snaks.

    - value: delegated to the value builder
    - some-value: the property with a fresh blank node as object
    - no-value: ``a novalue:P`` on the subject

    The snak's property is reported to the mention tracker in every case.
    """

    def __init__(
        self,
        vocabulary: RdfVocabulary,
        value_builder: DispatchingValueRdfBuilder,
        property_lookup: PropertyDataTypeLookup,
        mentions: MentionTracker,
    ):
        self.vocabulary = vocabulary
        self.value_builder = value_builder
        self.property_lookup = property_lookup
        self.mentions = mentions

    def get_data_type(self, snak: PropertyValueSnak) -> Optional[str]:
        """
        Property data type for a value snak.

        Only string values need it, to tell URLs and media files from plain
        strings. A failed lookup degrades to ``string``.
        """
        if snak.data_value.value_type != "string":
            return None
        try:
            return self.property_lookup.get_data_type_id_for_property(snak.property_id)
        except PropertyDataTypeLookupError as e:
            logger.debug(f"No data type for {snak.property_id}, assuming string: {e}")
            return "string"

    def can_add_snak(self, snak: Snak) -> bool:
        """Whether :meth:`add_snak` would write a triple for this snak."""
        if isinstance(snak, PropertyValueSnak):
            return self.value_builder.can_add_value(self.get_data_type(snak), snak.data_value)
        return isinstance(snak, (PropertySomeValueSnak, PropertyNoValueSnak))

    def add_snak(self, writer: RdfWriter, snak: Snak, namespace: str) -> None:
        property_lname = self.vocabulary.get_entity_lname(snak.property_id)

        if isinstance(snak, PropertyValueSnak):
            data_type = self.get_data_type(snak)
            self.value_builder.add_value(writer, namespace, property_lname, data_type, snak.data_value)
        elif isinstance(snak, PropertySomeValueSnak):
            writer.say(namespace, property_lname).is_(BLANK_BASE, writer.blank())
        elif isinstance(snak, PropertyNoValueSnak):
            writer.a(NS_NOVALUE, property_lname)
        else:
            logger.warning(f"Unsupported snak type {type(snak).__name__} for {snak.property_id}, skipping")

        self.mentions.entity_mentioned(snak.property_id)
