"""
Entity RDF builders.

Each builder maps one part of the entity model onto an RdfWriter.
"""

from entity_rdf.builders.base import EntityRdfBuilder
from entity_rdf.builders.values import (
    ComplexValueRdfHelper,
    DispatchingValueRdfBuilder,
    ValueSnakRdfBuilder,
    create_value_builder,
)
from entity_rdf.builders.snaks import SnakRdfBuilder
from entity_rdf.builders.statements import FullStatementRdfBuilder, TruthyStatementRdfBuilder
from entity_rdf.builders.terms import TermsRdfBuilder
from entity_rdf.builders.sitelinks import SiteLinksRdfBuilder
from entity_rdf.builders.properties import PropertyRdfBuilder

__all__ = [
    "EntityRdfBuilder",
    "ComplexValueRdfHelper",
    "DispatchingValueRdfBuilder",
    "ValueSnakRdfBuilder",
    "create_value_builder",
    "SnakRdfBuilder",
    "FullStatementRdfBuilder",
    "TruthyStatementRdfBuilder",
    "TermsRdfBuilder",
    "SiteLinksRdfBuilder",
    "PropertyRdfBuilder",
]
