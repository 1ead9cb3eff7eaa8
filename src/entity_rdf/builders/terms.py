"""
Terms builder: labels, descriptions and aliases.
"""

from typing import Iterable, Optional, Set

from entity_rdf.builders.base import EntityRdfBuilder
from entity_rdf.models import Entity
from entity_rdf.vocabulary import NS_ENTITY, NS_RDFS, NS_SCHEMA_ORG, NS_SKOS, RdfVocabulary
from entity_rdf.writer import RdfWriter


class TermsRdfBuilder(EntityRdfBuilder):
    """
    Writes labels as ``rdfs:label``, ``skos:prefLabel`` and ``schema:name``,
    descriptions as ``schema:description`` and aliases as ``skos:altLabel``.

    Args:
        vocabulary: Namespace registry
        writer: Document writer
        languages: Only write terms in these languages (None for all)
    """

    def __init__(self, vocabulary: RdfVocabulary, writer: RdfWriter, languages: Optional[Iterable[str]] = None):
        self.vocabulary = vocabulary
        self.writer = writer
        self.languages: Optional[Set[str]] = set(languages) if languages is not None else None

    def is_language_included(self, language: str) -> bool:
        return self.languages is None or language in self.languages

    def add_entity(self, entity: Entity) -> None:
        self._add_terms(entity, with_aliases=True)

    def add_entity_stub(self, entity: Entity) -> None:
        self._add_terms(entity, with_aliases=False)

    def _add_terms(self, entity: Entity, with_aliases: bool) -> None:
        labels = [(lang, text) for lang, text in entity.labels.items() if self.is_language_included(lang)]
        descriptions = [
            (lang, text) for lang, text in entity.descriptions.items() if self.is_language_included(lang)
        ]
        aliases = []
        if with_aliases:
            aliases = [
                (lang, alias)
                for lang, texts in entity.aliases.items()
                if self.is_language_included(lang)
                for alias in texts
            ]
        if not (labels or descriptions or aliases):
            return

        self.writer.about(NS_ENTITY, self.vocabulary.get_entity_lname(entity.id))
        for language, text in labels:
            self.writer.say(NS_RDFS, "label").text(text, language)
            self.writer.say(NS_SKOS, "prefLabel").text(text, language)
            self.writer.say(NS_SCHEMA_ORG, "name").text(text, language)
        for language, text in descriptions:
            self.writer.say(NS_SCHEMA_ORG, "description").text(text, language)
        for language, alias in aliases:
            self.writer.say(NS_SKOS, "altLabel").text(alias, language)
