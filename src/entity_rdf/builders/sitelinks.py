"""
Sitelinks builder.
"""

import logging
from typing import Iterable, Optional, Set

from entity_rdf.builders.base import EntityRdfBuilder
from entity_rdf.models import Entity, Item
from entity_rdf.sites import SiteList
from entity_rdf.vocabulary import NS_ENTITY, NS_ONTOLOGY, NS_SCHEMA_ORG, RdfVocabulary
from entity_rdf.writer import RdfWriter
from entity_rdf.writer.escaping import is_absolute_iri

logger = logging.getLogger(__name__)


class SiteLinksRdfBuilder(EntityRdfBuilder):
    """
    Writes each sitelink of an item as an article node::

        <https://en.wikipedia.org/wiki/Berlin> a schema:Article ;
            schema:about entity:Q64 ;
            schema:inLanguage "en" ;
            wikibase:badge entity:Q17437796 .

    Links to sites missing from the site list are skipped with a warning.
    """

    def __init__(
        self,
        vocabulary: RdfVocabulary,
        writer: RdfWriter,
        sites: SiteList,
        languages: Optional[Iterable[str]] = None,
    ):
        self.vocabulary = vocabulary
        self.writer = writer
        self.sites = sites
        self.languages: Optional[Set[str]] = set(languages) if languages is not None else None

    def add_entity(self, entity: Entity) -> None:
        if not isinstance(entity, Item):
            return

        entity_lname = self.vocabulary.get_entity_lname(entity.id)
        for sitelink in entity.sitelinks:
            site = self.sites.get_site(sitelink.site_id)
            if site is None:
                logger.warning(f"Unknown site {sitelink.site_id!r} in sitelinks of {entity.id}, skipping")
                continue

            language = site.language_code
            if self.languages is not None and language not in self.languages:
                continue

            url = site.page_url(sitelink.page_name)
            if not is_absolute_iri(url):
                logger.warning(f"Site {site.global_id!r} does not produce absolute page URLs: {url!r}")
                continue

            self.writer.about(url) \
                .a(NS_SCHEMA_ORG, "Article") \
                .say(NS_SCHEMA_ORG, "about").is_(NS_ENTITY, entity_lname) \
                .say(NS_SCHEMA_ORG, "inLanguage").text(language)

            for badge in sitelink.badges:
                self.writer.say(NS_ONTOLOGY, "badge") \
                    .is_(NS_ENTITY, self.vocabulary.get_entity_lname(badge))
