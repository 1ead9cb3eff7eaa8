"""Shared fixtures for the RDF export tests."""
import pytest

from entity_rdf.dedup import HashDedupBag
from entity_rdf.flavor import Flavor
from entity_rdf.lookup import InMemoryEntityLookup, InMemoryPropertyDataTypeLookup
from entity_rdf.models import (
    EntityIdValue,
    Item,
    ItemId,
    MonolingualTextValue,
    Property,
    PropertyId,
    PropertySomeValueSnak,
    PropertyValueSnak,
    QuantityValue,
    Rank,
    Reference,
    SiteLink,
    Statement,
    StringValue,
    TimeValue,
)
from entity_rdf.rdf_builder import RdfBuilder
from entity_rdf.sites import Site, SiteList
from entity_rdf.vocabulary import RdfVocabulary
from entity_rdf.writer import RdfWriterFactory

BASE_URI = "http://www.wikidata.org/entity/"
DATA_URI = "http://www.wikidata.org/wiki/Special:EntityData/"


@pytest.fixture
def vocabulary():
    return RdfVocabulary(BASE_URI, DATA_URI)


@pytest.fixture
def site_list():
    return SiteList([
        Site("enwiki", "en", "https://en.wikipedia.org/wiki/$1", "wikipedia"),
        Site("dewiki", "de", "https://de.wikipedia.org/wiki/$1", "wikipedia"),
    ])


@pytest.fixture
def property_lookup():
    return InMemoryPropertyDataTypeLookup({
        "P1": "string",
        "P2": "wikibase-item",
        "P3": "url",
        "P4": "commonsMedia",
        "P5": "string",
        "P6": "time",
        "P7": "quantity",
        "P8": "monolingualtext",
    })


@pytest.fixture
def make_builder(vocabulary, site_list, property_lookup):
    """Factory for a started builder over a fresh writer."""
    def _make(flavor=Flavor.FULL, format_name="turtle", dedup=None, languages=None, start=True):
        writer = RdfWriterFactory().get_writer(format_name)
        builder = RdfBuilder(
            site_list,
            vocabulary,
            property_lookup,
            flavor,
            writer,
            dedup if dedup is not None else HashDedupBag(cutoff=None),
            languages,
        )
        if start:
            builder.start_document()
        return builder
    return _make


@pytest.fixture
def berlin():
    """An item exercising every aspect of the output."""
    source = Reference([PropertyValueSnak(PropertyId("P3"), StringValue("https://example.org/source"))])
    return Item(
        id=ItemId("Q64"),
        labels={"en": "Berlin", "de": "Berlin"},
        descriptions={"en": "capital of Germany"},
        aliases={"en": ["Berlin, Germany"]},
        statements=[
            Statement(
                PropertyValueSnak(PropertyId("P2"), EntityIdValue(ItemId("Q5119"))),
                qualifiers=[PropertyValueSnak(PropertyId("P6"), TimeValue("+1990-10-03T00:00:00Z"))],
                references=[source],
                rank=Rank.PREFERRED,
                guid="Q64$5D8A5B2A-1B6E-4E4C-9E3C-6A0A0D4F3C11",
            ),
            Statement(
                PropertyValueSnak(PropertyId("P2"), EntityIdValue(ItemId("Q515"))),
                guid="Q64$0E6F2C8B-9B5B-4C63-8F9A-4C4D3E2B1A00",
            ),
            Statement(
                PropertyValueSnak(PropertyId("P7"), QuantityValue("+3644826", "1", "+3644827", "+3644825")),
                references=[source],
                guid="Q64$A1B2C3D4-0000-4000-8000-000000000001",
            ),
            Statement(
                PropertyValueSnak(PropertyId("P8"), MonolingualTextValue("Berlin", "de")),
                guid="Q64$A1B2C3D4-0000-4000-8000-000000000002",
            ),
            Statement(
                PropertySomeValueSnak(PropertyId("P1")),
                guid="Q64$A1B2C3D4-0000-4000-8000-000000000003",
            ),
        ],
        sitelinks=[
            SiteLink("enwiki", "Berlin", [ItemId("Q17437796")]),
            SiteLink("dewiki", "Berlin"),
        ],
    )


@pytest.fixture
def entity_lookup(berlin):
    return InMemoryEntityLookup([
        berlin,
        Item(id=ItemId("Q5119"), labels={"en": "capital"}, aliases={"en": ["capital city"]}),
        Item(id=ItemId("Q515"), labels={"en": "city"}, descriptions={"en": "large human settlement"}),
        Property(id=PropertyId("P2"), labels={"en": "instance of"}, data_type="wikibase-item"),
    ])
