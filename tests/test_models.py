"""Tests for the entity model, flavors, lookups and small registries."""
import pytest

from entity_rdf.dedup import HashDedupBag, NullDedupBag
from entity_rdf.flavor import ASPECTS, PRESETS, Flavor
from entity_rdf.lookup import (
    CachingPropertyDataTypeLookup,
    EntityLookupPropertyDataTypeLookup,
    InMemoryEntityLookup,
    InMemoryPropertyDataTypeLookup,
    PropertyDataTypeLookup,
    PropertyDataTypeLookupError,
)
from entity_rdf.mentions import MentionState, MentionTracker
from entity_rdf.models import (
    EntityIdParsingError,
    EntityRevision,
    Item,
    ItemId,
    Property,
    PropertyId,
    PropertyNoValueSnak,
    PropertyValueSnak,
    Rank,
    Reference,
    Statement,
    StatementList,
    StringValue,
    entity_id_for_type,
    parse_entity_id,
)
from entity_rdf.sites import Site, SiteList


def statement(value, rank=Rank.NORMAL, property_id="P1"):
    return Statement(PropertyValueSnak(PropertyId(property_id), StringValue(value)), rank=rank)


# ========== Entity Id Tests ==========

class TestEntityIds:
    def test_parse(self):
        assert parse_entity_id("Q42") == ItemId("Q42")
        assert parse_entity_id(" P31 ") == PropertyId("P31")

    def test_normalizes_case(self):
        assert parse_entity_id("q42").serialization == "Q42"
        assert str(ItemId("q1")) == "Q1"

    def test_properties(self):
        assert ItemId("Q42").numeric_id == 42
        assert ItemId("Q42").entity_type == "item"
        assert PropertyId("P31").entity_type == "property"

    @pytest.mark.parametrize("value", ["", "X1", "Q", "Q0", "Q01", "P-1", "Q1a"])
    def test_invalid(self, value):
        with pytest.raises(EntityIdParsingError):
            parse_entity_id(value)

    def test_wrong_type(self):
        with pytest.raises(EntityIdParsingError):
            ItemId("P1")

    def test_entity_id_for_type(self):
        assert entity_id_for_type("item", 5) == ItemId("Q5")
        assert entity_id_for_type("property", 17) == PropertyId("P17")


# ========== Statement Tests ==========

class TestStatements:
    def test_references_are_unique(self):
        reference = Reference([PropertyNoValueSnak(PropertyId("P1"))])
        st = Statement(PropertyNoValueSnak(PropertyId("P2")), references=[reference, reference])
        assert len(st.references) == 1
        assert not st.add_reference(Reference([PropertyNoValueSnak(PropertyId("P1"))]))
        assert st.add_reference(Reference([PropertyNoValueSnak(PropertyId("P3"))]))

    def test_hash_depends_on_content(self):
        assert statement("a").get_hash() == statement("a").get_hash()
        assert statement("a").get_hash() != statement("b").get_hash()
        assert statement("a").get_hash() != statement("a", Rank.PREFERRED).get_hash()

    def test_value_hash(self):
        assert StringValue("x").get_hash() == StringValue("x").get_hash()
        assert len(StringValue("x").get_hash()) == 40

    def test_best_statements_prefer_preferred(self):
        statements = StatementList([
            statement("normal"),
            statement("preferred", Rank.PREFERRED),
            statement("deprecated", Rank.DEPRECATED),
        ])
        assert [s.main_snak.data_value.value for s in statements.get_best_statements()] == ["preferred"]

    def test_best_statements_keep_all_of_top_rank(self):
        statements = StatementList([statement("a"), statement("b"), statement("c", Rank.DEPRECATED)])
        assert len(statements.get_best_statements()) == 2

    def test_only_deprecated(self):
        assert not StatementList([statement("x", Rank.DEPRECATED)]).get_best_statements()

    def test_best_per_property(self):
        statements = StatementList([
            statement("a", property_id="P2"),
            statement("b", Rank.PREFERRED, property_id="P1"),
            statement("c", property_id="P1"),
        ])
        best = statements.get_best_statements_per_property()
        assert [s.main_snak.data_value.value for s in best] == ["a", "b"]
        assert statements.get_property_ids() == [PropertyId("P2"), PropertyId("P1")]

    def test_rank_names(self):
        assert Rank.from_name("preferred") is Rank.PREFERRED
        assert Rank.DEPRECATED.json_name == "deprecated"
        with pytest.raises(ValueError):
            Rank.from_name("best")

    def test_entity_wraps_statement_list(self):
        item = Item(id=ItemId("Q1"), statements=[statement("x")])
        assert isinstance(item.statements, StatementList)
        assert item.entity_type == "item"
        assert EntityRevision(item, 7).entity_id == ItemId("Q1")


# ========== Flavor Tests ==========

class TestFlavor:
    def test_presets(self):
        assert Flavor.TRUTHY == Flavor.TRUTHY_STATEMENTS | Flavor.SITELINKS
        assert not Flavor.DUMP & Flavor.VERSION_INFO
        assert not Flavor.DUMP & Flavor.RESOLVED_ENTITIES
        assert Flavor.FULL & Flavor.RESOLVED_ENTITIES
        assert PRESETS["dump"] is Flavor.DUMP

    def test_from_names(self):
        assert Flavor.from_names("truthy") == Flavor.TRUTHY
        assert Flavor.from_names("all-statements, qualifiers") == Flavor.ALL_STATEMENTS | Flavor.QUALIFIERS
        assert Flavor.from_names(["FULL_VALUES"]) == Flavor.FULL_VALUES
        assert Flavor.from_names("") == Flavor.NONE

    def test_unknown_name(self):
        with pytest.raises(ValueError, match="Unknown flavor"):
            Flavor.from_names("truthy,everything")

    def test_to_names(self):
        assert Flavor.TRUTHY.to_names() == ["truthy_statements", "sitelinks"]
        assert len(Flavor.FULL.to_names()) == len(ASPECTS)


# ========== Dedup Tests ==========

class TestDedupBags:
    def test_exact_bag(self):
        bag = HashDedupBag(cutoff=None)
        assert not bag.already_seen("abcdef")
        assert bag.already_seen("abcdef")

    def test_namespaces_are_separate(self):
        bag = HashDedupBag()
        assert not bag.already_seen("abcdef", "V")
        assert not bag.already_seen("abcdef", "R")
        assert bag.already_seen("abcdef", "V")

    def test_cutoff_collisions_never_hide_first_occurrence(self):
        bag = HashDedupBag(cutoff=2)
        assert not bag.already_seen("aa111")
        assert not bag.already_seen("aa222")
        assert not bag.already_seen("aa111")
        assert bag.already_seen("aa111")
        assert len(bag) == 1

    def test_invalid_cutoff(self):
        with pytest.raises(ValueError):
            HashDedupBag(cutoff=0)

    def test_null_bag(self):
        bag = NullDedupBag()
        assert not bag.already_seen("x")
        assert not bag.already_seen("x")


# ========== Mention Tests ==========

class TestMentionTracker:
    def test_states(self):
        tracker = MentionTracker()
        q1 = ItemId("Q1")
        assert tracker.get_state(q1) is MentionState.UNSEEN
        assert tracker.entity_mentioned(q1)
        assert not tracker.entity_mentioned(q1)
        assert tracker.get_state(q1) is MentionState.MENTIONED_UNRESOLVED
        tracker.entity_resolved(q1)
        assert tracker.is_resolved(q1)

    def test_resolved_is_terminal(self):
        tracker = MentionTracker()
        tracker.entity_resolved(ItemId("Q1"))
        assert not tracker.entity_mentioned(ItemId("Q1"))
        assert tracker.get_unresolved() == []
        assert tracker.get_resolved() == [ItemId("Q1")]

    def test_unresolved_in_mention_order(self):
        tracker = MentionTracker()
        for entity_id in ("Q3", "P1", "Q2"):
            tracker.entity_mentioned(parse_entity_id(entity_id))
        tracker.entity_resolved(PropertyId("P1"))
        assert tracker.get_unresolved() == [ItemId("Q3"), ItemId("Q2")]
        assert len(tracker) == 3


# ========== Vocabulary Tests ==========

class TestRdfVocabulary:
    def test_namespaces(self, vocabulary):
        namespaces = vocabulary.get_namespaces()
        assert list(namespaces)[:3] == ["rdf", "xsd", "wikibase"]
        assert namespaces["wikibase"] == "http://www.wikidata.org/ontology-0.0.1#"
        assert namespaces["value"] == "http://www.wikidata.org/entity/value/"
        assert namespaces["entity"] == "http://www.wikidata.org/entity/"

    def test_entity_uris(self, vocabulary):
        assert vocabulary.get_entity_uri(ItemId("Q42")) == "http://www.wikidata.org/entity/Q42"
        assert vocabulary.get_data_url(ItemId("Q42")) == "http://www.wikidata.org/wiki/Special:EntityData/Q42"

    def test_statement_lname(self, vocabulary):
        st = Statement(PropertyNoValueSnak(PropertyId("P1")), guid="Q1$5D8A 5B2A")
        assert vocabulary.get_statement_lname(st) == "Q1-5D8A-5B2A"
        st.guid = None
        assert vocabulary.get_statement_lname(st) == st.get_hash()

    def test_type_names(self, vocabulary):
        assert vocabulary.get_entity_type_name("item") == "Item"
        assert vocabulary.get_data_type_name("wikibase-item") == "WikibaseItem"
        assert vocabulary.get_data_type_name("commonsMedia") == "CommonsMedia"
        assert vocabulary.get_rank_name(Rank.DEPRECATED) == "DeprecatedRank"

    def test_commons_uri(self, vocabulary):
        assert vocabulary.get_commons_uri("A b/c.png") == "http://commons.wikimedia.org/wiki/Special:FilePath/A%20b%2Fc.png"


# ========== Site Tests ==========

class TestSites:
    def test_page_url(self):
        site = Site("enwiki", "en", "https://en.wikipedia.org/wiki/$1")
        assert site.page_url("Main Page") == "https://en.wikipedia.org/wiki/Main_Page"
        assert site.page_url("AC/DC") == "https://en.wikipedia.org/wiki/AC/DC"
        assert site.page_url("A&B") == "https://en.wikipedia.org/wiki/A%26B"

    def test_site_list_round_trip(self, site_list):
        restored = SiteList.from_list(site_list.to_list())
        assert len(restored) == 2
        assert restored.get_site("dewiki").language_code == "de"
        assert restored.has_site("enwiki")
        assert restored.get_site("xxwiki") is None


# ========== Lookup Tests ==========

class CountingLookup(PropertyDataTypeLookup):
    def __init__(self):
        self.calls = 0

    def get_data_type_id_for_property(self, property_id):
        self.calls += 1
        if property_id == PropertyId("P404"):
            raise PropertyDataTypeLookupError("unknown")
        return "string"


class TestLookups:
    def test_in_memory_entity_lookup(self):
        lookup = InMemoryEntityLookup([Item(id=ItemId("Q1"))])
        lookup.add_entity(Item(id=ItemId("Q2")), revision_id=5, timestamp="2020-01-01T00:00:00Z")
        assert lookup.has_entity(ItemId("Q1"))
        assert lookup.get_entity(ItemId("Q3")) is None
        assert lookup.get_entity_revision(ItemId("Q2")).revision_id == 5
        assert lookup.get_entity_ids() == [ItemId("Q1"), ItemId("Q2")]
        assert ItemId("Q2") in lookup
        assert len(lookup) == 2

    def test_in_memory_data_types(self):
        lookup = InMemoryPropertyDataTypeLookup({"P1": "url"})
        assert lookup.get_data_type_id_for_property(PropertyId("P1")) == "url"
        with pytest.raises(PropertyDataTypeLookupError):
            lookup.get_data_type_id_for_property(PropertyId("P2"))
        assert lookup.to_dict() == {"P1": "url"}

    def test_data_types_from_property_entities(self):
        entities = InMemoryEntityLookup([
            Property(id=PropertyId("P1"), data_type="external-id"),
            Item(id=ItemId("Q1")),
        ])
        lookup = EntityLookupPropertyDataTypeLookup(entities)
        assert lookup.get_data_type_id_for_property(PropertyId("P1")) == "external-id"
        with pytest.raises(PropertyDataTypeLookupError):
            lookup.get_data_type_id_for_property(PropertyId("P2"))

    def test_caching_lookup(self):
        inner = CountingLookup()
        cache = {}
        lookup = CachingPropertyDataTypeLookup(inner, cache)
        assert lookup.get_data_type_id_for_property(PropertyId("P1")) == "string"
        assert lookup.get_data_type_id_for_property(PropertyId("P1")) == "string"
        assert inner.calls == 1
        assert cache == {PropertyId("P1"): "string"}

    def test_caching_lookup_does_not_cache_failures(self):
        inner = CountingLookup()
        lookup = CachingPropertyDataTypeLookup(inner)
        for _ in range(2):
            with pytest.raises(PropertyDataTypeLookupError):
                lookup.get_data_type_id_for_property(PropertyId("P404"))
        assert inner.calls == 2
