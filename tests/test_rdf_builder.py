"""Tests for the entity orchestrator."""
from datetime import datetime, timezone

import pytest
from rdflib import Graph, Literal, Namespace, URIRef
from rdflib.compare import isomorphic
from rdflib.namespace import RDF, RDFS

from entity_rdf.dedup import NullDedupBag
from entity_rdf.flavor import Flavor
from entity_rdf.lookup import EntityLookup, EntityLookupError, InMemoryEntityLookup
from entity_rdf.mentions import MentionState
from entity_rdf.models import (
    EntityIdValue,
    Item,
    ItemId,
    Property,
    PropertyId,
    PropertySomeValueSnak,
    PropertyValueSnak,
    Statement,
    TimeValue,
)
from entity_rdf.rdf_builder import format_timestamp

ENTITY = Namespace("http://www.wikidata.org/entity/")
WIKIBASE = Namespace("http://www.wikidata.org/ontology-0.0.1#")
SCHEMA = Namespace("http://schema.org/")


def parse(text, format_name="turtle"):
    return Graph().parse(data=text, format=format_name)


class FailingLookup(EntityLookup):
    def get_entity(self, entity_id):
        raise EntityLookupError(f"storage unavailable for {entity_id}")


# ========== Timestamp Tests ==========

class TestFormatTimestamp:
    def test_epoch_default(self):
        assert format_timestamp(None) == "1970-01-01T00:00:00Z"
        assert format_timestamp("") == "1970-01-01T00:00:00Z"
        assert format_timestamp(0) == "1970-01-01T00:00:00Z"

    def test_mediawiki_timestamp(self):
        assert format_timestamp("20150301120000") == "2015-03-01T12:00:00Z"

    def test_datetime(self):
        assert format_timestamp(datetime(2020, 5, 17, 8, 30, tzinfo=timezone.utc)) == "2020-05-17T08:30:00Z"

    def test_iso_string_unchanged(self):
        assert format_timestamp("2015-03-01T12:00:00Z") == "2015-03-01T12:00:00Z"


# ========== Document Tests ==========

class TestDocument:
    def test_prefixes_in_declaration_order(self, make_builder):
        out = make_builder(Flavor.NONE).get_rdf()
        lines = [line for line in out.splitlines() if line]
        assert lines[0] == "@prefix rdf: <http://www.w3.org/1999/02/22-rdf-syntax-ns#> ."
        assert lines[1] == "@prefix xsd: <http://www.w3.org/2001/XMLSchema#> ."
        assert lines[2] == "@prefix wikibase: <http://www.wikidata.org/ontology-0.0.1#> ."
        assert "@prefix direct: <http://www.wikidata.org/entity/direct/> ." in lines
        assert "@prefix data: <http://www.wikidata.org/wiki/Special:EntityData/> ." in lines
        assert lines[-1] == "@prefix prov: <http://www.w3.org/ns/prov#> ."

    def test_ntriples_has_no_prolog(self, make_builder):
        assert make_builder(Flavor.NONE, format_name="nt").get_rdf() == ""

    def test_mime_type(self, make_builder):
        assert make_builder(Flavor.NONE).get_mime_type().startswith("text/turtle")
        assert make_builder(Flavor.NONE, format_name="nt").get_mime_type().startswith("application/n-triples")

    def test_dump_header(self, make_builder):
        builder = make_builder(Flavor.DUMP)
        builder.add_dump_header("2016-01-04T00:00:00Z")
        out = builder.get_rdf()
        assert "wikibase:Dump a schema:Dataset ;" in out
        assert "cc:license <http://creativecommons.org/publicdomain/zero/1.0/>" in out
        assert 'schema:softwareVersion "0.0.1"' in out
        assert 'schema:dateModified "2016-01-04T00:00:00Z"^^xsd:dateTime' in out

    def test_revision_info(self, make_builder):
        builder = make_builder(Flavor.NONE)
        builder.add_entity_revision_info(ItemId("Q1"), 42, "20150301120000")
        out = builder.get_rdf()
        assert 'data:Q1 schema:version "42"^^xsd:integer ;' in out
        assert 'schema:dateModified "2015-03-01T12:00:00Z"^^xsd:dateTime .' in out


# ========== Entity Tests ==========

class TestAddEntity:
    def test_some_value_statement_document(self, make_builder):
        item = Item(
            id=ItemId("Q1"),
            labels={"en": "Test"},
            statements=[Statement(PropertySomeValueSnak(PropertyId("P1")), guid="Q1$ABC-123")],
        )
        builder = make_builder(Flavor.ALL_STATEMENTS)
        builder.add_entity(item)
        out = builder.get_rdf()

        assert "data:Q1 a schema:Dataset ;\n\tschema:about entity:Q1 ." in out
        assert "entity:Q1 a wikibase:Item ." in out
        assert 'entity:Q1 rdfs:label "Test"@en ;' in out
        assert 'skos:prefLabel "Test"@en' in out
        assert 'schema:name "Test"@en' in out
        assert "entity:Q1 entity:P1 statement:Q1-ABC-123 ." in out
        assert "statement:Q1-ABC-123 a wikibase:Statement ;\n\tvalue:P1 _:b0 ." in out
        assert "wikibase:rank" not in out
        assert "direct:P1" not in out
        assert "cc:license" not in out

    def test_version_info_on_entity_documents(self, make_builder):
        builder = make_builder(Flavor.VERSION_INFO)
        builder.add_entity(Item(id=ItemId("Q1")))
        out = builder.get_rdf()
        assert "cc:license <http://creativecommons.org/publicdomain/zero/1.0/>" in out
        assert 'schema:softwareVersion "0.0.1"' in out

    def test_entity_marked_resolved(self, make_builder):
        builder = make_builder(Flavor.ALL_STATEMENTS)
        builder.add_entity(Item(
            id=ItemId("Q1"),
            statements=[Statement(PropertySomeValueSnak(PropertyId("P1")))],
        ))
        assert builder.mentions.get_state(ItemId("Q1")) is MentionState.RESOLVED
        assert builder.mentions.get_state(PropertyId("P1")) is MentionState.MENTIONED_UNRESOLVED

    def test_full_document_parses(self, make_builder, berlin):
        builder = make_builder(Flavor.FULL)
        builder.add_entity(berlin)
        graph = parse(builder.get_rdf())
        q64 = ENTITY["Q64"]
        assert (q64, RDF.type, WIKIBASE.Item) in graph
        assert (q64, RDFS.label, Literal("Berlin", lang="de")) in graph
        assert (q64, ENTITY["direct/P2"], ENTITY["Q5119"]) in graph
        # normal rank P2 is not truthy next to a preferred one
        assert (q64, ENTITY["direct/P2"], ENTITY["Q515"]) not in graph
        assert (URIRef("https://en.wikipedia.org/wiki/Berlin"), SCHEMA.about, q64) in graph

    def test_ntriples_and_turtle_agree(self, make_builder, berlin):
        turtle = make_builder(Flavor.FULL)
        turtle.add_entity(berlin)
        ntriples = make_builder(Flavor.FULL, format_name="nt")
        ntriples.add_entity(berlin)
        assert isomorphic(parse(turtle.get_rdf()), parse(ntriples.get_rdf(), "nt"))

    def test_flavor_selects_aspects(self, make_builder, berlin):
        builder = make_builder(Flavor.TRUTHY)
        builder.add_entity(berlin)
        out = builder.get_rdf()
        assert "direct:P2 entity:Q5119" in out
        assert "schema:Article" in out
        assert "statement:" not in out.split("\n\n", 1)[1]

    def test_properties(self, make_builder):
        builder = make_builder(Flavor.PROPERTIES)
        builder.add_entity(Property(id=PropertyId("P2"), data_type="wikibase-item"))
        out = builder.get_rdf()
        assert "entity:P2 a wikibase:Property ." in out
        assert "wikibase:propertyType wikibase:WikibaseItem" in out
        assert "wikibase:directClaim direct:P2" in out
        assert "wikibase:novalue novalue:P2" in out

    def test_properties_flavor_off(self, make_builder):
        builder = make_builder(Flavor.NONE)
        builder.add_entity(Property(id=PropertyId("P2"), data_type="wikibase-item"))
        assert "wikibase:propertyType" not in builder.get_rdf()


# ========== Mention Resolution Tests ==========

class TestResolveMentionedEntities:
    def test_stubs_for_mentioned_entities(self, make_builder, berlin, entity_lookup):
        builder = make_builder(Flavor.FULL)
        builder.add_entity(berlin)
        count = builder.resolve_mentioned_entities(entity_lookup)
        out = builder.get_rdf()

        # Q5119, Q515 and P2 are known; P1, P3, P6, P7, P8, Q17437796 are not
        assert count == 3
        assert "entity:Q5119 a wikibase:Item ." in out
        assert 'entity:Q5119 rdfs:label "capital"@en' in out
        assert '"capital city"@en' not in out
        assert 'schema:description "large human settlement"@en' in out
        assert "entity:P2 a wikibase:Property ." in out
        # stubs carry terms only
        assert "wikibase:propertyType" not in out

    def test_each_stub_written_once(self, make_builder, berlin, entity_lookup):
        builder = make_builder(Flavor.FULL)
        builder.add_entity(berlin)
        assert builder.resolve_mentioned_entities(entity_lookup) == 3
        assert builder.resolve_mentioned_entities(entity_lookup) == 0

    def test_exported_entities_are_not_stubbed(self, make_builder):
        q2 = Item(id=ItemId("Q2"), labels={"en": "two"})
        q1 = Item(id=ItemId("Q1"), statements=[
            Statement(PropertyValueSnak(PropertyId("P2"), EntityIdValue(ItemId("Q2")))),
        ])
        builder = make_builder(Flavor.FULL)
        builder.add_entity(q1)
        builder.add_entity(q2)
        assert builder.resolve_mentioned_entities(InMemoryEntityLookup([q1, q2])) == 0

    def test_lookup_failure_is_skipped(self, make_builder, berlin, caplog):
        builder = make_builder(Flavor.FULL)
        builder.add_entity(berlin)
        with caplog.at_level("INFO"):
            assert builder.resolve_mentioned_entities(FailingLookup()) == 0
        assert "storage unavailable" in caplog.text


# ========== Dedup Tests ==========

class TestValueNodeDedup:
    def make_item(self, entity_id, *guids):
        return Item(id=ItemId(entity_id), statements=[
            Statement(PropertyValueSnak(PropertyId("P6"), TimeValue("+2001-01-01T00:00:00Z")), guid=guid)
            for guid in guids
        ])

    def test_value_node_written_once(self, make_builder):
        value_hash = TimeValue("+2001-01-01T00:00:00Z").get_hash()
        builder = make_builder(Flavor.ALL_STATEMENTS | Flavor.FULL_VALUES)
        builder.add_entity(self.make_item("Q1", "Q1$1", "Q1$2"))
        out = builder.get_rdf()
        assert out.count(f"value:{value_hash} a wikibase:TimeValue") == 1
        assert out.count(f"value:P6-value value:{value_hash}") == 2
        assert 'wikibase:timeValue "2001-01-01T00:00:00Z"^^xsd:dateTime' in out
        assert 'wikibase:timePrecision "11"^^xsd:integer' in out
        assert "wikibase:timeCalendarModel <http://www.wikidata.org/entity/Q1985727>" in out
        parse(out)

    def test_value_nodes_follow_prolog(self, make_builder):
        builder = make_builder(Flavor.ALL_STATEMENTS | Flavor.FULL_VALUES)
        builder.add_entity(self.make_item("Q1", "Q1$1"))
        out = builder.get_rdf()
        assert out.index("@prefix prov:") < out.index("a wikibase:TimeValue")

    def test_shared_across_entities(self, make_builder):
        builder = make_builder(Flavor.ALL_STATEMENTS | Flavor.FULL_VALUES)
        builder.add_entity(self.make_item("Q1", "Q1$1"))
        builder.add_entity(self.make_item("Q2", "Q2$1"))
        assert builder.get_rdf().count("a wikibase:TimeValue") == 1

    def test_null_dedup_bag_repeats(self, make_builder):
        builder = make_builder(Flavor.ALL_STATEMENTS | Flavor.FULL_VALUES, dedup=NullDedupBag())
        builder.add_entity(self.make_item("Q1", "Q1$1", "Q1$2"))
        assert builder.get_rdf().count("a wikibase:TimeValue") == 2

    def test_no_value_nodes_without_full_values(self, make_builder):
        builder = make_builder(Flavor.ALL_STATEMENTS)
        builder.add_entity(self.make_item("Q1", "Q1$1"))
        out = builder.get_rdf()
        assert "P6-value" not in out
        assert "wikibase:TimeValue" not in out

    def test_reference_node_written_once(self, make_builder, berlin):
        reference_hash = berlin.statements.to_list()[0].references[0].get_hash()
        builder = make_builder(Flavor.FULL)
        builder.add_entity(berlin)
        out = builder.get_rdf()
        assert out.count(f"prov:wasDerivedFrom reference:{reference_hash}") == 2
        assert out.count(f"reference:{reference_hash} a wikibase:Reference") == 1
        assert "value:P3 <https://example.org/source>" in out


# ========== Language Filter Tests ==========

class TestLanguages:
    def test_terms_and_sitelinks_filtered(self, make_builder, berlin):
        builder = make_builder(Flavor.FULL, languages=["de"])
        builder.add_entity(berlin)
        out = builder.get_rdf()
        assert '"Berlin"@de' in out
        assert "@en" not in out
        assert "<https://de.wikipedia.org/wiki/Berlin> a schema:Article" in out
        assert "en.wikipedia.org" not in out
