"""Tests for the entity data HTTP router."""
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from rdflib import Graph

from entity_rdf.config import ExportConfig
from entity_rdf.lookup import EntityLookup, EntityLookupError
from entity_rdf.web import create_entity_data_router, negotiate_format, parse_accept
from entity_rdf.writer import RdfWriterFactory


@pytest.fixture
def client(entity_lookup):
    app = FastAPI()
    app.include_router(create_entity_data_router(entity_lookup))
    return TestClient(app)


class BrokenLookup(EntityLookup):
    def get_entity(self, entity_id):
        raise EntityLookupError("backend down")


# ========== Content Negotiation Tests ==========

class TestParseAccept:
    def test_empty(self):
        assert parse_accept(None) == []
        assert parse_accept("") == []

    def test_quality_order(self):
        header = "text/plain;q=0.5, text/turtle, application/n-triples;q=0.9"
        assert parse_accept(header) == ["text/turtle", "application/n-triples", "text/plain"]

    def test_ties_keep_header_order(self):
        assert parse_accept("text/n3, text/turtle") == ["text/n3", "text/turtle"]

    def test_zero_quality_dropped(self):
        assert parse_accept("text/turtle;q=0, */*;q=0.1") == ["*/*"]

    def test_invalid_quality(self):
        assert parse_accept("text/turtle;q=abc, text/n3") == ["text/n3"]


class TestNegotiateFormat:
    @pytest.fixture
    def factory(self):
        return RdfWriterFactory()

    def test_format_parameter_wins(self, factory):
        assert negotiate_format(factory, "turtle", "nt", "text/turtle") == "ntriples"

    def test_unknown_format_parameter(self, factory):
        assert negotiate_format(factory, "turtle", "rdfxml", None) is None

    def test_no_accept_uses_default(self, factory):
        assert negotiate_format(factory, "n3", None, None) == "n3"

    def test_wildcards(self, factory):
        assert negotiate_format(factory, "turtle", None, "*/*") == "turtle"
        assert negotiate_format(factory, "turtle", None, "application/*") == "turtle"
        assert negotiate_format(factory, "n3", None, "application/*") == "ntriples"
        assert negotiate_format(factory, "ntriples", None, "text/*") == "ntriples"

    def test_accept_with_parameters(self, factory):
        assert negotiate_format(factory, "turtle", None, "application/json, text/n3;charset=utf-8;q=0.8") == "n3"

    def test_nothing_acceptable(self, factory):
        assert negotiate_format(factory, "turtle", None, "application/json") is None


# ========== Router Tests ==========

class TestEntityDataRouter:
    def test_default_turtle(self, client):
        response = client.get("/entity/Q64")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/turtle")
        assert "entity:Q64 a wikibase:Item" in response.text
        Graph().parse(data=response.text, format="turtle")

    def test_format_parameter(self, client):
        response = client.get("/entity/Q64", params={"format": "nt"})
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/n-triples")
        assert "@prefix" not in response.text

    def test_accept_header(self, client):
        response = client.get("/entity/Q64", headers={"Accept": "application/n-triples"})
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/n-triples")

    def test_flavor_parameter(self, client):
        response = client.get("/entity/Q64", params={"flavor": "truthy"})
        assert response.status_code == 200
        assert "statement:" not in response.text.split("\n\n", 1)[1]

    def test_not_acceptable(self, client):
        assert client.get("/entity/Q64", headers={"Accept": "application/json"}).status_code == 406
        assert client.get("/entity/Q64", params={"format": "rdfxml"}).status_code == 406

    def test_not_found(self, client):
        response = client.get("/entity/Q999")
        assert response.status_code == 404
        assert "Q999" in response.json()["detail"]

    def test_invalid_id(self, client):
        assert client.get("/entity/foo").status_code == 400

    def test_invalid_flavor(self, client):
        response = client.get("/entity/Q64", params={"flavor": "everything"})
        assert response.status_code == 400
        assert "Unknown flavor" in response.json()["detail"]

    def test_lookup_failure(self):
        app = FastAPI()
        app.include_router(create_entity_data_router(BrokenLookup()))
        response = TestClient(app).get("/entity/Q1")
        assert response.status_code == 500

    def test_plain_entity_lookup(self, berlin):
        class PlainLookup(EntityLookup):
            def get_entity(self, entity_id):
                return berlin if entity_id == berlin.id else None

        app = FastAPI()
        app.include_router(create_entity_data_router(PlainLookup()))
        response = TestClient(app).get("/entity/Q64")
        assert response.status_code == 200
        assert "entity:Q64 a wikibase:Item" in response.text

    def test_formats(self, client):
        data = client.get("/formats").json()
        assert data["default_format"] == "turtle"
        assert data["default_flavor"] == "full"
        assert [f["name"] for f in data["formats"]] == ["turtle", "n3", "ntriples"]
        assert data["formats"][2]["extension"] == "nt"

    def test_config_defaults(self, entity_lookup):
        config = ExportConfig()
        config.output.format = "nt"
        app = FastAPI()
        app.include_router(create_entity_data_router(entity_lookup, config), prefix="/wiki")
        response = TestClient(app).get("/wiki/entity/Q64")
        assert response.headers["content-type"].startswith("application/n-triples")
