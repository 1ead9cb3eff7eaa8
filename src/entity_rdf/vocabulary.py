"""
RDF vocabulary and namespace registry.

Maps the logical namespace keys used by the builders to IRIs, and derives
stable local names for entities, statements, references and values.
"""

import re
from typing import Dict, Optional
from urllib.parse import quote

from entity_rdf.models import DataValue, EntityId, Rank, Reference, Statement

FORMAT_VERSION = "0.0.1"
ONTOLOGY_BASE_URI = "http://www.wikidata.org/ontology"
LICENSE = "http://creativecommons.org/publicdomain/zero/1.0/"
COMMONS_URI = "http://commons.wikimedia.org/wiki/Special:FilePath/"

NS_ONTOLOGY = "wikibase"
NS_ENTITY = "entity"
NS_DATA = "data"
NS_VALUE = "value"
NS_QUALIFIER = "qualifier"
NS_STATEMENT = "statement"
NS_REFERENCE = "reference"
NS_DIRECT_CLAIM = "direct"
NS_NOVALUE = "novalue"
NS_SKOS = "skos"
NS_SCHEMA_ORG = "schema"
NS_CC = "cc"
NS_GEO = "geo"
NS_PROV = "prov"
NS_RDF = "rdf"
NS_RDFS = "rdfs"
NS_XSD = "xsd"
NS_OWL = "owl"

SKOS_URI = "http://www.w3.org/2004/02/skos/core#"
SCHEMA_ORG_URI = "http://schema.org/"
CC_URI = "http://creativecommons.org/ns#"
GEO_URI = "http://www.opengis.net/ont/geosparql#"
PROV_URI = "http://www.w3.org/ns/prov#"
RDF_URI = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"
RDFS_URI = "http://www.w3.org/2000/01/rdf-schema#"
XSD_URI = "http://www.w3.org/2001/XMLSchema#"
OWL_URI = "http://www.w3.org/2002/07/owl#"

RANK_NAMES: Dict[Rank, str] = {
    Rank.PREFERRED: "PreferredRank",
    Rank.NORMAL: "NormalRank",
    Rank.DEPRECATED: "DeprecatedRank",
}

# Ontology classes of expanded value nodes, by value type
VALUE_TYPE_NAMES: Dict[str, str] = {
    "time": "TimeValue",
    "quantity": "QuantityValue",
    "globecoordinate": "GlobecoordinateValue",
}

_NON_NAME_CHARS = re.compile(r"[^\w-]")


class RdfVocabulary:
    """
    Namespace registry for one export run.

    Args:
        base_uri: Concept URI prefix, e.g. ``http://www.wikidata.org/entity/``
        data_uri: Document URI prefix, e.g. ``http://www.wikidata.org/wiki/Special:EntityData/``
    """

    def __init__(self, base_uri: str, data_uri: str):
        self.base_uri = base_uri
        self.data_uri = data_uri
        self._namespaces: Dict[str, str] = {
            NS_RDF: RDF_URI,
            NS_XSD: XSD_URI,
            NS_ONTOLOGY: f"{ONTOLOGY_BASE_URI}-{FORMAT_VERSION}#",
            NS_DIRECT_CLAIM: base_uri + "direct/",
            NS_VALUE: base_uri + "value/",
            NS_QUALIFIER: base_uri + "qualifier/",
            NS_STATEMENT: base_uri + "statement/",
            NS_REFERENCE: base_uri + "reference/",
            NS_NOVALUE: base_uri + "novalue/",
            NS_DATA: data_uri,
            NS_ENTITY: base_uri,
            NS_RDFS: RDFS_URI,
            NS_OWL: OWL_URI,
            NS_SKOS: SKOS_URI,
            NS_SCHEMA_ORG: SCHEMA_ORG_URI,
            NS_CC: CC_URI,
            NS_GEO: GEO_URI,
            NS_PROV: PROV_URI,
        }

    def get_namespaces(self) -> Dict[str, str]:
        """Prefix to IRI map, in declaration order."""
        return dict(self._namespaces)

    def get_namespace_uri(self, prefix: str) -> str:
        return self._namespaces[prefix]

    def get_entity_lname(self, entity_id: EntityId) -> str:
        serialization = entity_id.serialization
        return serialization[:1].upper() + serialization[1:]

    def get_entity_uri(self, entity_id: EntityId) -> str:
        return self._namespaces[NS_ENTITY] + self.get_entity_lname(entity_id)

    def get_data_url(self, entity_id: EntityId) -> str:
        return self._namespaces[NS_DATA] + self.get_entity_lname(entity_id)

    def get_statement_lname(self, statement: Statement) -> str:
        """
        Local name of a statement node, derived from its GUID.

        Statements without a GUID are named by content hash.
        """
        if not statement.guid:
            return statement.get_hash()
        return _NON_NAME_CHARS.sub("-", statement.guid)

    def get_reference_lname(self, reference: Reference) -> str:
        return reference.get_hash()

    def get_value_lname(self, value: DataValue) -> str:
        return value.get_hash()

    def get_entity_type_name(self, entity_type: str) -> str:
        return entity_type[:1].upper() + entity_type[1:]

    def get_data_type_name(self, data_type: str) -> str:
        """``wikibase-item`` becomes ``WikibaseItem``, ``commonsMedia`` becomes ``CommonsMedia``."""
        return "".join(part[:1].upper() + part[1:] for part in data_type.split("-") if part)

    def get_value_type_name(self, value: DataValue) -> Optional[str]:
        return VALUE_TYPE_NAMES.get(value.value_type)

    def get_rank_name(self, rank: Rank) -> str:
        return RANK_NAMES[rank]

    def get_commons_uri(self, file_name: str) -> str:
        return COMMONS_URI + quote(file_name, safe="")
