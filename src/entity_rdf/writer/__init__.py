"""
Streaming RDF writers.

Supports:
- Turtle (.ttl)
- N3 / Notation3 (.n3), written as the Turtle-compatible subset
- N-Triples (.nt)
"""

from entity_rdf.writer.errors import ProtocolError
from entity_rdf.writer.bnode import BNodeLabeler
from entity_rdf.writer.base import (
    BufferArena,
    RdfWriter,
    WriterContext,
    WriterRole,
    WriterState,
)
from entity_rdf.writer.turtle import TurtleRdfWriter, N3RdfWriter
from entity_rdf.writer.ntriples import NTriplesRdfWriter
from entity_rdf.writer.factory import RdfWriterFactory, UnknownFormatError

__all__ = [
    "ProtocolError",
    "BNodeLabeler",
    "BufferArena",
    "RdfWriter",
    "WriterContext",
    "WriterRole",
    "WriterState",
    # Dialects
    "TurtleRdfWriter",
    "N3RdfWriter",
    "NTriplesRdfWriter",
    # Factory
    "RdfWriterFactory",
    "UnknownFormatError",
]
