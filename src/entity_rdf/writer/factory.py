"""
Writer factory.

Maps format names, file extensions and MIME types to writer classes.
"""

from typing import Dict, List, Optional, Type

from entity_rdf.writer.base import RdfWriter, WriterContext, WriterRole
from entity_rdf.writer.bnode import BNodeLabeler
from entity_rdf.writer.ntriples import NTriplesRdfWriter
from entity_rdf.writer.turtle import N3RdfWriter, TurtleRdfWriter


class UnknownFormatError(ValueError):
    """Raised when no writer is registered for a format name."""
    pass


class RdfWriterFactory:
    """
    Creates writers by canonical format name.

    Aliases cover file extensions and MIME types, so ``"ttl"``,
    ``"text/turtle"`` and ``"turtle"`` all resolve to the same writer.
    """

    WRITERS: Dict[str, Type[RdfWriter]] = {
        "turtle": TurtleRdfWriter,
        "n3": N3RdfWriter,
        "ntriples": NTriplesRdfWriter,
    }

    MIME_TYPES: Dict[str, List[str]] = {
        "turtle": ["text/turtle", "application/x-turtle"],
        "n3": ["text/n3", "text/rdf+n3"],
        "ntriples": ["application/n-triples", "text/n-triples", "text/plain"],
    }

    EXTENSIONS: Dict[str, List[str]] = {
        "turtle": ["ttl"],
        "n3": ["n3"],
        "ntriples": ["nt"],
    }

    def get_formats(self) -> List[str]:
        return list(self.WRITERS)

    def get_format_name(self, name: str) -> Optional[str]:
        """
        Resolve a format name, file extension or MIME type.

        Returns:
            The canonical format name, or None if unknown
        """
        if not name:
            return None
        name = name.strip().lower()
        name = name.split(";", 1)[0].strip()
        if name in self.WRITERS:
            return name
        if name == "nt" or name == "n-triples":
            return "ntriples"
        for fmt, extensions in self.EXTENSIONS.items():
            if name in extensions or name.lstrip(".") in extensions:
                return fmt
        for fmt, mime_types in self.MIME_TYPES.items():
            if name in mime_types:
                return fmt
        return None

    def get_writer(self, format_name: str, labeler: Optional[BNodeLabeler] = None) -> RdfWriter:
        """
        Create a fresh top-level writer.

        Raises:
            UnknownFormatError: if the format is not supported
        """
        canonical = self.get_format_name(format_name)
        if canonical is None:
            raise UnknownFormatError(f"Unknown RDF format: {format_name}")
        context = WriterContext(labeler=labeler or BNodeLabeler())
        return self.WRITERS[canonical](WriterRole.DOCUMENT, context)

    def get_mime_types(self, format_name: str) -> List[str]:
        canonical = self.get_format_name(format_name)
        if canonical is None:
            raise UnknownFormatError(f"Unknown RDF format: {format_name}")
        return list(self.MIME_TYPES[canonical])

    def get_file_extension(self, format_name: str) -> str:
        canonical = self.get_format_name(format_name)
        if canonical is None:
            raise UnknownFormatError(f"Unknown RDF format: {format_name}")
        return self.EXTENSIONS[canonical][0]
