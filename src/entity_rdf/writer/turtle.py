"""
Turtle and Notation3 (N3) renderers.

Subject blocks are written in the abbreviated form::

    entity:Q1 a wikibase:Item ;
    	rdfs:label "Test"@en , "Test"@de .

Prefixed names are used where the local name is safe to write unescaped,
full IRIs otherwise.

Reference: https://www.w3.org/TR/turtle/
"""

import logging
from typing import Optional

from entity_rdf.writer.base import (
    BLANK_BASE,
    TYPE_SHORTHAND,
    RdfWriter,
    WriterContext,
    WriterRole,
)
from entity_rdf.writer.escaping import (
    escape_iri,
    is_safe_local_name,
    is_valid_language_tag,
    quoted_string,
)

logger = logging.getLogger(__name__)


class TurtleRdfWriter(RdfWriter):
    """Writer for the Turtle format."""

    format_name = "turtle"
    mime_type = "text/turtle; charset=UTF-8"
    file_extension = "ttl"

    def __init__(
        self,
        role: WriterRole = WriterRole.DOCUMENT,
        context: Optional[WriterContext] = None,
        parent_node: Optional[int] = None,
    ):
        super().__init__(role, context, parent_node)
        self._after_prefixes = False

    def new_sub_writer(self, context: WriterContext, parent_node: int) -> RdfWriter:
        return type(self)(WriterRole.SUBDOCUMENT, context, parent_node)

    # -------------------------------------------------------------------------
    # Terms
    # -------------------------------------------------------------------------

    def render_iri(self, iri: str) -> str:
        return "<" + escape_iri(iri) + ">"

    def render_term(self, base: str, local: Optional[str]) -> str:
        if local is None:
            return self.render_iri(base)
        if base == BLANK_BASE:
            return "_:" + local
        if is_safe_local_name(local):
            return f"{base}:{local}"
        return self.render_iri(self.expand(base, local))

    # -------------------------------------------------------------------------
    # Dialect hooks
    # -------------------------------------------------------------------------

    def write_prefix(self, name: str, iri: str) -> None:
        self._emit(f"@prefix {name}: {self.render_iri(iri)} .\n")
        self._after_prefixes = True

    def begin_subject(self, first: bool = False) -> None:
        if self._after_prefixes:
            self._emit("\n")
            self._after_prefixes = False

    def write_subject(self, base: str, local: Optional[str]) -> None:
        self._emit(self.render_term(base, local))

    def finish_subject(self) -> None:
        self._emit(" .\n\n")

    def begin_predicate(self, first: bool = False) -> None:
        self._emit(" " if first else "\n\t")

    def write_predicate(self, base: str, local: Optional[str]) -> None:
        if base == TYPE_SHORTHAND and local is None:
            self._emit("a")
        else:
            self._emit(self.render_term(base, local))

    def finish_predicate(self, last: bool = False) -> None:
        if not last:
            self._emit(" ;")

    def begin_object(self, first: bool = False) -> None:
        self._emit(" ")

    def finish_object(self, last: bool = False) -> None:
        if not last:
            self._emit(" ,")

    def write_resource(self, base: str, local: Optional[str]) -> None:
        self._emit(self.render_term(base, local))

    def write_text(self, text: str, language: Optional[str]) -> None:
        literal = self.render_string(text)
        if language is not None:
            if is_valid_language_tag(language):
                literal += "@" + language
            else:
                logger.debug(f"Invalid language tag {language!r}, writing plain literal")
        self._emit(literal)

    def write_value(self, literal: str, type_base: Optional[str], type_local: Optional[str]) -> None:
        rendered = self.render_string(literal)
        if type_base is not None:
            rendered += "^^" + self.render_term(type_base, type_local)
        self._emit(rendered)

    def render_string(self, text: str) -> str:
        return quoted_string(text, allow_long=True)


class N3RdfWriter(TurtleRdfWriter):
    """
    Writer for Notation3.

    The RDF subset of N3 is written exactly like Turtle.
    """

    format_name = "n3"
    mime_type = "text/n3; charset=UTF-8"
    file_extension = "n3"
