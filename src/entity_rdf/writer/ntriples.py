"""
N-Triples renderer.

Every triple is written on its own line with all terms expanded, so the
output is line-oriented and can be concatenated or split freely.

Reference: https://www.w3.org/TR/n-triples/
"""

import logging
from typing import Optional

from entity_rdf.writer.base import (
    BLANK_BASE,
    RdfWriter,
    WriterContext,
    WriterRole,
)
from entity_rdf.writer.escaping import escape_iri, is_valid_language_tag, quoted_string

logger = logging.getLogger(__name__)


class NTriplesRdfWriter(RdfWriter):
    """Writer for the N-Triples format. Prefixes are recorded but never written."""

    format_name = "ntriples"
    mime_type = "application/n-triples; charset=UTF-8"
    file_extension = "nt"

    def __init__(
        self,
        role: WriterRole = WriterRole.DOCUMENT,
        context: Optional[WriterContext] = None,
        parent_node: Optional[int] = None,
    ):
        super().__init__(role, context, parent_node)
        self._subject = ""
        self._predicate = ""

    def new_sub_writer(self, context: WriterContext, parent_node: int) -> RdfWriter:
        return NTriplesRdfWriter(WriterRole.SUBDOCUMENT, context, parent_node)

    def render_term(self, base: str, local: Optional[str]) -> str:
        if base == BLANK_BASE and local is not None:
            return "_:" + local
        return "<" + escape_iri(self.expand(base, local)) + ">"

    def write_prefix(self, name: str, iri: str) -> None:
        pass

    def write_subject(self, base: str, local: Optional[str]) -> None:
        self._subject = self.render_term(base, local)

    def write_predicate(self, base: str, local: Optional[str]) -> None:
        self._predicate = self.render_term(base, local)

    def _write_triple(self, obj: str) -> None:
        self._emit(f"{self._subject} {self._predicate} {obj} .\n")

    def write_resource(self, base: str, local: Optional[str]) -> None:
        self._write_triple(self.render_term(base, local))

    def write_text(self, text: str, language: Optional[str]) -> None:
        literal = quoted_string(text, allow_long=False)
        if language is not None:
            if is_valid_language_tag(language):
                literal += "@" + language
            else:
                logger.debug(f"Invalid language tag {language!r}, writing plain literal")
        self._write_triple(literal)

    def write_value(self, literal: str, type_base: Optional[str], type_local: Optional[str]) -> None:
        rendered = quoted_string(literal, allow_long=False)
        if type_base is not None:
            rendered += "^^" + self.render_term(type_base, type_local)
        self._write_triple(rendered)
