"""
Streaming RDF writer protocol.

The writer is a state machine over the states START, DOCUMENT, SUBJECT,
PREDICATE, OBJECT and DRAIN. Builders drive it with abstract calls
(``about``, ``say``, ``is_``, ``text``, ``value``) and a dialect renderer
supplies the textual glue emitted at each transition. Any call made from a
state with no defined transition raises :class:`ProtocolError`.

Nested writers created by :meth:`RdfWriter.sub` share the blank node
labeler, the prefix map and a :class:`BufferArena`. Each writer owns one
node of the arena; a node holds text chunks and the indices of child nodes,
and is flattened bottom-up on :meth:`RdfWriter.drain`.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Union

from entity_rdf.writer.bnode import BNodeLabeler, check_label
from entity_rdf.writer.errors import ProtocolError
from entity_rdf.writer.escaping import check_absolute_iri, check_prefix_name


class WriterState(Enum):
    START = "start"
    DOCUMENT = "document"
    SUBJECT = "subject"
    PREDICATE = "predicate"
    OBJECT = "object"
    DRAIN = "drain"


class WriterRole(Enum):
    """A DOCUMENT writer is top level; a SUBDOCUMENT writer came from sub()."""
    DOCUMENT = "document"
    SUBDOCUMENT = "subdocument"


_S = WriterState

TRANSITIONS: Dict[WriterState, FrozenSet[WriterState]] = {
    _S.DOCUMENT: frozenset({_S.START, _S.DOCUMENT, _S.OBJECT, _S.DRAIN}),
    _S.SUBJECT: frozenset({_S.DOCUMENT, _S.OBJECT}),
    _S.PREDICATE: frozenset({_S.SUBJECT, _S.OBJECT}),
    _S.OBJECT: frozenset({_S.PREDICATE, _S.OBJECT}),
    _S.DRAIN: frozenset({_S.START, _S.DOCUMENT, _S.OBJECT, _S.DRAIN}),
}

# Shorthand for rdf:type in predicate position
TYPE_SHORTHAND = "a"
BLANK_BASE = "_"

RDF_TYPE_IRI = "http://www.w3.org/1999/02/22-rdf-syntax-ns#type"


# =============================================================================
# Buffer arena
# =============================================================================

@dataclass
class BufferNode:
    """One writer's buffer: text chunks interleaved with child node indices."""
    parent: Optional[int]
    chunks: List[Union[str, int]] = field(default_factory=list)
    children: List[int] = field(default_factory=list)


class BufferArena:
    """
    Arena of buffer nodes shared by one writer tree.

    Nodes refer to each other by index only; the owning writer of each node
    is kept in a parallel list so drain can close a nested writer's open
    subject before reading its text.
    """

    def __init__(self):
        self.nodes: List[BufferNode] = []
        self.owners: List["RdfWriter"] = []

    def add_node(self, owner: "RdfWriter", parent: Optional[int] = None) -> int:
        index = len(self.nodes)
        self.nodes.append(BufferNode(parent=parent))
        self.owners.append(owner)
        if parent is not None:
            self.nodes[parent].children.append(index)
        return index

    def __len__(self) -> int:
        return len(self.nodes)


@dataclass
class WriterContext:
    """State shared by a writer and all of its sub-writers."""
    labeler: BNodeLabeler = field(default_factory=BNodeLabeler)
    prefixes: Dict[str, str] = field(default_factory=dict)
    arena: BufferArena = field(default_factory=BufferArena)


# =============================================================================
# Writer protocol
# =============================================================================

class RdfWriter(ABC):
    """
    Abstract, dialect-agnostic RDF writer.

    Terms are addressed as ``(base, local)``:

    - ``(prefix, local)``: a prefixed name, the prefix must be declared
    - ``(iri, None)``: an absolute IRI
    - ``("_", label)``: a blank node, see :meth:`blank`
    - ``("a", None)``: rdf:type, predicate position only

    All term-writing calls return the writer for chaining::

        writer.about("entity", "Q1").say("rdfs", "label").text("Test", "en")
    """

    format_name = "abstract"
    mime_type = "application/octet-stream"
    file_extension = ""

    def __init__(
        self,
        role: WriterRole = WriterRole.DOCUMENT,
        context: Optional[WriterContext] = None,
        parent_node: Optional[int] = None,
    ):
        self._role = role
        self._context = context if context is not None else WriterContext()
        self._node = self._context.arena.add_node(self, parent_node)
        self._state = WriterState.START
        self._subject_written = False
        # sub-writer nodes waiting for the open subject block to close
        self._pending_children: List[int] = []

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def state(self) -> WriterState:
        return self._state

    @property
    def role(self) -> WriterRole:
        return self._role

    @property
    def prefixes(self) -> Dict[str, str]:
        return dict(self._context.prefixes)

    @property
    def labeler(self) -> BNodeLabeler:
        return self._context.labeler

    # -------------------------------------------------------------------------
    # Public protocol
    # -------------------------------------------------------------------------

    def start(self) -> "RdfWriter":
        """Begin the document."""
        self._transition(WriterState.DOCUMENT)
        return self

    def finish(self) -> "RdfWriter":
        """Close any open subject block, returning to DOCUMENT state."""
        self._transition(WriterState.DOCUMENT)
        return self

    def prefix(self, name: str, iri: str) -> "RdfWriter":
        """Declare a namespace abbreviation. Only valid before any subject."""
        if self._role is WriterRole.SUBDOCUMENT:
            raise ProtocolError("Prefixes can only be declared on the top level writer")
        if self._state not in (WriterState.START, WriterState.DOCUMENT) or self._subject_written:
            raise ProtocolError(
                f"Bad transition: prefixes must be declared before any subject (state {self._state.value})"
            )
        check_prefix_name(name)
        check_absolute_iri(iri)
        self._context.prefixes[name] = iri
        self.write_prefix(name, iri)
        return self

    def about(self, base: str, local: Optional[str] = None) -> "RdfWriter":
        """Begin a new subject block."""
        self._check_term(base, local)
        if base == TYPE_SHORTHAND and local is None:
            raise ProtocolError("'a' is only valid in predicate position")
        self._transition(WriterState.SUBJECT)
        self._subject_written = True
        self.write_subject(base, local)
        return self

    def say(self, base: str, local: Optional[str] = None) -> "RdfWriter":
        """Begin a predicate on the current subject. ``say("a")`` is rdf:type."""
        if not (base == TYPE_SHORTHAND and local is None):
            self._check_term(base, local)
            if base == BLANK_BASE:
                raise ProtocolError("Blank nodes are not valid in predicate position")
        self._transition(WriterState.PREDICATE)
        self.write_predicate(base, local)
        return self

    def a(self, base: str, local: Optional[str] = None) -> "RdfWriter":
        """Shorthand for ``say("a").is_(base, local)``."""
        return self.say(TYPE_SHORTHAND).is_(base, local)

    def is_(self, base: str, local: Optional[str] = None) -> "RdfWriter":
        """Add a resource object to the current predicate."""
        self._check_term(base, local)
        if base == TYPE_SHORTHAND and local is None:
            raise ProtocolError("'a' is only valid in predicate position")
        self._transition(WriterState.OBJECT)
        self.write_resource(base, local)
        return self

    def text(self, text: str, language: Optional[str] = None) -> "RdfWriter":
        """Add a plain or language-tagged string literal."""
        if not isinstance(text, str):
            raise ProtocolError(f"Text literal must be a string, got {type(text).__name__}")
        self._transition(WriterState.OBJECT)
        self.write_text(text, language)
        return self

    def value(
        self,
        literal: Any,
        type_base: Optional[str] = None,
        type_local: Optional[str] = None,
    ) -> "RdfWriter":
        """Add a literal, typed when ``type_base`` is given."""
        if type_base is not None:
            self._check_term(type_base, type_local)
            if type_base == BLANK_BASE:
                raise ProtocolError("Blank nodes are not valid datatypes")
        self._transition(WriterState.OBJECT)
        self.write_value(self._lexical_form(literal), type_base, type_local)
        return self

    def blank(self, label: Optional[str] = None) -> str:
        """Allocate (or reuse) a blank node label, unique per document."""
        return self._context.labeler.get_label(label)

    def sub(self) -> "RdfWriter":
        """
        Create a nested writer sharing labeler, prefixes and arena.

        The nested writer starts in DOCUMENT state. Its output is placed at
        the current position if this writer is at a document boundary, or
        right after the currently open subject block otherwise.
        """
        child = self.new_sub_writer(self._context, self._node)
        child._state = WriterState.DOCUMENT
        if self._state in (WriterState.SUBJECT, WriterState.PREDICATE, WriterState.OBJECT):
            self._pending_children.append(child._node)
        else:
            self._emit(child._node)
        return child

    def drain(self) -> str:
        """
        Return the accumulated text and clear the buffer.

        An open subject block is closed first; nested writers are drained
        bottom-up and stay attached for further output.
        """
        if self._role is WriterRole.SUBDOCUMENT:
            raise ProtocolError("Only the top level writer can be drained")
        self._transition(WriterState.DRAIN)
        return self._collect()

    def reset(self) -> None:
        """
        Discard buffered output and return to START.

        The blank node counter is kept, since it may be shared.
        """
        node = self._context.arena.nodes[self._node]
        node.chunks = list(node.children)
        self._pending_children = []
        self._state = WriterState.START
        self._subject_written = False

    # -------------------------------------------------------------------------
    # State machine
    # -------------------------------------------------------------------------

    def _transition(self, target: WriterState) -> None:
        current = self._state
        if current not in TRANSITIONS[target]:
            raise ProtocolError(f"Bad transition: {current.value} -> {target.value}")

        if target is WriterState.DOCUMENT:
            if current is WriterState.START or current is WriterState.DRAIN:
                self.begin_document()
            elif current is WriterState.OBJECT:
                self._close_subject()

        elif target is WriterState.SUBJECT:
            if current is WriterState.OBJECT:
                self._close_subject()
                self.begin_subject(first=False)
            else:
                self.begin_subject(first=True)

        elif target is WriterState.PREDICATE:
            if current is WriterState.OBJECT:
                self.finish_object(last=True)
                self.finish_predicate(last=False)
                self.begin_predicate(first=False)
            else:
                self.begin_predicate(first=True)

        elif target is WriterState.OBJECT:
            if current is WriterState.OBJECT:
                self.finish_object(last=False)
                self.begin_object(first=False)
            else:
                self.begin_object(first=True)

        elif target is WriterState.DRAIN:
            if current is WriterState.OBJECT:
                self._close_subject()
                self.finish_document()
            elif current is WriterState.DOCUMENT:
                self.finish_document()

        self._state = target

    def _close_subject(self) -> None:
        self.finish_object(last=True)
        self.finish_predicate(last=True)
        self.finish_subject()
        if self._pending_children:
            self._emit(*self._pending_children)
            self._pending_children = []

    def _collect(self) -> str:
        arena = self._context.arena
        node = arena.nodes[self._node]
        parts = []
        for chunk in node.chunks:
            if isinstance(chunk, int):
                parts.append(arena.owners[chunk]._flush_as_child())
            else:
                parts.append(chunk)
        # nested writers stay attached at the head of the next chunk
        node.chunks = [c for c in node.children if c not in self._pending_children]
        self._subject_written = False
        return "".join(parts)

    def _flush_as_child(self) -> str:
        if self._state in (WriterState.SUBJECT, WriterState.PREDICATE):
            raise ProtocolError(
                f"Bad transition: cannot drain a nested writer in state {self._state.value}"
            )
        if self._state is WriterState.OBJECT:
            self._close_subject()
        text = self._collect()
        self._state = WriterState.DOCUMENT
        return text

    def _emit(self, *chunks: Union[str, int]) -> None:
        self._context.arena.nodes[self._node].chunks.extend(chunks)

    def _check_term(self, base: str, local: Optional[str]) -> None:
        if not isinstance(base, str) or not base:
            raise ProtocolError("Term base must be a non-empty string")
        if local is None:
            if base != TYPE_SHORTHAND:
                check_absolute_iri(base)
            return
        if not isinstance(local, str):
            raise ProtocolError(f"Local name must be a string, got {type(local).__name__}")
        if base == BLANK_BASE:
            check_label(local)
            return
        if base not in self._context.prefixes:
            raise ProtocolError(f"Unknown prefix: {base!r}")

    def expand(self, base: str, local: Optional[str]) -> str:
        """Expand a prefixed name to a full IRI."""
        if local is None:
            if base == TYPE_SHORTHAND:
                return RDF_TYPE_IRI
            return base
        return self._context.prefixes[base] + local

    @staticmethod
    def _lexical_form(literal: Any) -> str:
        if isinstance(literal, bool):
            return "true" if literal else "false"
        if literal is None:
            raise ProtocolError("Literal value must not be None")
        return str(literal)

    # -------------------------------------------------------------------------
    # Dialect hooks
    # -------------------------------------------------------------------------

    @abstractmethod
    def new_sub_writer(self, context: WriterContext, parent_node: int) -> "RdfWriter":
        ...

    @abstractmethod
    def write_prefix(self, name: str, iri: str) -> None:
        ...

    @abstractmethod
    def write_subject(self, base: str, local: Optional[str]) -> None:
        ...

    @abstractmethod
    def write_predicate(self, base: str, local: Optional[str]) -> None:
        ...

    @abstractmethod
    def write_resource(self, base: str, local: Optional[str]) -> None:
        ...

    @abstractmethod
    def write_text(self, text: str, language: Optional[str]) -> None:
        ...

    @abstractmethod
    def write_value(self, literal: str, type_base: Optional[str], type_local: Optional[str]) -> None:
        ...

    def begin_document(self) -> None:
        pass

    def finish_document(self) -> None:
        pass

    def begin_subject(self, first: bool = False) -> None:
        pass

    def finish_subject(self) -> None:
        pass

    def begin_predicate(self, first: bool = False) -> None:
        pass

    def finish_predicate(self, last: bool = False) -> None:
        pass

    def begin_object(self, first: bool = False) -> None:
        pass

    def finish_object(self, last: bool = False) -> None:
        pass
