"""
Escaping rules shared by the Turtle and N-Triples renderers.

Reference: https://www.w3.org/TR/turtle/#sec-escapes
"""

import re
from urllib.parse import quote

from entity_rdf.writer.errors import ProtocolError

ABSOLUTE_IRI_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")
PREFIX_NAME_PATTERN = re.compile(r"^([A-Za-z]([A-Za-z0-9_.\-]*[A-Za-z0-9_\-])?)?$")
# Conservative subset of PN_LOCAL: no escapes, no trailing dot
LOCAL_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_]([A-Za-z0-9_.\-]*[A-Za-z0-9_\-])?$")
LANGUAGE_TAG_PATTERN = re.compile(r"^[A-Za-z]+(-[A-Za-z0-9]+)*$")

_IRI_UNSAFE = set('<>"{}|^`\\')
_LONG_QUOTE_TRIGGER = re.compile(r"[\t\n\r]")
_SURROGATES = re.compile(r"[\ud800-\udfff]")

_SHORT_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\b": "\\b",
    "\f": "\\f",
}


def is_absolute_iri(iri: str) -> bool:
    return bool(iri) and ABSOLUTE_IRI_PATTERN.match(iri) is not None


def is_valid_language_tag(language: str) -> bool:
    return bool(language) and LANGUAGE_TAG_PATTERN.match(language) is not None


def is_safe_local_name(local: str) -> bool:
    return LOCAL_NAME_PATTERN.match(local) is not None


def check_prefix_name(name: str) -> None:
    if not isinstance(name, str) or not PREFIX_NAME_PATTERN.match(name):
        raise ProtocolError(f"Invalid prefix name: {name!r}")


def check_absolute_iri(iri: str) -> None:
    if not isinstance(iri, str) or not iri:
        raise ProtocolError("IRI must be a non-empty string")
    if not is_absolute_iri(iri):
        raise ProtocolError(f"Relative IRI where an absolute IRI is required: {iri!r}")


def replace_surrogates(text: str) -> str:
    """Replace lone surrogates, which cannot be encoded as UTF-8."""
    return _SURROGATES.sub("�", text)


def escape_iri(iri: str) -> str:
    """
    Percent-encode characters that are not allowed inside ``<...>``.

    Returns the IRI without angle brackets.
    """
    iri = replace_surrogates(iri)
    out = []
    for ch in iri:
        if ch in _IRI_UNSAFE or ord(ch) <= 0x20:
            out.append(quote(ch, safe=""))
        else:
            out.append(ch)
    return "".join(out)


def _escape_char(ch: str, keep_whitespace: bool) -> str:
    if keep_whitespace and ch in "\n\r\t":
        return ch
    if ch in _SHORT_ESCAPES:
        return _SHORT_ESCAPES[ch]
    code = ord(ch)
    if code < 0x20 or code == 0x7F:
        return f"\\u{code:04X}"
    return ch


def escape_string(text: str, keep_whitespace: bool = False) -> str:
    """
    Escape a literal's lexical form.

    Backslash, double quote and control characters are always escaped.
    With ``keep_whitespace``, raw newline, carriage return and tab are left
    alone (for triple-quoted literals).
    """
    text = replace_surrogates(text)
    return "".join(_escape_char(ch, keep_whitespace) for ch in text)


def quoted_string(text: str, allow_long: bool = True) -> str:
    """
    Enclose ``text`` in quotes.

    Strings containing tabs, line feeds or carriage returns are enclosed in
    three double quotes when ``allow_long`` is set.
    """
    if allow_long and _LONG_QUOTE_TRIGGER.search(text):
        return '"""' + escape_string(text, keep_whitespace=True) + '"""'
    return '"' + escape_string(text) + '"'
