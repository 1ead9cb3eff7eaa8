"""
Value builders.

Each builder renders one kind of data value as the object of a property
predicate. Simple rendering writes a single literal or IRI. When a
:class:`ComplexValueRdfHelper` is given, time, quantity and globe
coordinate builders additionally link a value node carrying the value's
decomposed fields; value nodes are named by content hash and written once
per dedup bag.

All lexical forms are computed before anything is written, so a
malformed value (``ValueError``) is skipped without leaving a dangling
predicate behind.
"""

import calendar
import logging
import math
import re
from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional, Tuple

from entity_rdf.dedup import DedupBag
from entity_rdf.mentions import MentionTracker
from entity_rdf.models import (
    GLOBE_EARTH,
    DataValue,
    EntityIdValue,
    GlobeCoordinateValue,
    MonolingualTextValue,
    QuantityValue,
    StringValue,
    TimeValue,
)
from entity_rdf.vocabulary import (
    NS_ENTITY,
    NS_GEO,
    NS_ONTOLOGY,
    NS_VALUE,
    NS_XSD,
    RdfVocabulary,
)
from entity_rdf.writer import RdfWriter
from entity_rdf.writer.escaping import is_absolute_iri

logger = logging.getLogger(__name__)

_DAYS_IN_MONTH = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)
_TIME_OF_DAY = re.compile(r"^\d{2}:\d{2}:\d{2}(\.\d+)?(Z|[+-]\d{2}:\d{2})?$")

# Precision used when a coordinate carries none: one arc second
DEFAULT_GEO_PRECISION = 1 / 3600


# =============================================================================
# Lexical helpers
# =============================================================================

def format_decimal(number: Any) -> str:
    """
    Lexical form of an ``xsd:decimal``.

    Accepts ints, floats and decimal strings with an optional leading ``+``.

    Raises:
        ValueError: if the input is not a finite decimal number
    """
    if isinstance(number, bool) or number is None:
        raise ValueError(f"Not a decimal number: {number!r}")
    if isinstance(number, float):
        if not math.isfinite(number):
            raise ValueError(f"Not a finite number: {number!r}")
        decimal = Decimal(repr(number))
    else:
        text = str(number).strip()
        if text.startswith("+"):
            text = text[1:]
        try:
            decimal = Decimal(text)
        except InvalidOperation:
            raise ValueError(f"Not a decimal number: {number!r}")
        if not decimal.is_finite():
            raise ValueError(f"Not a finite number: {number!r}")
    return format(decimal, "f")


def days_in_month(year: int, month: int) -> int:
    if month == 2 and calendar.isleap(year):
        return 29
    return _DAYS_IN_MONTH[month - 1]


def clean_date_value(time_value: str) -> str:
    """
    Turn a signed ISO 8601 time into a valid ``xsd:dateTime`` lexical form.

    The leading ``+`` is dropped, month and day are clamped to valid
    Gregorian values and the year is written with at least four digits.
    Month and day are reset for years before the start of the Julian day
    count (4714 BCE).

    Raises:
        ValueError: if the time is malformed
    """
    if not isinstance(time_value, str) or "T" not in time_value:
        raise ValueError(f"Malformed time: {time_value!r}")
    date, time_of_day = time_value.split("T", 1)
    if not _TIME_OF_DAY.match(time_of_day):
        raise ValueError(f"Malformed time of day: {time_value!r}")

    negative = date.startswith("-")
    parts = date.lstrip("+-").split("-")
    if len(parts) != 3:
        raise ValueError(f"Malformed date: {time_value!r}")
    try:
        year, month, day = (int(part) for part in parts)
    except ValueError:
        raise ValueError(f"Malformed date: {time_value!r}")
    if negative:
        year = -year

    if year <= -4714:
        month = day = 1
    month = min(max(month, 1), 12)
    day = max(day, 1)
    if day > 28:
        day = min(day, days_in_month(year, month))

    sign = "-" if year < 0 else ""
    return f"{sign}{abs(year):04d}-{month:02d}-{day:02d}T{time_of_day}"


def write_iri_or_text(writer: RdfWriter, text: str) -> None:
    """Write ``text`` as an IRI object if it is an absolute IRI, as a plain literal otherwise."""
    text = text.strip()
    if is_absolute_iri(text):
        writer.is_(text)
    else:
        writer.text(text)


def _expect(value: DataValue, value_class: type) -> None:
    if not isinstance(value, value_class):
        raise ValueError(f"Expected {value_class.__name__}, got {type(value).__name__}")


# =============================================================================
# Value nodes
# =============================================================================

class ComplexValueRdfHelper:
    """
    Links expanded value nodes and writes them once.

    Value nodes go to a nested writer, created on first use so that its
    output lands after the document prolog.
    """

    def __init__(self, vocabulary: RdfVocabulary, writer: RdfWriter, dedup: DedupBag):
        self.vocabulary = vocabulary
        self.dedup = dedup
        self._document_writer = writer
        self._value_writer: Optional[RdfWriter] = None

    def get_value_node_writer(self) -> RdfWriter:
        if self._value_writer is None:
            self._value_writer = self._document_writer.sub()
        return self._value_writer

    def attach_value_node(
        self,
        writer: RdfWriter,
        namespace: str,
        local_name: str,
        value: DataValue,
    ) -> Optional[str]:
        """
        Link the value node from the current subject and open its subject block.

        Returns:
            The value node's local name, or None if the node was already written
        """
        value_lname = self.vocabulary.get_value_lname(value)
        writer.say(namespace, local_name + "-value").is_(NS_VALUE, value_lname)
        if self.dedup.already_seen(value_lname, "V"):
            return None
        type_name = self.vocabulary.get_value_type_name(value) or "Value"
        self.get_value_node_writer().about(NS_VALUE, value_lname).a(NS_ONTOLOGY, type_name)
        return value_lname


# =============================================================================
# Builders
# =============================================================================

class ValueSnakRdfBuilder(ABC):
    """Renders one kind of data value."""

    def check_value(self, value: DataValue) -> None:
        """
        Raises:
            ValueError: if the value cannot be rendered by this builder
        """
        pass

    @abstractmethod
    def add_value(
        self,
        writer: RdfWriter,
        namespace: str,
        local_name: str,
        data_type: Optional[str],
        value: DataValue,
    ) -> None:
        ...


class LiteralValueRdfBuilder(ValueSnakRdfBuilder):
    """String values as plain literals, or typed literals when a datatype is given."""

    def __init__(self, type_base: Optional[str] = None, type_local: Optional[str] = None):
        self.type_base = type_base
        self.type_local = type_local

    def check_value(self, value: DataValue) -> None:
        _expect(value, StringValue)

    def add_value(self, writer, namespace, local_name, data_type, value):
        self.check_value(value)
        writer.say(namespace, local_name)
        if self.type_base is None:
            writer.text(value.value)
        else:
            writer.value(value.value, self.type_base, self.type_local)


class ObjectUriRdfBuilder(ValueSnakRdfBuilder):
    """String values holding a URL, written as IRIs."""

    def check_value(self, value: DataValue) -> None:
        _expect(value, StringValue)

    def add_value(self, writer, namespace, local_name, data_type, value):
        self.check_value(value)
        url = value.value.strip()
        writer.say(namespace, local_name)
        if is_absolute_iri(url):
            writer.is_(url)
        else:
            logger.debug(f"Not an absolute URL, writing a literal: {url!r}")
            writer.text(url)


class CommonsMediaRdfBuilder(ValueSnakRdfBuilder):
    """File names on Wikimedia Commons, written as file path IRIs."""

    def __init__(self, vocabulary: RdfVocabulary):
        self.vocabulary = vocabulary

    def check_value(self, value: DataValue) -> None:
        _expect(value, StringValue)

    def add_value(self, writer, namespace, local_name, data_type, value):
        self.check_value(value)
        writer.say(namespace, local_name).is_(self.vocabulary.get_commons_uri(value.value))


class MonolingualTextRdfBuilder(ValueSnakRdfBuilder):
    def check_value(self, value: DataValue) -> None:
        _expect(value, MonolingualTextValue)

    def add_value(self, writer, namespace, local_name, data_type, value):
        self.check_value(value)
        writer.say(namespace, local_name).text(value.text, value.language)


class EntityIdRdfBuilder(ValueSnakRdfBuilder):
    """References to other entities. The referenced entity is reported as mentioned."""

    def __init__(self, vocabulary: RdfVocabulary, mentions: MentionTracker):
        self.vocabulary = vocabulary
        self.mentions = mentions

    def check_value(self, value: DataValue) -> None:
        _expect(value, EntityIdValue)

    def add_value(self, writer, namespace, local_name, data_type, value):
        self.check_value(value)
        entity_lname = self.vocabulary.get_entity_lname(value.entity_id)
        writer.say(namespace, local_name).is_(NS_ENTITY, entity_lname)
        self.mentions.entity_mentioned(value.entity_id)


class TimeRdfBuilder(ValueSnakRdfBuilder):
    """
    Time values as ``xsd:dateTime``.

    The value node carries ``timeValue``, ``timePrecision``,
    ``timeTimezone`` and ``timeCalendarModel``.
    """

    def __init__(self, complex_helper: Optional[ComplexValueRdfHelper] = None):
        self.complex_helper = complex_helper

    def _lexical_forms(self, value: DataValue) -> Tuple[str, str, str]:
        _expect(value, TimeValue)
        try:
            precision = str(int(value.precision))
            timezone = str(int(value.timezone))
        except (TypeError, ValueError):
            raise ValueError(f"Malformed precision or timezone in {value!r}")
        if not isinstance(value.calendar_model, str) or not value.calendar_model.strip():
            raise ValueError(f"Missing calendar model in {value!r}")
        return clean_date_value(value.time), precision, timezone

    def check_value(self, value: DataValue) -> None:
        self._lexical_forms(value)

    def add_value(self, writer, namespace, local_name, data_type, value):
        time, precision, timezone = self._lexical_forms(value)
        writer.say(namespace, local_name).value(time, NS_XSD, "dateTime")

        if self.complex_helper is None:
            return
        value_lname = self.complex_helper.attach_value_node(writer, namespace, local_name, value)
        if value_lname is None:
            return
        value_writer = self.complex_helper.get_value_node_writer()
        value_writer.say(NS_ONTOLOGY, "timeValue").value(time, NS_XSD, "dateTime")
        value_writer.say(NS_ONTOLOGY, "timePrecision").value(precision, NS_XSD, "integer")
        value_writer.say(NS_ONTOLOGY, "timeTimezone").value(timezone, NS_XSD, "integer")
        value_writer.say(NS_ONTOLOGY, "timeCalendarModel")
        write_iri_or_text(value_writer, value.calendar_model)


class QuantityRdfBuilder(ValueSnakRdfBuilder):
    """
    Quantity amounts as ``xsd:decimal``.

    The value node carries the amount, the bounds when present and the
    unit (an IRI, or the literal ``"1"`` for unitless quantities).
    """

    def __init__(self, complex_helper: Optional[ComplexValueRdfHelper] = None):
        self.complex_helper = complex_helper

    def _lexical_forms(self, value: DataValue) -> Dict[str, Optional[str]]:
        _expect(value, QuantityValue)
        return {
            "amount": format_decimal(value.amount),
            "upper": format_decimal(value.upper_bound) if value.upper_bound is not None else None,
            "lower": format_decimal(value.lower_bound) if value.lower_bound is not None else None,
        }

    def check_value(self, value: DataValue) -> None:
        self._lexical_forms(value)

    def add_value(self, writer, namespace, local_name, data_type, value):
        forms = self._lexical_forms(value)
        writer.say(namespace, local_name).value(forms["amount"], NS_XSD, "decimal")

        if self.complex_helper is None:
            return
        value_lname = self.complex_helper.attach_value_node(writer, namespace, local_name, value)
        if value_lname is None:
            return
        value_writer = self.complex_helper.get_value_node_writer()
        value_writer.say(NS_ONTOLOGY, "quantityAmount").value(forms["amount"], NS_XSD, "decimal")
        if forms["upper"] is not None:
            value_writer.say(NS_ONTOLOGY, "quantityUpperBound").value(forms["upper"], NS_XSD, "decimal")
        if forms["lower"] is not None:
            value_writer.say(NS_ONTOLOGY, "quantityLowerBound").value(forms["lower"], NS_XSD, "decimal")
        value_writer.say(NS_ONTOLOGY, "quantityUnit")
        write_iri_or_text(value_writer, value.unit or "1")


class GlobeCoordinateRdfBuilder(ValueSnakRdfBuilder):
    """
    Coordinates as ``geo:wktLiteral`` points.

    WKT puts longitude first. Points on globes other than Earth are
    prefixed with the globe IRI as coordinate reference system.
    """

    def __init__(self, complex_helper: Optional[ComplexValueRdfHelper] = None):
        self.complex_helper = complex_helper

    def _lexical_forms(self, value: DataValue) -> Dict[str, str]:
        _expect(value, GlobeCoordinateValue)
        latitude = format_decimal(value.latitude)
        longitude = format_decimal(value.longitude)
        if value.precision is None:
            precision = format_decimal(DEFAULT_GEO_PRECISION)
        else:
            precision = format_decimal(value.precision)
        point = f"Point({longitude} {latitude})"
        globe = (value.globe or "").strip()
        if globe and globe != GLOBE_EARTH:
            point = "<" + globe.replace(">", "%3E") + "> " + point
        return {
            "point": point,
            "latitude": latitude,
            "longitude": longitude,
            "precision": precision,
            "globe": globe,
        }

    def check_value(self, value: DataValue) -> None:
        self._lexical_forms(value)

    def add_value(self, writer, namespace, local_name, data_type, value):
        forms = self._lexical_forms(value)
        writer.say(namespace, local_name).value(forms["point"], NS_GEO, "wktLiteral")

        if self.complex_helper is None:
            return
        value_lname = self.complex_helper.attach_value_node(writer, namespace, local_name, value)
        if value_lname is None:
            return
        value_writer = self.complex_helper.get_value_node_writer()
        value_writer.say(NS_ONTOLOGY, "geoLatitude").value(forms["latitude"], NS_XSD, "decimal")
        value_writer.say(NS_ONTOLOGY, "geoLongitude").value(forms["longitude"], NS_XSD, "decimal")
        if value.precision is None:
            value_writer.a(NS_ONTOLOGY, "GeoAutoPrecision")
        value_writer.say(NS_ONTOLOGY, "geoPrecision").value(forms["precision"], NS_XSD, "decimal")
        if forms["globe"]:
            value_writer.say(NS_ONTOLOGY, "geoGlobe")
            write_iri_or_text(value_writer, forms["globe"])


class DispatchingValueRdfBuilder(ValueSnakRdfBuilder):
    """
    Picks a builder by property data type, then by value type.

    Keys are ``PT:<data type>`` and ``VT:<value type>``. Values with no
    matching builder, and malformed values, are skipped with a warning.
    """

    def __init__(self, builders: Dict[str, ValueSnakRdfBuilder]):
        self.builders = dict(builders)

    def get_builder(self, data_type: Optional[str], value: DataValue) -> Optional[ValueSnakRdfBuilder]:
        if data_type:
            builder = self.builders.get("PT:" + data_type)
            if builder is not None:
                return builder
        return self.builders.get("VT:" + value.value_type)

    def can_add_value(self, data_type: Optional[str], value: DataValue) -> bool:
        """Whether :meth:`add_value` would write anything for this value."""
        builder = self.get_builder(data_type, value)
        if builder is None:
            return False
        try:
            builder.check_value(value)
        except ValueError:
            return False
        return True

    def add_value(self, writer, namespace, local_name, data_type, value):
        builder = self.get_builder(data_type, value)
        if builder is None:
            logger.warning(
                f"Unsupported value type {value.value_type!r} "
                f"(data type {data_type!r}) for {namespace}:{local_name}, skipping"
            )
            return
        try:
            builder.add_value(writer, namespace, local_name, data_type, value)
        except ValueError as e:
            logger.warning(f"Skipping malformed {value.value_type} value for {namespace}:{local_name}: {e}")


def create_value_builder(
    vocabulary: RdfVocabulary,
    mentions: MentionTracker,
    complex_helper: Optional[ComplexValueRdfHelper] = None,
) -> DispatchingValueRdfBuilder:
    """
    Build the standard dispatcher.

    Args:
        vocabulary: Namespace registry
        mentions: Tracker notified of entity id values
        complex_helper: Enables expanded value nodes when given
    """
    literal = LiteralValueRdfBuilder()
    return DispatchingValueRdfBuilder({
        "PT:commonsMedia": CommonsMediaRdfBuilder(vocabulary),
        "PT:url": ObjectUriRdfBuilder(),
        "VT:string": literal,
        "VT:monolingualtext": MonolingualTextRdfBuilder(),
        "VT:wikibase-entityid": EntityIdRdfBuilder(vocabulary, mentions),
        "VT:time": TimeRdfBuilder(complex_helper),
        "VT:quantity": QuantityRdfBuilder(complex_helper),
        "VT:globecoordinate": GlobeCoordinateRdfBuilder(complex_helper),
    })
