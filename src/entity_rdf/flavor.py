"""
Output flavors.

A flavor is a bitmask of independent aspects of the entity model to
include in the RDF output. Each bit toggles one sub-builder of the
entity orchestrator, or the value rendering strategy.
"""

from enum import IntFlag
from typing import Iterable, List, Union


class Flavor(IntFlag):
    NONE = 0

    TRUTHY_STATEMENTS = 1
    ALL_STATEMENTS = 2
    QUALIFIERS = 4
    REFERENCES = 8
    PROPERTIES = 16
    FULL_VALUES = 32
    SITELINKS = 64
    VERSION_INFO = 128
    RESOLVED_ENTITIES = 256

    # Presets
    TRUTHY = TRUTHY_STATEMENTS | SITELINKS
    DUMP = (
        TRUTHY_STATEMENTS | ALL_STATEMENTS | QUALIFIERS | REFERENCES
        | PROPERTIES | FULL_VALUES | SITELINKS
    )
    FULL = DUMP | VERSION_INFO | RESOLVED_ENTITIES

    @classmethod
    def from_names(cls, names: Union[str, Iterable[str]]) -> "Flavor":
        """
        Parse flavor names or preset names into a flavor.

        Accepts a comma separated string or an iterable of names. Names are
        case-insensitive and may use hyphens instead of underscores.

        Raises:
            ValueError: if a name is unknown
        """
        if isinstance(names, str):
            names = names.split(",")
        flavor = cls.NONE
        for name in names:
            key = name.strip().upper().replace("-", "_")
            if not key:
                continue
            try:
                flavor |= cls[key]
            except KeyError:
                raise ValueError(f"Unknown flavor: {name!r}")
        return flavor

    def to_names(self) -> List[str]:
        """Names of the single aspects set in this flavor."""
        return [
            member.name.lower()
            for member in ASPECTS
            if self & member
        ]


ASPECTS = (
    Flavor.TRUTHY_STATEMENTS,
    Flavor.ALL_STATEMENTS,
    Flavor.QUALIFIERS,
    Flavor.REFERENCES,
    Flavor.PROPERTIES,
    Flavor.FULL_VALUES,
    Flavor.SITELINKS,
    Flavor.VERSION_INFO,
    Flavor.RESOLVED_ENTITIES,
)

PRESETS = {
    "full": Flavor.FULL,
    "dump": Flavor.DUMP,
    "truthy": Flavor.TRUTHY,
}
