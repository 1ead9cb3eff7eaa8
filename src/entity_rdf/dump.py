"""
Streaming RDF dumps.

A dump is one document: the prolog and dump header, then every entity,
drained to the output stream after each one. A single builder serves the
whole run, so blank node labels and value/reference node dedup span all
entities of the dump.
"""

import logging
import zlib
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, TextIO

from entity_rdf.lookup import EntityLookupError, EntityRevisionLookup
from entity_rdf.models import EntityId
from entity_rdf.rdf_builder import Timestamp
from entity_rdf.serializer import RdfSerializer

logger = logging.getLogger(__name__)


@dataclass
class DumpStats:
    entities_written: int = 0
    entities_missing: int = 0
    entities_skipped: int = 0
    stubs_written: int = 0
    chars_written: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entities_written": self.entities_written,
            "entities_missing": self.entities_missing,
            "entities_skipped": self.entities_skipped,
            "stubs_written": self.stubs_written,
            "chars_written": self.chars_written,
        }


def shard_for(entity_id: EntityId, shard_count: int) -> int:
    """Stable shard number of an entity id, the same in every process."""
    return zlib.crc32(entity_id.serialization.encode("utf-8")) % shard_count


class RdfDumpGenerator:
    """
    Writes a dump of many entities to a text stream.

    Args:
        out: Output stream
        revision_lookup: Source of entity revisions
        serializer: Serializer providing format, flavor and lookups
        shard_count: Number of shards the id space is split into
        shard: Shard to write, 0 <= shard < shard_count
        limit: Stop after this many entities (None for no limit)
        timestamp: Modification time for the dump header
    """

    def __init__(
        self,
        out: TextIO,
        revision_lookup: EntityRevisionLookup,
        serializer: RdfSerializer,
        shard_count: int = 1,
        shard: int = 0,
        limit: Optional[int] = None,
        timestamp: Timestamp = 0,
    ):
        if shard_count < 1:
            raise ValueError(f"shard_count must be positive: {shard_count}")
        if not 0 <= shard < shard_count:
            raise ValueError(f"shard must be in [0, {shard_count}): {shard}")
        if limit is not None and limit < 0:
            raise ValueError(f"limit must not be negative: {limit}")
        self.out = out
        self.revision_lookup = revision_lookup
        self.serializer = serializer
        self.shard_count = shard_count
        self.shard = shard
        self.limit = limit
        self.timestamp = timestamp

    def in_shard(self, entity_id: EntityId) -> bool:
        return self.shard_count == 1 or shard_for(entity_id, self.shard_count) == self.shard

    def _write(self, text: str, stats: DumpStats) -> None:
        if text:
            self.out.write(text)
            stats.chars_written += len(text)

    def generate_dump(self, entity_ids: Iterable[EntityId]) -> DumpStats:
        stats = DumpStats()
        builder = self.serializer.new_rdf_builder()

        builder.start_document()
        builder.add_dump_header(self.timestamp)
        self._write(builder.get_rdf(), stats)

        for entity_id in entity_ids:
            if self.limit is not None and stats.entities_written >= self.limit:
                break
            if not self.in_shard(entity_id):
                stats.entities_skipped += 1
                continue

            try:
                revision = self.revision_lookup.get_entity_revision(entity_id)
            except EntityLookupError as e:
                logger.warning(f"Failed to load {entity_id}, skipping: {e}")
                stats.entities_missing += 1
                continue
            if revision is None:
                logger.warning(f"Entity not found: {entity_id}, skipping")
                stats.entities_missing += 1
                continue

            builder.writer.start()
            stats.stubs_written += self.serializer.write_entity_revision(builder, revision)
            self._write(builder.get_rdf(), stats)
            stats.entities_written += 1

        logger.info(
            f"Dump shard {self.shard}/{self.shard_count}: {stats.entities_written} entities written, "
            f"{stats.entities_missing} missing, {stats.entities_skipped} in other shards"
        )
        return stats
