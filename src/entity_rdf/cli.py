"""
Command line interface.

Usage:
    entity-rdf dump entities.json -o dump.ttl --flavor dump
    entity-rdf dump entities.jsonl --format nt --shard-count 4 --shard 1
    entity-rdf entity entities.json Q42 --flavor full
    entity-rdf formats
"""

import argparse
import logging
import sys
from contextlib import contextmanager
from typing import Iterator, List, Optional, TextIO

from entity_rdf import __version__
from entity_rdf.config import ConfigValidationError, ConfigValidator, ExportConfig
from entity_rdf.dump import RdfDumpGenerator
from entity_rdf.flavor import Flavor
from entity_rdf.json_codec import EntityDecodingError, load_lookups
from entity_rdf.models import EntityIdParsingError, parse_entity_id
from entity_rdf.serializer import create_rdf_serializer
from entity_rdf.writer import RdfWriterFactory, UnknownFormatError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="entity-rdf",
        description="Export knowledge-base entities as Turtle, N3 or N-Triples",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", "-c", type=str,
                        help="Export configuration file (JSON or YAML)")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging level (default: WARNING)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    dump = subparsers.add_parser("dump", help="Write all entities of a file as one RDF document")
    dump.add_argument("entities", help="Entity JSON file (array, entities map or JSON lines)")
    dump.add_argument("--output", "-o", type=str,
                      help="Output file path (default: stdout)")
    dump.add_argument("--format", "-f", type=str,
                      help="Output format name, extension or MIME type (default: from config)")
    dump.add_argument("--flavor", type=str,
                      help="Comma separated flavor names (default: from config, 'dump')")
    dump.add_argument("--shard-count", type=int,
                      help="Number of shards to split the entities into")
    dump.add_argument("--shard", type=int,
                      help="Shard to write, starting at 0")
    dump.add_argument("--limit", type=int,
                      help="Maximum number of entities to write")
    dump.add_argument("--timestamp", type=str, default=None,
                      help="Dump modification time (ISO 8601 or YYYYMMDDhhmmss, default: epoch)")

    entity = subparsers.add_parser("entity", help="Write one entity as an RDF document")
    entity.add_argument("entities", help="Entity JSON file")
    entity.add_argument("entity_id", help="Id of the entity to write, e.g. Q42")
    entity.add_argument("--output", "-o", type=str,
                        help="Output file path (default: stdout)")
    entity.add_argument("--format", "-f", type=str,
                        help="Output format (default: from config)")
    entity.add_argument("--flavor", type=str,
                        help="Comma separated flavor names (default: from config, 'full')")

    subparsers.add_parser("formats", help="List supported output formats")

    return parser


def load_config(path: Optional[str]) -> ExportConfig:
    config = ExportConfig.load(path) if path else ExportConfig()
    ConfigValidator.validate_or_raise(config)
    return config


@contextmanager
def open_output(path: Optional[str]) -> Iterator[TextIO]:
    if not path:
        yield sys.stdout
        return
    with open(path, "w", encoding="utf-8", newline="") as f:
        yield f


def cmd_formats(args: argparse.Namespace) -> int:
    factory = RdfWriterFactory()
    for name in factory.get_formats():
        mime_types = ", ".join(factory.get_mime_types(name))
        print(f"{name}\t.{factory.get_file_extension(name)}\t{mime_types}")
    return 0


def cmd_dump(args: argparse.Namespace, config: ExportConfig) -> int:
    format_name = args.format or config.output.format
    flavor = Flavor.from_names(args.flavor) if args.flavor else config.get_dump_flavor()
    shard_count = args.shard_count if args.shard_count is not None else config.dump.shard_count
    shard = args.shard if args.shard is not None else config.dump.shard
    limit = args.limit if args.limit is not None else config.dump.limit

    entity_lookup, property_lookup = load_lookups(args.entities)
    serializer = create_rdf_serializer(format_name, config, entity_lookup, property_lookup, flavor)

    with open_output(args.output) as out:
        generator = RdfDumpGenerator(
            out,
            entity_lookup,
            serializer,
            shard_count=shard_count,
            shard=shard,
            limit=limit,
            timestamp=args.timestamp or 0,
        )
        stats = generator.generate_dump(entity_lookup.get_entity_ids())

    logger.info(f"Dump finished: {stats.to_dict()}")
    return 0


def cmd_entity(args: argparse.Namespace, config: ExportConfig) -> int:
    format_name = args.format or config.output.format
    flavor = Flavor.from_names(args.flavor) if args.flavor else config.get_flavor()

    entity_id = parse_entity_id(args.entity_id)
    entity_lookup, property_lookup = load_lookups(args.entities)
    revision = entity_lookup.get_entity_revision(entity_id)
    if revision is None:
        print(f"Entity not found: {entity_id}", file=sys.stderr)
        return 1

    serializer = create_rdf_serializer(format_name, config, entity_lookup, property_lookup, flavor)
    with open_output(args.output) as out:
        out.write(serializer.serialize_entity_revision(revision))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.command == "formats":
        return cmd_formats(args)

    try:
        config = load_config(args.config)
        if args.command == "dump":
            return cmd_dump(args, config)
        return cmd_entity(args, config)
    except (ConfigValidationError, EntityDecodingError, EntityIdParsingError, UnknownFormatError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except ValueError as e:
        # unknown flavor names, out of range shards
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
