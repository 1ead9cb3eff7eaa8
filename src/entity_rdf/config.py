"""
Export configuration.

Provides:
- Namespace, output and dump settings
- Site registry settings for sitelinks
- JSON and YAML load/save
- Configuration validation
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from entity_rdf.flavor import Flavor
from entity_rdf.sites import SiteList
from entity_rdf.writer import RdfWriterFactory
from entity_rdf.writer.escaping import is_absolute_iri

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")


class ConfigValidationError(Exception):
    """Raised when configuration is invalid."""
    pass


@dataclass
class NamespaceConfig:
    """Concept and document URI prefixes."""
    base_uri: str = "http://www.wikidata.org/entity/"
    data_uri: str = "http://www.wikidata.org/wiki/Special:EntityData/"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base_uri": self.base_uri,
            "data_uri": self.data_uri,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NamespaceConfig":
        return cls(
            base_uri=data.get("base_uri", "http://www.wikidata.org/entity/"),
            data_uri=data.get("data_uri", "http://www.wikidata.org/wiki/Special:EntityData/"),
        )


@dataclass
class OutputConfig:
    """
    What to write.

    ``flavor`` is a comma separated list of flavor or preset names.
    ``dedup_cutoff`` of 0 makes the dedup bag remember every hash.
    """
    format: str = "turtle"
    flavor: str = "full"
    languages: Optional[List[str]] = None
    dedup_cutoff: int = 5

    def to_dict(self) -> Dict[str, Any]:
        return {
            "format": self.format,
            "flavor": self.flavor,
            "languages": self.languages,
            "dedup_cutoff": self.dedup_cutoff,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OutputConfig":
        flavor = data.get("flavor", "full")
        if isinstance(flavor, list):
            flavor = ",".join(flavor)
        return cls(
            format=data.get("format", "turtle"),
            flavor=flavor,
            languages=data.get("languages"),
            dedup_cutoff=data.get("dedup_cutoff", 5),
        )


@dataclass
class DumpConfig:
    """Sharding and limits for batch dumps."""
    shard_count: int = 1
    shard: int = 0
    limit: Optional[int] = None
    flavor: str = "dump"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "shard_count": self.shard_count,
            "shard": self.shard,
            "limit": self.limit,
            "flavor": self.flavor,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DumpConfig":
        flavor = data.get("flavor", "dump")
        if isinstance(flavor, list):
            flavor = ",".join(flavor)
        return cls(
            shard_count=data.get("shard_count", 1),
            shard=data.get("shard", 0),
            limit=data.get("limit"),
            flavor=flavor,
        )


def default_sites() -> List[Dict[str, Any]]:
    return [
        {
            "global_id": "enwiki",
            "language_code": "en",
            "page_url_template": "https://en.wikipedia.org/wiki/$1",
            "group": "wikipedia",
        },
        {
            "global_id": "dewiki",
            "language_code": "de",
            "page_url_template": "https://de.wikipedia.org/wiki/$1",
            "group": "wikipedia",
        },
    ]


@dataclass
class ExportConfig:
    """
    Complete export configuration.

    Used by the CLI, the HTTP router and :func:`entity_rdf.serializer.create_rdf_serializer`.
    """
    namespaces: NamespaceConfig = field(default_factory=NamespaceConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    dump: DumpConfig = field(default_factory=DumpConfig)
    sites: List[Dict[str, Any]] = field(default_factory=default_sites)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "namespaces": self.namespaces.to_dict(),
            "output": self.output.to_dict(),
            "dump": self.dump.to_dict(),
            "sites": self.sites,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExportConfig":
        data = data or {}
        return cls(
            namespaces=NamespaceConfig.from_dict(data.get("namespaces", {})),
            output=OutputConfig.from_dict(data.get("output", {})),
            dump=DumpConfig.from_dict(data.get("dump", {})),
            sites=data.get("sites", default_sites()),
        )

    def get_flavor(self) -> Flavor:
        return Flavor.from_names(self.output.flavor)

    def get_dump_flavor(self) -> Flavor:
        return Flavor.from_names(self.dump.flavor)

    def get_site_list(self) -> SiteList:
        return SiteList.from_list(self.sites)

    def save(self, path: Union[str, Path]) -> None:
        """Save to JSON, or YAML when the file name ends in .yaml or .yml."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.suffix.lower() in YAML_SUFFIXES:
            text = yaml.safe_dump(self.to_dict(), default_flow_style=False, allow_unicode=True, sort_keys=False)
        else:
            text = json.dumps(self.to_dict(), indent=2)
        path.write_text(text, encoding="utf-8")
        logger.debug(f"Saved export config to {path}")

    @classmethod
    def load(cls, path: Union[str, Path]) -> "ExportConfig":
        path = Path(path)
        text = path.read_text(encoding="utf-8")
        if path.suffix.lower() in YAML_SUFFIXES:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
        if data is not None and not isinstance(data, dict):
            raise ConfigValidationError(f"Configuration in {path} must be a mapping")
        return cls.from_dict(data)


class ConfigValidator:
    """Validates export configuration."""

    @staticmethod
    def validate(config: ExportConfig) -> List[str]:
        """
        Validate configuration.

        Returns list of error messages (empty if valid).
        """
        errors = []

        # Namespaces
        for name in ("base_uri", "data_uri"):
            uri = getattr(config.namespaces, name)
            if not is_absolute_iri(uri):
                errors.append(f"{name} must be an absolute URI: {uri!r}")

        # Output
        if RdfWriterFactory().get_format_name(config.output.format) is None:
            errors.append(f"Unknown output format: {config.output.format}")

        for name, flavor in (("output.flavor", config.output.flavor), ("dump.flavor", config.dump.flavor)):
            try:
                Flavor.from_names(flavor)
            except ValueError as e:
                errors.append(f"Invalid {name}: {e}")

        if config.output.dedup_cutoff < 0:
            errors.append("dedup_cutoff cannot be negative")

        if config.output.languages is not None and not all(
            isinstance(lang, str) and lang for lang in config.output.languages
        ):
            errors.append("languages must be a list of language codes")

        # Dump
        if config.dump.shard_count < 1:
            errors.append("shard_count must be at least 1")
        elif not 0 <= config.dump.shard < config.dump.shard_count:
            errors.append(f"shard must be between 0 and {config.dump.shard_count - 1}")

        if config.dump.limit is not None and config.dump.limit < 0:
            errors.append("limit cannot be negative")

        # Sites
        seen = set()
        for site in config.sites:
            missing = [key for key in ("global_id", "language_code", "page_url_template") if not site.get(key)]
            if missing:
                errors.append(f"Site {site.get('global_id', '?')} is missing {', '.join(missing)}")
                continue
            if site["global_id"] in seen:
                errors.append(f"Duplicate site: {site['global_id']}")
            seen.add(site["global_id"])
            if "$1" not in site["page_url_template"]:
                errors.append(f"Site {site['global_id']} page_url_template must contain $1")

        return errors

    @staticmethod
    def validate_or_raise(config: ExportConfig) -> None:
        """Validate configuration, raising on errors."""
        errors = ConfigValidator.validate(config)
        if errors:
            raise ConfigValidationError("; ".join(errors))
