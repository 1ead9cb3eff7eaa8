"""
Entity Data HTTP API Router.

Provides REST endpoints serving entities as RDF:
- GET /entity/{entity_id}  one entity document, format negotiated
- GET /formats             supported formats with MIME types
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, Request, Response
from pydantic import BaseModel, Field

from entity_rdf.config import ExportConfig
from entity_rdf.flavor import Flavor
from entity_rdf.lookup import (
    CachingPropertyDataTypeLookup,
    EntityLookup,
    EntityLookupError,
    EntityLookupPropertyDataTypeLookup,
    EntityRevisionLookup,
    PropertyDataTypeLookup,
)
from entity_rdf.models import EntityIdParsingError, EntityRevision, parse_entity_id
from entity_rdf.serializer import create_rdf_serializer
from entity_rdf.writer import RdfWriterFactory

logger = logging.getLogger(__name__)


# =============================================================================
# Pydantic Models
# =============================================================================

class FormatInfo(BaseModel):
    """One supported RDF format."""
    name: str = Field(..., description="Canonical format name")
    extension: str = Field(..., description="File extension without the dot")
    mime_types: List[str] = Field(default_factory=list, description="Accepted MIME types, preferred first")


class FormatsResponse(BaseModel):
    """Supported formats and the server defaults."""
    default_format: str
    default_flavor: str
    formats: List[FormatInfo]


# =============================================================================
# Content negotiation
# =============================================================================

def parse_accept(header: Optional[str]) -> List[str]:
    """
    Media ranges of an Accept header, best first.

    Ranges with q=0 are dropped; ties keep header order.
    """
    if not header:
        return []
    ranges = []
    for position, part in enumerate(header.split(",")):
        fields = [f.strip() for f in part.split(";")]
        media_range = fields[0].lower()
        if not media_range:
            continue
        quality = 1.0
        for param in fields[1:]:
            key, _, value = param.partition("=")
            if key.strip().lower() == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = 0.0
        if quality > 0:
            ranges.append((-quality, position, media_range))
    return [media_range for _, _, media_range in sorted(ranges)]


def negotiate_format(
    factory: RdfWriterFactory,
    default_format: str,
    format_param: Optional[str],
    accept: Optional[str],
) -> Optional[str]:
    """
    Pick the output format.

    An explicit format parameter wins over the Accept header. Wildcards
    select the default format.

    Returns:
        Canonical format name, or None if nothing acceptable is supported
    """
    if format_param:
        return factory.get_format_name(format_param)

    ranges = parse_accept(accept)
    if not ranges:
        return factory.get_format_name(default_format)

    default = factory.get_format_name(default_format)
    for media_range in ranges:
        if media_range == "*/*":
            return default
        if media_range.endswith("/*"):
            major = media_range[:-1]
            if any(mime.startswith(major) for mime in factory.get_mime_types(default)):
                return default
            for name in factory.get_formats():
                if factory.get_mime_types(name)[0].startswith(major):
                    return name
            continue
        name = factory.get_format_name(media_range)
        if name is not None:
            return name
    return None


# =============================================================================
# Router
# =============================================================================

def create_entity_data_router(
    entity_lookup: EntityLookup,
    config: Optional[ExportConfig] = None,
    property_lookup: Optional[PropertyDataTypeLookup] = None,
) -> APIRouter:
    """
    Create the entity data API router.

    Args:
        entity_lookup: Source of entities; revision info is written when it
            is also an EntityRevisionLookup
        config: Export configuration (default: ExportConfig())
        property_lookup: Property data type lookup (default: read from the
            property entities, cached for the lifetime of the router)

    Returns:
        The router
    """
    config = config or ExportConfig()
    if property_lookup is None:
        property_lookup = CachingPropertyDataTypeLookup(EntityLookupPropertyDataTypeLookup(entity_lookup))

    factory = RdfWriterFactory()
    router = APIRouter(tags=["Entity Data"])

    def load_revision(entity_id) -> Optional[EntityRevision]:
        if isinstance(entity_lookup, EntityRevisionLookup):
            return entity_lookup.get_entity_revision(entity_id)
        entity = entity_lookup.get_entity(entity_id)
        return EntityRevision(entity) if entity is not None else None

    @router.get("/formats", response_model=FormatsResponse)
    async def list_formats():
        """List supported output formats."""
        return FormatsResponse(
            default_format=config.output.format,
            default_flavor=config.output.flavor,
            formats=[
                FormatInfo(
                    name=name,
                    extension=factory.get_file_extension(name),
                    mime_types=factory.get_mime_types(name),
                )
                for name in factory.get_formats()
            ],
        )

    @router.get("/entity/{entity_id}")
    async def get_entity_data(
        entity_id: str,
        request: Request,
        format: Optional[str] = Query(None, description="Format name, extension or MIME type"),
        flavor: Optional[str] = Query(None, description="Comma separated flavor names"),
    ):
        """Serialize one entity as RDF."""
        try:
            parsed_id = parse_entity_id(entity_id)
        except EntityIdParsingError as e:
            raise HTTPException(status_code=400, detail=str(e))

        try:
            selected_flavor = Flavor.from_names(flavor) if flavor else config.get_flavor()
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        format_name = negotiate_format(factory, config.output.format, format, request.headers.get("accept"))
        if format_name is None:
            raise HTTPException(
                status_code=406,
                detail=f"Unsupported format: {format or request.headers.get('accept')}",
            )

        try:
            revision = load_revision(parsed_id)
        except EntityLookupError as e:
            logger.warning(f"Failed to load {parsed_id}: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to load entity: {e}")
        if revision is None:
            raise HTTPException(status_code=404, detail=f"Entity not found: {parsed_id}")

        serializer = create_rdf_serializer(format_name, config, entity_lookup, property_lookup, selected_flavor)
        data = serializer.serialize_entity_revision(revision)
        logger.debug(f"Served {parsed_id} as {format_name} ({len(data)} chars)")
        return Response(content=data, media_type=serializer.default_mime_type)

    return router
