"""
Base class for the per-aspect entity builders composed by the orchestrator.
"""

from abc import ABC, abstractmethod

from entity_rdf.models import Entity


class EntityRdfBuilder(ABC):
    """
    Writes one aspect of an entity (terms, sitelinks, statements, ...).

    Every builder is driven through the same two calls, so the orchestrator
    can run them uniformly.
    """

    @abstractmethod
    def add_entity(self, entity: Entity) -> None:
        ...

    def add_entity_stub(self, entity: Entity) -> None:
        """Write the parts of a stub this aspect contributes. Most contribute nothing."""
        pass
