"""
Mention tracking.

Entities that are referenced (as a snak's property, or as an entity id
value) without being exported themselves are "mentioned". The tracker
records a monotonic state per id so the orchestrator can later emit
stubs for mentioned entities exactly once.
"""

import logging
from enum import Enum
from typing import Dict, List

from entity_rdf.models import EntityId

logger = logging.getLogger(__name__)


class MentionState(Enum):
    UNSEEN = "unseen"
    MENTIONED_UNRESOLVED = "mentioned_unresolved"
    RESOLVED = "resolved"


class MentionTracker:
    """
    Per-run table of entity mention states.

    ``UNSEEN -> MENTIONED_UNRESOLVED`` on first mention, any state
    ``-> RESOLVED`` when the entity is emitted. RESOLVED is terminal.
    """

    def __init__(self):
        self._states: Dict[EntityId, MentionState] = {}

    def get_state(self, entity_id: EntityId) -> MentionState:
        return self._states.get(entity_id, MentionState.UNSEEN)

    def entity_mentioned(self, entity_id: EntityId) -> bool:
        """Record a mention. Returns True if the id was not seen before."""
        if entity_id in self._states:
            return False
        self._states[entity_id] = MentionState.MENTIONED_UNRESOLVED
        logger.debug(f"Entity mentioned: {entity_id}")
        return True

    def entity_resolved(self, entity_id: EntityId) -> None:
        self._states[entity_id] = MentionState.RESOLVED

    def is_resolved(self, entity_id: EntityId) -> bool:
        return self.get_state(entity_id) is MentionState.RESOLVED

    def get_unresolved(self) -> List[EntityId]:
        """Ids mentioned but not yet resolved, in order of first mention."""
        return [
            entity_id
            for entity_id, state in self._states.items()
            if state is MentionState.MENTIONED_UNRESOLVED
        ]

    def get_resolved(self) -> List[EntityId]:
        return [
            entity_id
            for entity_id, state in self._states.items()
            if state is MentionState.RESOLVED
        ]

    def __len__(self) -> int:
        return len(self._states)
