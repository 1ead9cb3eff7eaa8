"""
Blank node labeling.

One labeler is shared by a writer and every writer derived from it via
``sub()``, so labels stay unique across the whole document.
"""

import re
from typing import Optional, Set

from entity_rdf.writer.errors import ProtocolError

LABEL_PATTERN = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_\-]*$")


def check_label(label: str) -> None:
    """
    Raises:
        ProtocolError: if ``label`` is not a valid blank node label
    """
    if not LABEL_PATTERN.match(label):
        raise ProtocolError(f"Invalid blank node label: {label!r}")


class BNodeLabeler:
    """
    Issues blank node labels like ``b0``, ``b1``, ...

    Explicit labels passed to :meth:`get_label` are reused as-is and are
    never handed out again as generated labels. Only explicit labels shaped
    like a not yet generated label are remembered.
    """

    def __init__(self, prefix: str = "b", start: int = 0):
        if not LABEL_PATTERN.match(prefix):
            raise ProtocolError(f"Invalid blank node prefix: {prefix!r}")
        self.prefix = prefix
        self._counter = start
        self._explicit: Set[str] = set()

    def get_label(self, label: Optional[str] = None) -> str:
        """
        Return ``label`` if given, otherwise allocate a fresh one.

        Raises:
            ProtocolError: if ``label`` is not a valid blank node label
        """
        if label is not None:
            check_label(label)
            if self._may_collide(label):
                self._explicit.add(label)
            return label

        while True:
            candidate = f"{self.prefix}{self._counter}"
            self._counter += 1
            if candidate in self._explicit:
                self._explicit.discard(candidate)
                continue
            return candidate

    def _may_collide(self, label: str) -> bool:
        if not label.startswith(self.prefix):
            return False
        suffix = label[len(self.prefix):]
        return suffix.isdigit() and str(int(suffix)) == suffix and int(suffix) >= self._counter
