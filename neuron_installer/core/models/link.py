"""
Link model — how a built artifact is exposed to the host project.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict


class LinkKind(str, Enum):
    """Ways of exposing an artifact, in fallback order."""

    SYMLINK = "symlink"
    JUNCTION = "junction"
    COPY = "copy"

    def fallbacks(self) -> list[LinkKind]:
        """This kind followed by every weaker kind."""
        order = list(LinkKind)
        return order[order.index(self):]


class LinkSpec(BaseModel):
    """Expose ``source_path`` at ``target_path`` using ``kind`` (or a fallback)."""

    model_config = ConfigDict(frozen=True)

    source_path: Path
    target_path: Path
    kind: LinkKind = LinkKind.SYMLINK
    project: str = ""
