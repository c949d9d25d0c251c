"""
Link strategies — symlink, directory junction, plain copy.

Each strategy probes whether the host can provide it and either creates
the link or raises ``OSError``. The filesystem adapter walks them in
order, so the fallback policy follows what the host can actually do
rather than which operating system it reports.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path

from neuron_installer.core.models.link import LinkKind

logger = logging.getLogger(__name__)


def is_junction(path: Path) -> bool:
    """Whether ``path`` is an NTFS directory junction."""
    check = getattr(os.path, "isjunction", None)
    return bool(check and check(path))


def remove_path(path: Path) -> bool:
    """Remove whatever occupies ``path``. Returns True if something was removed.

    Links and junctions are removed without following them; real
    directories are removed recursively.
    """
    if is_junction(path):
        os.rmdir(path)
        return True
    if path.is_symlink():
        path.unlink()
        return True
    if path.is_dir():
        shutil.rmtree(path)
        return True
    if path.exists():
        path.unlink()
        return True
    return False


class LinkStrategy(ABC):
    """One way of exposing ``source`` at ``target``."""

    kind: LinkKind

    def supports(self, source: Path) -> bool:
        """Whether this host can use the strategy for ``source``."""
        return True

    @abstractmethod
    def create(self, source: Path, target: Path) -> None:
        """Create the link. Raises OSError on failure."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} kind={self.kind.value}>"


class SymlinkStrategy(LinkStrategy):
    kind = LinkKind.SYMLINK

    def supports(self, source: Path) -> bool:
        return hasattr(os, "symlink")

    def create(self, source: Path, target: Path) -> None:
        os.symlink(source, target, target_is_directory=source.is_dir())


class JunctionStrategy(LinkStrategy):
    """Directory junction via ``mklink /J`` — no elevated privilege needed.

    Junctions only exist for directories, and only where ``cmd`` does.
    """

    kind = LinkKind.JUNCTION
    timeout = 30

    def supports(self, source: Path) -> bool:
        return source.is_dir() and shutil.which("cmd") is not None

    def create(self, source: Path, target: Path) -> None:
        try:
            result = subprocess.run(
                ["cmd", "/c", "mklink", "/J", str(target), str(source)],
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise OSError(f"mklink /J timed out after {self.timeout}s") from e
        if result.returncode != 0:
            raise OSError(result.stderr.strip() or result.stdout.strip() or "mklink /J failed")


class CopyStrategy(LinkStrategy):
    kind = LinkKind.COPY

    def create(self, source: Path, target: Path) -> None:
        if source.is_dir():
            shutil.copytree(source, target, symlinks=True)
        else:
            shutil.copy2(source, target)


DEFAULT_STRATEGIES: tuple[LinkStrategy, ...] = (
    SymlinkStrategy(),
    JunctionStrategy(),
    CopyStrategy(),
)


def strategies_for(
    kind: LinkKind,
    strategies: tuple[LinkStrategy, ...] = DEFAULT_STRATEGIES,
) -> list[LinkStrategy]:
    """The requested strategy followed by its fallbacks, in order."""
    wanted = kind.fallbacks()
    return [s for s in strategies if s.kind in wanted]
