"""
Compilation stats models.

These are the snapshot types an engine hands to completion callbacks and
``done`` hooks.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Asset:
    """A single emitted output file."""

    name: str
    size: int


@dataclass
class ChildStats:
    """Result of building one profile."""

    name: str
    assets: List[Asset] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    # Wall-clock build time in seconds
    duration: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "time": round(self.duration * 1000),
            "assets": [{"name": asset.name, "size": asset.size} for asset in self.assets],
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }


@dataclass
class BuildStats:
    """
    Aggregate stats for one compilation across every child build.
    """

    children: List[ChildStats] = field(default_factory=list)
    hash: str = ""

    @property
    def errors(self) -> List[str]:
        return [error for child in self.children for error in child.errors]

    @property
    def warnings(self) -> List[str]:
        return [warning for child in self.children for warning in child.warnings]

    def has_errors(self) -> bool:
        return bool(self.errors)

    def has_warnings(self) -> bool:
        return bool(self.warnings)

    def to_dict(self, context: Optional[str] = None) -> Dict[str, Any]:
        """
        Serialize the stats tree.

        Args:
            context: Project root the snapshot was produced for, recorded so
                that the persisted artifact is self-describing

        Returns:
            A JSON-serializable dict with ``children``, ``errors`` and
            ``warnings`` keys
        """
        return {
            "context": context,
            "hash": self.hash,
            "errors": self.errors,
            "warnings": self.warnings,
            "children": [child.to_dict() for child in self.children],
        }
