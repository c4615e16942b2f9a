"""
Version tags for Minecraft and loader versions

Minecraft and Forge version strings come in three shapes:
    IDEAL    "1.20.1", "1.9.4", "1.21.1-rc1"   (major.minor.patch)
    GENERAL  "1.9", "12.16.1.1938", "1.21-pre1" (any other run of numeric chunks)
    COMPLEX  "1.7.10_pre4", "23w13a", "latest"  (everything else)

Ordering is delegated to packaging.version, which is what the Forge cutoff
rules need. Tags packaging cannot order (snapshots like "23w13a") raise
InvalidVersionError when compared.
"""

import re
from enum import Enum
from functools import total_ordering
from typing import List, Optional

from packaging.version import InvalidVersion, Version

from ..errors import InvalidVersionError

IDEAL_PATTERN = re.compile(
    r"^(\d+)\.(\d+)\.(\d+)(?:-([0-9A-Za-z.-]+))?(?:\+([0-9A-Za-z.-]+))?$"
)
GENERAL_PATTERN = re.compile(r"^(\d+(?:\.\d+)*)(?:-([0-9A-Za-z.]+))?$")


class VersionKind(Enum):
    IDEAL = "ideal"
    GENERAL = "general"
    COMPLEX = "complex"


@total_ordering
class VersionTag:
    """A parsed version string that remembers its original spelling"""

    def __init__(self, text: str, kind: VersionKind, chunks: List[int]):
        self.text = text
        self.kind = kind
        self.chunks = chunks
        try:
            self._ordered: Optional[Version] = Version(text)
        except InvalidVersion:
            self._ordered = None

    @classmethod
    def parse(cls, text: str) -> "VersionTag":
        """
        Classifies a version string

        Args:
            text: Version string as written by the user or an API

        Returns:
            VersionTag of the matching kind

        Raises:
            InvalidVersionError: if the string is empty
        """
        if text is None or not text.strip():
            raise InvalidVersionError("version string is empty")
        text = text.strip()

        match = IDEAL_PATTERN.match(text)
        if match:
            return cls(text, VersionKind.IDEAL, [int(g) for g in match.groups()[:3]])

        match = GENERAL_PATTERN.match(text)
        if match:
            return cls(text, VersionKind.GENERAL, [int(c) for c in match.group(1).split(".")])

        return cls(text, VersionKind.COMPLEX, [])

    @property
    def is_complex(self) -> bool:
        return self.kind is VersionKind.COMPLEX

    @property
    def is_orderable(self) -> bool:
        return self._ordered is not None

    @property
    def major(self) -> int:
        return self._chunk(0)

    @property
    def minor(self) -> int:
        return self._chunk(1)

    @property
    def patch(self) -> int:
        return self._chunk(2)

    def _chunk(self, index: int) -> int:
        if index >= len(self.chunks):
            raise InvalidVersionError(f"version {self.text} has no component {index + 1}")
        return self.chunks[index]

    def _require_ordered(self) -> Version:
        if self._ordered is None:
            raise InvalidVersionError(f"version {self.text} cannot be compared")
        return self._ordered

    def __eq__(self, other: object) -> bool:
        if isinstance(other, str):
            try:
                other = VersionTag.parse(other)
            except InvalidVersionError:
                return False
        if not isinstance(other, VersionTag):
            return NotImplemented
        if self._ordered is not None and other._ordered is not None:
            return self._ordered == other._ordered
        return self.text == other.text

    def __lt__(self, other: object) -> bool:
        if isinstance(other, str):
            other = VersionTag.parse(other)
        if not isinstance(other, VersionTag):
            return NotImplemented
        return self._require_ordered() < other._require_ordered()

    def __hash__(self) -> int:
        if self._ordered is not None:
            return hash(self._ordered)
        return hash(self.text)

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"VersionTag({self.text!r}, {self.kind.value})"


def is_valid_server_version(text: str) -> bool:
    """True when text names a concrete Minecraft version (not COMPLEX)"""
    try:
        return not VersionTag.parse(text).is_complex
    except InvalidVersionError:
        return False
