"""
SizeSet - A 2D dimension and its "WxH" string token.

The token is used in settings and as directory/file name, so parsing and
formatting must round-trip exactly.
"""

import re
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SizeSet:
    """
    Width/height pair of a source resolution or a target bucket.

    Attributes:
        width: Width in pixels
        height: Height in pixels
    """
    width: int
    height: int

    TOKEN_PATTERN = re.compile(r'^(\d+)x(\d+)$')

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Negative dimension: {self.width}x{self.height}")

    @property
    def token(self) -> str:
        """Canonical "WxH" token."""
        return f"{self.width}x{self.height}"

    @property
    def area(self) -> int:
        return self.width * self.height

    def is_empty(self) -> bool:
        """True if either axis is zero."""
        return self.width == 0 or self.height == 0

    def covers(self, other: 'SizeSet') -> bool:
        """True if this size is at least as large as other on both axes."""
        return self.width >= other.width and self.height >= other.height

    @classmethod
    def parse(cls, token: str) -> 'SizeSet':
        """
        Parse a "WxH" token.

        Raises:
            ValueError: If the token is not in canonical form
        """
        match = cls.TOKEN_PATTERN.match(token) if isinstance(token, str) else None
        if not match:
            raise ValueError(f"Invalid size token: {token!r}")
        width, height = match.groups()
        # Leading zeros would not survive formatting
        if str(int(width)) != width or str(int(height)) != height:
            raise ValueError(f"Invalid size token: {token!r}")
        return cls(int(width), int(height))

    @classmethod
    def parse_optional(cls, token: Optional[str]) -> Optional['SizeSet']:
        """Parse a token that may be left unset (None or empty string)."""
        if token is None or token == '':
            return None
        return cls.parse(token)

    def __str__(self) -> str:
        return self.token
