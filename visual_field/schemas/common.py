"""
Common value types shared by regions, segments and viewing transforms.
"""

from typing import Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

Number = Union[int, float]


class Point(BaseModel):
    """2D point. Either coordinate may be unknown."""

    model_config = ConfigDict(frozen=True)

    x: Optional[Number] = None
    y: Optional[Number] = None


class Size(BaseModel):
    """Image size in pixels"""

    model_config = ConfigDict(frozen=True)

    width: int = Field(..., ge=0)
    height: int = Field(..., ge=0)

    @classmethod
    def of(cls, size: Union["Size", Tuple[int, int]]) -> "Size":
        """Create a Size from a Size or a (width, height) tuple."""
        if isinstance(size, Size):
            return size
        width, height = size
        return cls(width=int(width), height=int(height))

    def as_tuple(self) -> Tuple[int, int]:
        """Return (width, height)."""
        return (self.width, self.height)
