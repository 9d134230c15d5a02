"""
Viewing transform schemas.

A viewing transform is an ordered chain of operations describing how a
sampled image relates to an ancestor image:

* resize: the image was scaled from old_width x old_height to width x height
* crop: the image is the {x, y, width, height} sub-rectangle of an
  old_width x old_height image

Each operation's old size must equal the size produced by the operation
before it. Inverting a chain reverses it and inverts each operation; a crop
keeps its rectangle, swaps old and new sizes and negates its offset.
"""

from typing import Annotated, Any, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from visual_field.schemas.common import Size
from visual_field.schemas.region import Region


class ResizeOp(BaseModel):
    """Rescale between two pixel dimensions."""

    model_config = ConfigDict(frozen=True)

    type: Literal["resize"] = "resize"
    old_width: int = Field(..., gt=0)
    old_height: int = Field(..., gt=0)
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)

    @property
    def old_size(self) -> Size:
        return Size(width=self.old_width, height=self.old_height)

    @property
    def new_size(self) -> Size:
        return Size(width=self.width, height=self.height)

    @property
    def scale(self) -> float:
        """Width ratio new / old."""
        return self.width / self.old_width

    def inverted(self) -> "ResizeOp":
        return ResizeOp(
            old_width=self.width,
            old_height=self.height,
            width=self.old_width,
            height=self.old_height,
        )


class CropOp(BaseModel):
    """
    Sub-rectangle of a frame.

    A crop with a negative offset is an inverted crop: it places the image
    inside a larger frame and is only meaningful for mapping geometry back.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["crop"] = "crop"
    x: int
    y: int
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
    old_width: int = Field(..., gt=0)
    old_height: int = Field(..., gt=0)

    @property
    def old_size(self) -> Size:
        return Size(width=self.old_width, height=self.old_height)

    @property
    def new_size(self) -> Size:
        return Size(width=self.width, height=self.height)

    @property
    def region(self) -> Region:
        """The cropped rectangle as a Region in the old frame."""
        return Region(x=self.x, y=self.y, width=self.width, height=self.height)

    def is_inverted(self) -> bool:
        """True if the rectangle reaches outside the old frame (negative offset or overrun)."""
        return (
            self.x < 0
            or self.y < 0
            or self.x + self.width > self.old_width
            or self.y + self.height > self.old_height
        )

    def inverted(self) -> "CropOp":
        return CropOp(
            x=-self.x,
            y=-self.y,
            width=self.old_width,
            height=self.old_height,
            old_width=self.width,
            old_height=self.height,
        )


TransformOp = Annotated[Union[ResizeOp, CropOp], Field(discriminator="type")]


class ViewTransform(BaseModel):
    """
    Ordered chain of resize and crop operations.

    source_size records the size of the image the chain starts from, so an
    empty chain still knows its final size.
    """

    model_config = ConfigDict(frozen=True)

    operations: Tuple[TransformOp, ...] = ()
    source_size: Optional[Size] = None

    @model_validator(mode="after")
    def check_chain(self) -> "ViewTransform":
        """Each operation must start from the size the previous one produced."""
        current = self.source_size
        for index, op in enumerate(self.operations):
            if current is not None and op.old_size != current:
                raise ValueError(
                    f"Operation {index} ({op.type}) expects a "
                    f"{op.old_width}x{op.old_height} input but the chain produces "
                    f"{current.width}x{current.height}"
                )
            current = op.new_size
        return self

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ViewTransform):
            return NotImplemented
        return self.operations == other.operations and self.initial_size == other.initial_size

    def __hash__(self) -> int:
        return hash((self.operations, self.initial_size))

    @property
    def initial_size(self) -> Optional[Size]:
        """Size of the image the chain starts from."""
        if self.operations:
            return self.operations[0].old_size
        return self.source_size

    @property
    def final_size(self) -> Optional[Size]:
        """Size of the image the chain produces."""
        if self.operations:
            return self.operations[-1].new_size
        return self.source_size

    @property
    def resizes(self) -> List[ResizeOp]:
        return [op for op in self.operations if isinstance(op, ResizeOp)]

    @property
    def crops(self) -> List[CropOp]:
        return [op for op in self.operations if isinstance(op, CropOp)]

    def append(self, op: Union[ResizeOp, CropOp]) -> "ViewTransform":
        """Return a new chain with op added at the end."""
        return ViewTransform(
            operations=self.operations + (op,), source_size=self.initial_size
        )

    def inverted(self) -> "ViewTransform":
        """Exact inverse: reversed order, each operation inverted."""
        return ViewTransform(
            operations=tuple(op.inverted() for op in reversed(self.operations)),
            source_size=self.final_size,
        )

    def __add__(self, other: "ViewTransform") -> "ViewTransform":
        if not isinstance(other, ViewTransform):
            return NotImplemented
        return ViewTransform(
            operations=self.operations + other.operations,
            source_size=self.initial_size or other.initial_size,
        )
