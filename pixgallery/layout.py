"""
Masonry column assignment.

Round-robin by position: image i goes to column i % columns. Rendered heights
are unknown before the images load, so columns are not height-balanced and
can drift visually on tall/short mixes.
"""
from typing import List, Sequence, Tuple, TypeVar

T = TypeVar("T")

# (exclusive upper bound of the viewport width, columns)
BREAKPOINTS: Tuple[Tuple[int, int], ...] = (
    (640, 1),
    (768, 2),
    (1024, 3),
)
MAX_COLUMNS = 4


def column_count_for_width(width: int) -> int:
    """
    Columns for a viewport width; narrower never gives more columns

    Args:
        width: Viewport width in CSS pixels

    Returns:
        int: 1 to 4
    """
    for upper_bound, columns in BREAKPOINTS:
        if width < upper_bound:
            return columns
    return MAX_COLUMNS


def distribute(images: Sequence[T], column_count: int) -> List[List[T]]:
    """
    Split an ordered image list into masonry columns

    Args:
        images: Images in feed order
        column_count: Number of columns, at least 1

    Returns:
        List of `column_count` lists; each keeps the input order
    """
    if column_count < 1:
        raise ValueError(f"column_count must be at least 1, got {column_count}")

    columns: List[List[T]] = [[] for _ in range(column_count)]
    for index, image in enumerate(images):
        columns[index % column_count].append(image)
    return columns


class MasonryLayout:
    """Recomputes the columns from scratch for every width it is asked about"""

    def __init__(self, images: Sequence[T]):
        self.images = list(images)

    def columns_for_width(self, width: int) -> List[List[T]]:
        return distribute(self.images, column_count_for_width(width))
