"""Overlap-aware layout packing for dayshape.

Groups transitively overlapping blocks into clusters and assigns each block a
display column so overlapping blocks sit side by side.
"""

from typing import Dict, List, Sequence
from pydantic import BaseModel, Field

from dayshape.models.block import Block
from dayshape.engine.validation import validate_blocks


class LayoutPosition(BaseModel):
    """Horizontal placement of a block within its cluster, as proportions."""

    left: float = Field(..., ge=0.0, lt=1.0, description="Left offset (column index * width)")
    width: float = Field(..., gt=0.0, le=1.0, description="1 / number of columns in the cluster")


def build_clusters(blocks: Sequence[Block]) -> List[List[Block]]:
    """Split blocks into clusters of transitively overlapping blocks.

    Blocks are sorted by start, ties broken by end descending so longer
    blocks are placed first. A block joins the current cluster when it starts
    strictly before the cluster's running end.
    """
    sorted_blocks = sorted(blocks, key=lambda b: (b.start, -b.end))

    clusters: List[List[Block]] = []
    current: List[Block] = []
    cluster_end = -1

    for block in sorted_blocks:
        if current and block.start < cluster_end:
            current.append(block)
            cluster_end = max(cluster_end, block.end)
        else:
            if current:
                clusters.append(current)
            current = [block]
            cluster_end = block.end

    if current:
        clusters.append(current)
    return clusters


def assign_columns(cluster: Sequence[Block]) -> List[List[Block]]:
    """Greedily place each block in the first column whose last block has ended.

    Args:
        cluster: Blocks of one cluster, in arrival order

    Returns:
        Columns, each a list of non-overlapping blocks
    """
    columns: List[List[Block]] = []
    for block in cluster:
        for column in columns:
            if column[-1].end <= block.start:
                column.append(block)
                break
        else:
            columns.append([block])
    return columns


def calculate_layout(blocks: Sequence[Block]) -> Dict[str, LayoutPosition]:
    """Calculate side-by-side positions for a day's blocks.

    Args:
        blocks: The day's blocks

    Returns:
        Mapping of block id to its LayoutPosition, one entry per block

    Raises:
        MalformedScheduleError: If the block list is malformed (e.g. duplicate ids)
    """
    validate_blocks(blocks)

    layout: Dict[str, LayoutPosition] = {}
    for cluster in build_clusters(blocks):
        columns = assign_columns(cluster)
        width = 1.0 / len(columns)
        for index, column in enumerate(columns):
            for block in column:
                layout[block.id] = LayoutPosition(left=index * width, width=width)
    return layout
