from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any
import logging

from .collective import CollectiveGroup, GroupFormationError


@dataclass(frozen=True)
class GridTopology:
    """
    Position of one worker in the 2D grid of workers.
    Indexing starts at 0 for coordinates.

    The topology handle is shared between every topology that was re-resolved
    from the same :meth:`create` call and is never modified.
    """
    grid_cols: int
    grid_rows: int
    col: int
    row: int
    rank: int
    group: CollectiveGroup = field(repr=False, compare=False)
    handle: Any = field(repr=False, compare=False)

    @property
    def total_workers(self) -> int:
        return self.grid_cols * self.grid_rows

    @property
    def is_last_col(self) -> bool:
        return self.col == self.grid_cols - 1

    @property
    def is_last_row(self) -> bool:
        return self.row == self.grid_rows - 1

    @classmethod
    def create(cls, rank: int, total_workers: int, group: CollectiveGroup) -> GridTopology:
        """
        Creates the grid of workers and finds the position of the given rank.
        Collective operation, every worker of the group has to call it.

        If the group cannot form the topology, the whole collective is aborted.

        :param rank: Rank of this worker.
        :param total_workers: Total number of workers in the collective.
        :param group: Collective to build the topology over.
        :returns: The topology, seen from ``rank``.
        """
        logger = logging.getLogger(__name__)

        if total_workers < 1:
            raise ValueError("There cannot be zero or a negative number of total workers.")
        _check_rank(rank, total_workers)

        try:
            rows, cols = group.choose_grid_shape(total_workers)
            if rows * cols != total_workers:
                raise GroupFormationError(f"Grid of {rows}x{cols} does not hold {total_workers} workers.")

            handle = group.build_cartesian_topology(rows, cols)
            row, col = group.coordinates_of(handle, rank)
        except GroupFormationError as e:
            logger.critical(f"Rank {rank}: {e}")
            group.abort(1)
            raise

        logger.info(f"Rank {rank}: grid of {rows} rows and {cols} columns for {total_workers} workers.")

        topology = cls(grid_cols=cols, grid_rows=rows, col=col, row=row, rank=rank,
                       group=group, handle=handle)
        logger.debug(f"Rank {rank} is at row {row}, column {col}.")

        return topology

    def reresolve(self, other_rank: int) -> GridTopology:
        """
        Gives the same grid as seen from another rank.
        Does not communicate and does not modify this topology.
        :param other_rank: Rank in the same collective.
        """
        _check_rank(other_rank, self.total_workers)

        row, col = self.group.coordinates_of(self.handle, other_rank)
        return replace(self, col=col, row=row, rank=other_rank)


def _check_rank(rank: int, total_workers: int) -> None:
    if not 0 <= rank < total_workers:
        raise ValueError(f"Rank {rank} is out of bounds for {total_workers} workers.")
