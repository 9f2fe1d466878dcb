from abc import ABC, abstractmethod
from dataclasses import dataclass
import logging

from mpi4py import MPI


class GroupFormationError(RuntimeError):
    """
    Raised when the collective cannot agree on a Cartesian process topology.
    Not recoverable, the collective has to be aborted.
    """


class CollectiveGroup(ABC):
    """
    The part of a collective communication layer that the decomposition needs.
    """

    @abstractmethod
    def choose_grid_shape(self, total_workers: int) -> tuple[int, int]:
        """
        Chooses a near-square grid for the workers.
        :param total_workers: Number of workers in the collective.
        :returns: Number of rows and columns, with ``rows * cols == total_workers``.
        """

    @abstractmethod
    def build_cartesian_topology(self, rows: int, cols: int):
        """
        Builds a 2D topology over the collective, without wraparound and without reordering the ranks.
        Collective operation, may block until every worker has joined.
        :returns: An opaque handle to the topology.
        :raises GroupFormationError: If the topology could not be built.
        """

    @abstractmethod
    def coordinates_of(self, handle, rank: int) -> tuple[int, int]:
        """
        Looks up the position of a rank in a topology.
        :returns: Row and column of the rank.
        """

    @abstractmethod
    def abort(self, errorcode: int = 1) -> None:
        """
        Terminates every worker in the collective.
        """


class MPICollective(CollectiveGroup):
    """
    Collective backed by an MPI communicator.
    """

    def __init__(self, comm: MPI.Comm = None):
        self.logger = logging.getLogger(__name__)
        self.comm = comm if comm is not None else MPI.COMM_WORLD

    @property
    def rank(self) -> int:
        return self.comm.Get_rank()

    @property
    def size(self) -> int:
        return self.comm.Get_size()

    def choose_grid_shape(self, total_workers: int) -> tuple[int, int]:
        try:
            rows, cols = MPI.Compute_dims(total_workers, 2)
        except MPI.Exception as e:
            raise GroupFormationError(f"Error choosing the grid for {total_workers} workers: {e}") from e
        return rows, cols

    def build_cartesian_topology(self, rows: int, cols: int) -> MPI.Cartcomm:
        # Every rank of the communicator has to be part of the grid
        if rows * cols != self.size:
            raise GroupFormationError(f"Grid of {rows}x{cols} does not match the {self.size} ranks of the communicator.")

        try:
            return self.comm.Create_cart([rows, cols], periods=[False, False], reorder=False)
        except MPI.Exception as e:
            raise GroupFormationError(f"Error creating Cartesian communicator: {e}") from e

    def coordinates_of(self, handle: MPI.Cartcomm, rank: int) -> tuple[int, int]:
        try:
            row, col = handle.Get_coords(rank)
        except MPI.Exception as e:
            raise GroupFormationError(f"Error finding the coordinates of rank {rank}: {e}") from e
        return row, col

    def abort(self, errorcode: int = 1) -> None:
        self.logger.critical(f"Rank {self.rank} is aborting the collective with error code {errorcode}.")
        self.comm.Abort(errorcode)


@dataclass(frozen=True)
class CartesianLayout:
    """
    Topology handle of the in-process collective. Ranks are laid out row by row.
    """
    rows: int
    cols: int


class LocalCollective(CollectiveGroup):
    """
    Collective that lives in a single process.
    Gives the same grid as MPI would, without any communication,
    so that a coordinator can plan the decomposition on its own.
    """

    def choose_grid_shape(self, total_workers: int) -> tuple[int, int]:
        if total_workers < 1:
            raise ValueError("There cannot be zero or a negative number of total workers.")

        # Get all the pairs of factors for total number of workers
        factors: list[tuple[int, int]] = []
        for n in range(1, total_workers + 1):
            if total_workers % n == 0 and n >= total_workers // n:
                factors.append((n, total_workers // n))

        # The most balanced pair, with at least as many rows as columns
        return min(factors, key=lambda pair: pair[0] - pair[1])

    def build_cartesian_topology(self, rows: int, cols: int) -> CartesianLayout:
        if rows < 1 or cols < 1:
            raise GroupFormationError(f"Invalid grid shape {rows}x{cols}.")
        return CartesianLayout(rows, cols)

    def coordinates_of(self, handle: CartesianLayout, rank: int) -> tuple[int, int]:
        if not 0 <= rank < handle.rows * handle.cols:
            raise ValueError(f"Rank {rank} is not part of a {handle.rows}x{handle.cols} grid.")
        return rank // handle.cols, rank % handle.cols

    def abort(self, errorcode: int = 1) -> None:
        raise SystemExit(errorcode)
