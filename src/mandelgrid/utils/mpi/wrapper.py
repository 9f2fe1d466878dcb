import logging

from ..raster import RasterExtent
from .collective import CollectiveGroup, MPICollective
from .domain import Domain, derive_domain, plan_domains
from .grid import GridTopology


class Partitioner:
    """
    Decomposes the image for the worker running this process.
    """

    def __init__(self, extent: RasterExtent = None, group: CollectiveGroup = None,
                 rank: int = None, total_workers: int = None):
        """
        Creates the grid of workers and the local domain of this worker.
        Collective, every worker of the group has to create its partitioner at the same time.
        :param extent: Full image. Defaults to the extent given by the environment.
        :param group: Collective of the workers. Defaults to ``MPI.COMM_WORLD``.
        :param rank: Rank of this worker. Taken from the group if not given.
        :param total_workers: Number of workers. Taken from the group if not given.
        """
        self.logger = logging.getLogger(__name__)

        self.extent = extent if extent is not None else RasterExtent.from_environ()
        self.group = group if group is not None else MPICollective()

        if (rank is None or total_workers is None) and not isinstance(self.group, MPICollective):
            raise ValueError("Rank and total number of workers must be given for a group not backed by MPI.")
        if isinstance(self.group, MPICollective):
            if rank is None:
                rank = self.group.rank
            if total_workers is None:
                total_workers = self.group.size

            if rank != self.group.rank or total_workers != self.group.size:
                raise ValueError(f"Rank {rank} of {total_workers} workers does not match rank "
                                 f"{self.group.rank} of the {self.group.size} ranks of the communicator.")

        self.logger.info(f"Rank: {rank}, Total Ranks: {total_workers}.")

        self.topology = GridTopology.create(rank, total_workers, self.group)
        self.domain = derive_domain(self.topology, self.extent.width, self.extent.height)

        self.logger.info(f"Rank {rank} computes {self.domain.width}x{self.domain.height} pixels "
                         f"from ({self.domain.start_x}, {self.domain.start_y}) "
                         f"to ({self.domain.end_x}, {self.domain.end_y}).")

    @property
    def rank(self) -> int:
        return self.topology.rank

    def domain_of(self, rank: int) -> Domain:
        """
        Gets the domain of another worker, without communicating with it.
        """
        return derive_domain(self.topology.reresolve(rank), self.extent.width, self.extent.height)

    def domains(self) -> list[Domain]:
        """
        Gets the domains of all the workers, ordered by rank.
        """
        return plan_domains(self.topology, self.extent.width, self.extent.height)
