from mandelgrid.utils.raster import RasterExtent
from mandelgrid.utils.mpi import (
    CollectiveGroup,
    GroupFormationError,
    MPICollective,
    LocalCollective,
    GridTopology,
    Domain,
    derive_domain,
    plan_domains,
    ownership_map,
    Partitioner,
)

__all__ = [
    "CollectiveGroup",
    "Domain",
    "GridTopology",
    "GroupFormationError",
    "LocalCollective",
    "MPICollective",
    "Partitioner",
    "RasterExtent",
    "derive_domain",
    "ownership_map",
    "plan_domains",
]
