from .collective import CollectiveGroup, GroupFormationError, MPICollective, LocalCollective, CartesianLayout
from .grid import GridTopology
from .domain import Domain, derive_domain, plan_domains, ownership_map
from .wrapper import Partitioner
