from __future__ import annotations
from collections.abc import Iterable
from dataclasses import dataclass
import logging

import numpy as np
import numpy.typing as npt

from .grid import GridTopology


@dataclass(frozen=True)
class Domain:
    """
    The part of the full image that a single worker computes.
    Start and end indices are global pixel indices, both inclusive.
    """
    width: int
    height: int
    start_x: int
    start_y: int
    end_x: int
    end_y: int

    @property
    def shape(self) -> tuple[int, int]:
        """
        Shape of the local image as a numpy array (rows, columns).
        """
        return self.height, self.width

    @property
    def slices(self) -> tuple[slice, slice]:
        """
        Slices of the full image array that belong to this domain.
        """
        return slice(self.start_y, self.end_y + 1), slice(self.start_x, self.end_x + 1)


def derive_domain(topology: GridTopology, raster_width: int, raster_height: int) -> Domain:
    """
    Calculates the part of the image that the worker at the given grid position computes.
    Every worker gets the same size, except for the last column and the last row,
    which also take the pixels that are left over from the division.

    :param topology: Grid position of the worker.
    :param raster_width: Width of the full image in pixels.
    :param raster_height: Height of the full image in pixels.
    :returns: The local domain of the worker.
    """
    if raster_width < topology.grid_cols or raster_height < topology.grid_rows:
        raise ValueError(f"An image of {raster_width}x{raster_height} pixels cannot be split over "
                         f"{topology.grid_cols} columns and {topology.grid_rows} rows of workers.")

    base_width = raster_width // topology.grid_cols
    base_height = raster_height // topology.grid_rows

    width = base_width
    height = base_height
    if topology.is_last_col:
        width += raster_width % topology.grid_cols
    if topology.is_last_row:
        height += raster_height % topology.grid_rows

    # Offsets use the size without the remainder
    start_x = topology.col * base_width
    start_y = topology.row * base_height

    return Domain(width=width, height=height,
                  start_x=start_x, start_y=start_y,
                  end_x=start_x + width - 1, end_y=start_y + height - 1)


def plan_domains(topology: GridTopology, raster_width: int, raster_height: int) -> list[Domain]:
    """
    Calculates the domain of every worker in the grid, ordered by rank.
    Does not communicate, so a single coordinator can use it to plan the assembly of the image.
    """
    logger = logging.getLogger(__name__)

    domains = []
    for rank in range(topology.total_workers):
        domain = derive_domain(topology.reresolve(rank), raster_width, raster_height)
        logger.debug(f"Rank {rank}: {domain}")
        domains.append(domain)

    return domains


def ownership_map(domains: Iterable[Domain], raster_width: int, raster_height: int) -> npt.NDArray[np.int32]:
    """
    Marks every pixel of the full image with the index of the domain that owns it.

    :returns: Array of shape (height, width), -1 where no domain owns the pixel.
    :raises ValueError: When a pixel is owned by more than one domain.
    """
    owners = np.full((raster_height, raster_width), -1, dtype=np.int32)

    for index, domain in enumerate(domains):
        region = owners[domain.slices]
        if region.shape != domain.shape:
            raise ValueError(f"Domain {index} reaches outside of the {raster_width}x{raster_height} image.")
        if np.any(region != -1):
            raise ValueError(f"Domain {index} overlaps with domain {int(region[region != -1][0])}.")
        region[:] = index

    return owners
