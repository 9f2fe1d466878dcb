from dataclasses import dataclass
from os import environ
import logging

# Defaults of the reference renderer
IMAGE_WIDTH = 4096
IMAGE_HEIGHT = 4096
MAX_ITERS = 10000

# Extent of the parameter plane (MIN_X + i*MIN_Y <= c < MAX_X + i*MAX_Y)
MIN_X = -2.1
MAX_X = 0.7
MIN_Y = -1.4
MAX_Y = 1.4

ENV_PREFIX = 'MANDELGRID_'


@dataclass(frozen=True)
class RasterExtent:
    """
    The full image that is decomposed between the workers.
    Only ``width`` and ``height`` are used for the decomposition, the plane rectangle
    and the iteration cap are carried along for the escape-time kernel.

    Args:
        width: Width of the full image in pixels.
        height: Height of the full image in pixels.
        min_x: Real part of the lower left corner of the plane.
        max_x: Real part of the upper right corner of the plane.
        min_y: Imaginary part of the lower left corner of the plane.
        max_y: Imaginary part of the upper right corner of the plane.
        max_iters: Maximum number of iterations per pixel.
    """
    width: int = IMAGE_WIDTH
    height: int = IMAGE_HEIGHT
    min_x: float = MIN_X
    max_x: float = MAX_X
    min_y: float = MIN_Y
    max_y: float = MAX_Y
    max_iters: int = MAX_ITERS

    def __post_init__(self):
        if self.width < 1 or self.height < 1:
            raise ValueError(f"The raster must be at least one pixel wide and high, got {self.width}x{self.height}.")
        if self.max_iters < 1:
            raise ValueError(f"The iteration cap must be positive, got {self.max_iters}.")
        if self.min_x >= self.max_x or self.min_y >= self.max_y:
            raise ValueError("The plane rectangle is empty.")

    @property
    def shape(self) -> tuple[int, int]:
        """
        Shape of the full image as a numpy array (rows, columns).
        """
        return self.height, self.width

    @classmethod
    def from_environ(cls) -> "RasterExtent":
        """
        Creates the extent from the defaults, overridden by the ``MANDELGRID_WIDTH``,
        ``MANDELGRID_HEIGHT`` and ``MANDELGRID_MAX_ITERS`` environment variables.
        """
        logger = logging.getLogger(__name__)
        overrides: dict[str, int] = {}

        for field in ("width", "height", "max_iters"):
            name = ENV_PREFIX + field.upper()
            if name in environ:
                value = environ.get(name)
                try:
                    overrides[field] = int(value)
                except ValueError as e:
                    raise ValueError(f"{name} must be an integer, got '{value}'.") from e
                logger.debug(f"{name}={value}")

        return cls(**overrides)
