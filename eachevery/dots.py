"""
Dot clusters for the Each/Every comparison task.

- ``Coordinate``: top-left anchor of one shape on the dots canvas, tagged with
  its shape. Equality and hashing use the position only.
- ``Ratio``: a pair of positive counts (set one : set two).
- ``ControlType``: the area manipulation applied to a trial.
- ``DotSet``: one cluster of non-overlapping circles and squares with its
  total area. Built completely in the constructor by rejection sampling.
- ``DotsPair``: the two clusters shown in one trial, rescaled according to
  the trial's control type.

Canvas coordinates have their origin at the top-left corner with y pointing
down; ``eachevery.utils.canvas_to_pix`` converts them for psychopy.
"""
import math
import random
from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple, Optional

import numpy as np

from .config import DotSetConfig


class Shape(Enum):
    CIRCLE = "circle"
    SQUARE = "square"


@dataclass(frozen=True, eq=False)
class Coordinate:
    x: int
    y: int
    shape: Shape = Shape.CIRCLE

    # position only; shape is not compared
    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, Coordinate):
            return NotImplemented
        return self.x == other.x and self.y == other.y

    def __hash__(self):
        return hash((self.x, self.y))

    def __str__(self):
        return f"({self.x},{self.y})"


@dataclass(frozen=True)
class Ratio:
    num_one: int
    num_two: int

    def __post_init__(self):
        if self.num_one < 1 or self.num_two < 1:
            raise ValueError(f"Ratio terms must be positive integers (got {self.num_one}:{self.num_two})")

    @property
    def total(self) -> int:
        return self.num_one + self.num_two

    def __str__(self):
        return f"{self.num_one}:{self.num_two}"


class ControlType(Enum):
    """Area manipulation of a trial.

    EQUAL_AREAS: both clusters end with the same total area, so the cluster
    with more dots has smaller dots (smaller is correct).
    INVERSE_AREAS: the cluster with more dots also ends with the larger total
    area (bigger is correct).
    """

    EQUAL_AREAS = "equal_areas"
    INVERSE_AREAS = "inverse_areas"
    NONE = "none"

    def opposite(self) -> "ControlType":
        if self is ControlType.EQUAL_AREAS:
            return ControlType.INVERSE_AREAS
        if self is ControlType.INVERSE_AREAS:
            return ControlType.EQUAL_AREAS
        return ControlType.NONE


def shape_area(shape: Shape, diameter: float) -> float:
    if shape is Shape.SQUARE:
        return diameter ** 2
    return math.pi * (diameter / 2.0) ** 2


class DotSet:
    """
    A cluster of ``num_circles + num_squares`` shapes placed at random on the
    dots canvas without overlapping each other (and, when ``other`` is given,
    without overlapping the shapes of ``other``).

    Every shape gets an independent integer diameter in
    ``[min_diameter, max_diameter)``. Two shapes are far enough apart when the
    distance between their centers is at least the sum of their radii plus
    ``min_distance_between_dots``.

    Raises RuntimeError when the shapes cannot be placed within
    ``config.max_attempts`` candidate draws.
    """

    def __init__(
        self,
        num_circles: int,
        num_squares: int = 0,
        other: Optional["DotSet"] = None,
        config: Optional[DotSetConfig] = None,
        rng: Optional[random.Random] = None,
    ):
        if num_circles < 0 or num_squares < 0:
            raise ValueError("num_circles and num_squares must be >= 0")
        self.config = config if config is not None else DotSetConfig()
        self._rng = rng if rng is not None else random.Random()
        self.total_num_circles = int(num_circles)
        self.total_num_squares = int(num_squares)
        self.total_num_dots = self.total_num_circles + self.total_num_squares
        self.positions: List[Coordinate] = []
        self.diameters: List[float] = []
        self.total_area = 0.0
        self._fill_dots(other)

    def __len__(self):
        return len(self.positions)

    def __repr__(self):
        return (
            f"DotSet(circles={self.total_num_circles}, squares={self.total_num_squares}, "
            f"total_area={self.total_area:.1f})"
        )

    def _fill_dots(self, other: Optional["DotSet"]):
        cfg = self.config
        attempts = 0
        while len(self.positions) < self.total_num_dots:
            if attempts >= cfg.max_attempts:
                raise RuntimeError(
                    f"Could not place {self.total_num_dots} non-overlapping dots "
                    f"({len(self.positions)} placed) after {cfg.max_attempts} attempts"
                )
            attempts += 1
            x = self._rng.randrange(cfg.canvas_width - cfg.max_diameter)
            y = self._rng.randrange(cfg.canvas_height - cfg.max_diameter)
            diameter = self._rng.randrange(cfg.min_diameter, cfg.max_diameter)

            if self.overlaps(x, y, diameter):
                continue
            if other is not None and other.overlaps(x, y, diameter):
                continue
            if len(self.positions) < self.total_num_circles:
                self.add_dot(x, y, diameter, Shape.CIRCLE)
            else:
                self.add_dot(x, y, diameter, Shape.SQUARE)

    def overlaps(self, x: int, y: int, diameter: float) -> bool:
        """True if a shape anchored at (x, y) would come too close to any shape in this set."""
        if not self.positions:
            return False
        radius = diameter / 2.0
        centers = self.centers()
        radii = np.asarray(self.diameters, dtype=float) / 2.0
        distance = np.hypot(centers[:, 0] - (x + radius), centers[:, 1] - (y + radius))
        return bool(np.any(distance < radius + radii + self.config.min_distance_between_dots))

    def add_dot(self, x: int, y: int, diameter: float, shape: Shape):
        """Store a shape and its diameter and add its area to the total."""
        self.positions.append(Coordinate(x, y, shape))
        self.diameters.append(float(diameter))
        self.total_area += shape_area(shape, diameter)

    def centers(self) -> np.ndarray:
        """(N, 2) array of the current visual centers: anchor plus radius."""
        if not self.positions:
            return np.zeros((0, 2), dtype=float)
        anchors = np.array([(p.x, p.y) for p in self.positions], dtype=float)
        radii = np.asarray(self.diameters, dtype=float) / 2.0
        return anchors + radii[:, None]

    def num_shapes(self, shape: Shape) -> int:
        return sum(1 for p in self.positions if p.shape is shape)

    def match_area(self, other_total_area: float):
        """
        Scale every diameter by sqrt(other_total_area / total_area) so this set
        ends with ``other_total_area``.

        Only shrink (other_total_area < total_area): anchors stay where they
        are, so growing could bring shapes into contact.
        """
        self._scale_diameters(math.sqrt(other_total_area / self.total_area))

    def inverse_match_area(self, other_total_area: float):
        """
        Scale every diameter by sqrt(total_area / other_total_area), i.e. shrink
        this (smaller) set by the factor the other set would need to match it.
        The resulting area is total_area ** 2 / other_total_area.

        Call only when total_area < other_total_area.
        """
        self._scale_diameters(math.sqrt(self.total_area / other_total_area))

    def _scale_diameters(self, ratio: float):
        self.diameters = [d * ratio for d in self.diameters]
        self.recalc_area()

    def recalc_area(self):
        self.total_area = sum(shape_area(p.shape, d) for p, d in zip(self.positions, self.diameters))


class DotsPair:
    """
    The two dot sets shown in one trial.

    Set two is placed around set one so that no shape of either set overlaps
    another. The sets are then rescaled according to ``control_type``:

    - EQUAL_AREAS: the set with the larger area shrinks to the other's area.
    - INVERSE_AREAS: the set with fewer shapes shrinks so that the set with
      more shapes ends with the larger area.
    - NONE: areas are left as drawn.
    """

    def __init__(
        self,
        num_circles_one: int,
        num_circles_two: int,
        num_squares_one: int,
        num_squares_two: int,
        control_type: ControlType,
        config: Optional[DotSetConfig] = None,
        rng: Optional[random.Random] = None,
    ):
        self.control_type = control_type
        self.dot_set_one = DotSet(num_circles_one, num_squares_one, config=config, rng=rng)
        self.dot_set_two = DotSet(num_circles_two, num_squares_two, other=self.dot_set_one, config=config, rng=rng)

        if control_type is ControlType.EQUAL_AREAS:
            self._match_areas()
        elif control_type is ControlType.INVERSE_AREAS:
            self._inverse_match_areas()

    def _match_areas(self):
        one, two = self.dot_set_one, self.dot_set_two
        if one.total_area > two.total_area:
            one.match_area(two.total_area)
        else:
            two.match_area(one.total_area)

    def _inverse_match_areas(self):
        more, fewer = self._by_count()
        if fewer.total_area < more.total_area:
            fewer.inverse_match_area(more.total_area)
        elif fewer.total_area > more.total_area:
            # mirror the imbalance so that the set with more shapes wins on area
            fewer.match_area(more.total_area ** 2 / fewer.total_area)

    def _by_count(self) -> Tuple[DotSet, DotSet]:
        if self.larger_set == 1:
            return self.dot_set_one, self.dot_set_two
        return self.dot_set_two, self.dot_set_one

    @property
    def larger_set(self) -> int:
        """1 or 2: the set holding more shapes (set two on a tie)."""
        if self.dot_set_one.total_num_dots > self.dot_set_two.total_num_dots:
            return 1
        return 2

    @property
    def num_circles_one(self) -> int:
        return self.dot_set_one.total_num_circles

    @property
    def num_circles_two(self) -> int:
        return self.dot_set_two.total_num_circles

    @property
    def num_squares_one(self) -> int:
        return self.dot_set_one.total_num_squares

    @property
    def num_squares_two(self) -> int:
        return self.dot_set_two.total_num_squares

    def __repr__(self):
        return f"DotsPair({self.dot_set_one!r}, {self.dot_set_two!r}, {self.control_type.name})"
