import math
import random

import pytest

from eachevery.config import DotSetConfig


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def dot_config():
    return DotSetConfig(min_diameter=10, max_diameter=50, canvas_width=800, canvas_height=600)


def assert_no_overlap(set_a, set_b=None, gap=3):
    """Every pair of shapes keeps its centers at least r1 + r2 + gap apart."""
    shapes_a = list(zip(set_a.positions, set_a.diameters))
    if set_b is None:
        pairs = [(shapes_a[i], shapes_a[j]) for i in range(len(shapes_a)) for j in range(i + 1, len(shapes_a))]
    else:
        shapes_b = list(zip(set_b.positions, set_b.diameters))
        pairs = [(a, b) for a in shapes_a for b in shapes_b]
    for (p1, d1), (p2, d2) in pairs:
        r1, r2 = d1 / 2.0, d2 / 2.0
        dist = math.hypot((p1.x + r1) - (p2.x + r2), (p1.y + r1) - (p2.y + r2))
        assert dist >= r1 + r2 + gap - 1e-9, f"{p1} and {p2} overlap (dist={dist:.2f})"
