"""
Generates ``DotsPair``s for successive trials.

The number of dots in a pair comes from a predefined ``Ratio`` scaled until
the total lies between MIN_DOTS and MAX_DOTS. Ratios are drawn without
replacement from ``ratios_bucket``; once the bucket is empty it is refilled
for the current block. Changing block empties the bucket immediately.

The session runs through the four blocks in a random order fixed at
construction. Each trial also gets an area ``ControlType``; no more than
MAX_TIMES_SAME_SIZE_CORRECT trials in a row may have the same relative dot
size (bigger or smaller individual dots) as the correct answer:

    EQUAL_AREAS   <-> smaller dots correct
    INVERSE_AREAS <-> bigger dots correct
"""
import random
from enum import Enum
from typing import List, Optional, Tuple

from .config import DotSetConfig
from .dots import ControlType, DotsPair, Ratio


class Block(Enum):
    SOME_DOTS = 0
    SOME_OF_THE_DOTS = 1
    EACH_DOT = 2
    EVERY_DOT = 3


# Same catalogue for every block
RATIO_CATALOGUE: Tuple[Ratio, ...] = (
    Ratio(1, 2),
    Ratio(1, 3),
    Ratio(3, 1),
    Ratio(2, 1),
    Ratio(3, 2),
    Ratio(2, 3),
)


class DotsPairGenerator:
    """Per-session trial scheduler.

    Pass ``seed`` or ``rng`` for a reproducible session. ``msg_logger`` (a
    ``MessageLogger``) receives INFO rows about blocks, refills and forced
    control-type changes.
    """

    MAX_DOTS = 20
    MIN_DOTS = 10
    MAX_TIMES_SAME_SIZE_CORRECT = 3

    def __init__(
        self,
        config: Optional[DotSetConfig] = None,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
        msg_logger=None,
    ):
        self.config = config if config is not None else DotSetConfig()
        self._rng = rng if rng is not None else random.Random(seed)
        self.msg_logger = msg_logger
        self.dots_pair: Optional[DotsPair] = None
        self.ratio: Optional[Ratio] = None
        self.same_size_correct = 0
        self.last_was_big = False
        self._block_set: List[Block] = []
        self._ratios_bucket: List[Ratio] = []
        self.block_mode: Block = self._fill_block_set()

    def _log(self, message: str, level: str = "INFO"):
        if self.msg_logger is not None:
            self.msg_logger.log(level, message)

    def _fill_block_set(self) -> Block:
        pool = [Block.SOME_DOTS, Block.SOME_OF_THE_DOTS, Block.EVERY_DOT, Block.EACH_DOT]
        while pool:
            self._block_set.append(pool.pop(self._rng.randrange(len(pool))))
        self._log("block_order " + " ".join(b.name for b in self._block_set))
        return self._block_set[0]

    @property
    def block_set(self) -> Tuple[Block, ...]:
        return tuple(self._block_set)

    @property
    def ratios_bucket(self) -> Tuple[Ratio, ...]:
        return tuple(self._ratios_bucket)

    @property
    def is_complete(self) -> bool:
        return not self._block_set

    def get_new_mode_pair(self) -> DotsPair:
        """Generate, store and return the pair for the next trial."""
        ratio = self.decide_ratio()
        return self.get_new_pair(ratio)

    def clear_ratios(self):
        self._ratios_bucket.clear()

    def decide_ratio(self) -> Ratio:
        """Remove a random ratio from the bucket, refilling it first when empty."""
        if not self._ratios_bucket:
            self.fill_ratios_bucket()
        return self._ratios_bucket.pop(self._rng.randrange(len(self._ratios_bucket)))

    def fill_ratios_bucket(self):
        # block only changes how the counts are framed to the subject
        self._ratios_bucket.extend(RATIO_CATALOGUE)
        self._log(
            f"ratios_refill block={self.block_mode.name} "
            + " ".join(str(r) for r in self._ratios_bucket)
        )

    def derive_counts(self, ratio: Ratio) -> Tuple[int, int]:
        """
        Scale ``ratio`` to a pair of counts whose sum is at least MIN_DOTS,
        then add a random number of further whole increments that keep the
        sum at or below MAX_DOTS.
        """
        num_one, num_two = ratio.num_one, ratio.num_two
        while num_one + num_two < self.MIN_DOTS:
            num_one += ratio.num_one
            num_two += ratio.num_two
        max_increments = (self.MAX_DOTS - (num_one + num_two)) // ratio.total
        if max_increments <= 0:
            max_increments = 1
        extra = self._rng.randrange(max_increments)
        return num_one + extra * ratio.num_one, num_two + extra * ratio.num_two

    def get_new_pair(self, ratio: Ratio) -> DotsPair:
        """Build a pair whose circle and square counts both follow ``ratio``."""
        self.ratio = ratio
        num_circles_one, num_circles_two = self.derive_counts(ratio)
        # squares are derived from the same (circle) ratio
        num_squares_one, num_squares_two = self.derive_counts(ratio)
        control_type = self.generate_area_control_type()
        self.dots_pair = DotsPair(
            num_circles_one,
            num_circles_two,
            num_squares_one,
            num_squares_two,
            control_type,
            config=self.config,
            rng=self._rng,
        )
        return self.dots_pair

    def generate_area_control_type(self) -> ControlType:
        candidate = self._random_area_control_type()
        self.check_same_size(candidate)
        if self.same_size_correct >= self.MAX_TIMES_SAME_SIZE_CORRECT:
            candidate = self.change_control_type(candidate)
        return candidate

    def _random_area_control_type(self) -> ControlType:
        if self._rng.random() < 0.5:
            return ControlType.EQUAL_AREAS
        return ControlType.INVERSE_AREAS

    def change_control_type(self, candidate: ControlType) -> ControlType:
        """Reset the streak, toggle ``last_was_big`` and return the opposite type."""
        self.same_size_correct = 0
        self.last_was_big = not self.last_was_big
        flipped = candidate.opposite()
        self._log(f"control_type_forced drawn={candidate.name} returned={flipped.name}")
        return flipped

    def check_same_size(self, control_type: ControlType):
        """Update the streak of trials where the same relative size is correct."""
        if control_type is ControlType.INVERSE_AREAS:
            if self.last_was_big:
                self.same_size_correct += 1
            else:
                self.same_size_correct = 0
            self.last_was_big = True
        elif control_type is ControlType.EQUAL_AREAS:
            if not self.last_was_big:
                self.same_size_correct += 1
            else:
                self.same_size_correct = 0
            self.last_was_big = False

    def change_block(self):
        """Advance to the next block and empty the ratio bucket."""
        if self._block_set:
            finished = self._block_set.pop(0)
            if self._block_set:
                self.block_mode = self._block_set[0]
                self._log(f"block_change finished={finished.name} next={self.block_mode.name}")
            else:
                self._log(f"block_change finished={finished.name} session_complete")
        else:
            self._log("change_block called with no blocks left", level="WARN")
        self._ratios_bucket.clear()
