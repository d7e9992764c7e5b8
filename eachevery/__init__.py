"""
Stimulus generation for the Each/Every dot-comparison task.

Only the psychopy-free modules are imported here so the generator can be
used (and tested) without a display. Import `eachevery.utils` directly for
the presentation helpers.
"""
from . import config, logger, dots, pair_generator

__all__ = ["config", "logger", "dots", "pair_generator"]
