"""
Helpers to load and validate JSON configuration files for the dots task.

Dot geometry is read from dotted keys (``min.diameter``, ``max.diameter``, ...)
and the canvas bounds from ``width`` / ``height``. The values are frozen into
a ``DotSetConfig`` that is passed explicitly to every ``DotSet``.
"""
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, List, Optional, Tuple
from json import JSONDecodeError


def load_config(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(p, "r", encoding="utf-8") as f:
        text = f.read()
        if not text.strip():
            raise ValueError(f"Config file is empty: {path}")
        # Accept files that may be wrapped in Markdown code fences (```json ... ```)
        s = text.strip()
        if s.startswith("```"):
            lines = s.splitlines()
            if len(lines) >= 3 and lines[0].startswith("```") and lines[-1].startswith("```"):
                s = "\n".join(lines[1:-1])
            else:
                s = s.lstrip("`").rstrip("`")
        try:
            cfg = json.loads(s)
        except JSONDecodeError as e:
            raise ValueError(f"Error parsing JSON config '{path}': {e.msg} (line {e.lineno} col {e.colno})") from e
    if not isinstance(cfg, dict):
        raise ValueError("Config file must contain a top-level JSON object")
    return cfg


def _expect_key(cfg: Dict[str, Any], key: str):
    if key not in cfg:
        raise KeyError(f"Missing required config key: '{key}'")


def _is_int(v) -> bool:
    # bool is an int subclass; reject it for numeric keys
    return isinstance(v, int) and not isinstance(v, bool)


def _check_rgb(cfg: Dict[str, Any], key: str):
    rgb = cfg[key]
    if not (isinstance(rgb, list) or isinstance(rgb, tuple)) or len(rgb) != 3:
        raise ValueError(f"Config '{key}' must be a list of three integers 0-255")
    for v in rgb:
        if not _is_int(v) or v < 0 or v > 255:
            raise ValueError(f"Config '{key}' values must be integers in 0-255 range")


def validate_config(cfg: Dict[str, Any], required: Optional[List[str]] = None) -> Dict[str, Any]:
    """
    Small validator that ensures required keys exist and some basic checks.

    Parameters
    - cfg: loaded JSON dict
    - required: list of required top-level keys

    Returns cfg (unchanged) or raises an error.
    """
    if required is None:
        required = []
    for k in required:
        _expect_key(cfg, k)

    for key in ("min.diameter", "max.diameter"):
        if key in cfg and (not _is_int(cfg[key]) or cfg[key] < 1):
            raise ValueError(f"Config '{key}' must be an integer >= 1")
    if "min.diameter" in cfg and "max.diameter" in cfg:
        if cfg["min.diameter"] >= cfg["max.diameter"]:
            raise ValueError("Config 'min.diameter' must be smaller than 'max.diameter'")
    if "average.radius.control" in cfg and not isinstance(cfg["average.radius.control"], bool):
        raise ValueError("Config 'average.radius.control' must be true or false")
    for key in ("average.diameter.arc", "max.diameter.variance.arc"):
        if key in cfg and (not _is_int(cfg[key]) or cfg[key] < 0):
            raise ValueError(f"Config '{key}' must be a non-negative integer")

    max_diameter = cfg.get("max.diameter", DotSetConfig.max_diameter)
    for key in ("width", "height"):
        if key in cfg:
            if not _is_int(cfg[key]) or cfg[key] <= max_diameter:
                raise ValueError(f"Config '{key}' must be an integer larger than max.diameter ({max_diameter})")

    if "trials_per_block" in cfg:
        if not _is_int(cfg["trials_per_block"]) or cfg["trials_per_block"] < 1:
            raise ValueError("Config 'trials_per_block' must be an integer >= 1")
    if "max_attempts" in cfg:
        if not _is_int(cfg["max_attempts"]) or cfg["max_attempts"] < 1:
            raise ValueError("Config 'max_attempts' must be an integer >= 1")
    if "duration" in cfg:
        if not (_is_int(cfg["duration"]) or isinstance(cfg["duration"], float)) or cfg["duration"] <= 0:
            raise ValueError("Config 'duration' must be a positive number (seconds)")
    if "isi" in cfg:
        if not (_is_int(cfg["isi"]) or isinstance(cfg["isi"], float)) or cfg["isi"] < 0:
            raise ValueError("Config 'isi' must be a non-negative number (seconds)")
    for key in ("bg", "color_one", "color_two"):
        if key in cfg:
            _check_rgb(cfg, key)

    return cfg


@dataclass(frozen=True)
class DotSetConfig:
    """Geometry settings for dot placement.

    The average-radius fields are read from config but not used by the
    placement algorithm.
    """

    min_diameter: int = 10
    max_diameter: int = 50
    canvas_width: int = 800
    canvas_height: int = 600
    average_radius_control: bool = False
    average_diameter_arc: int = 30
    max_diameter_variance_arc: int = 10
    min_distance_between_dots: int = 3
    max_attempts: int = 100000

    def __post_init__(self):
        if self.min_diameter < 1 or self.min_diameter >= self.max_diameter:
            raise ValueError(
                f"min_diameter must be >= 1 and smaller than max_diameter "
                f"(got {self.min_diameter}, {self.max_diameter})"
            )
        if self.canvas_width <= self.max_diameter or self.canvas_height <= self.max_diameter:
            raise ValueError("canvas must be larger than max_diameter in both dimensions")

    @classmethod
    def from_dict(cls, cfg: Dict[str, Any]) -> "DotSetConfig":
        return cls(
            min_diameter=int(cfg.get("min.diameter", cls.min_diameter)),
            max_diameter=int(cfg.get("max.diameter", cls.max_diameter)),
            canvas_width=int(cfg.get("width", cls.canvas_width)),
            canvas_height=int(cfg.get("height", cls.canvas_height)),
            average_radius_control=bool(cfg.get("average.radius.control", cls.average_radius_control)),
            average_diameter_arc=int(cfg.get("average.diameter.arc", cls.average_diameter_arc)),
            max_diameter_variance_arc=int(cfg.get("max.diameter.variance.arc", cls.max_diameter_variance_arc)),
            max_attempts=int(cfg.get("max_attempts", cls.max_attempts)),
        )


@dataclass(frozen=True)
class TaskConfig:
    """Session settings consumed by the presentation shell."""

    dots: DotSetConfig = field(default_factory=DotSetConfig)
    trials_per_block: int = 12
    duration: float = 1.5
    isi: float = 0.5
    bg: Tuple[int, int, int] = (128, 128, 128)
    color_one: Tuple[int, int, int] = (30, 30, 200)
    color_two: Tuple[int, int, int] = (200, 200, 30)
    output_dir: str = "./logs"
    seed: Optional[int] = None

    @classmethod
    def from_dict(cls, cfg: Dict[str, Any]) -> "TaskConfig":
        return cls(
            dots=DotSetConfig.from_dict(cfg),
            trials_per_block=int(cfg.get("trials_per_block", cls.trials_per_block)),
            duration=float(cfg.get("duration", cls.duration)),
            isi=float(cfg.get("isi", cls.isi)),
            bg=tuple(cfg.get("bg", cls.bg)),
            color_one=tuple(cfg.get("color_one", cls.color_one)),
            color_two=tuple(cfg.get("color_two", cls.color_two)),
            output_dir=cfg.get("output_dir", cls.output_dir),
            seed=cfg.get("seed", cls.seed),
        )
