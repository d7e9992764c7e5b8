"""
PsychoPy helpers for presenting dot pairs.

- setup_window / make_bg_rect / make_fixation_cross: window furniture in pixel units.
- canvas_to_pix: convert a shape's top-left canvas anchor to a centered
  psychopy position.
- make_dot_stims: one visual.Circle / visual.Rect per shape of a DotSet.
- wait_for_response: poll the keyboard for a choice key.
"""
import time
from typing import List, Tuple, Optional, Dict

import numpy as np
from psychopy import visual, event, core

from .dots import DotSet, DotsPair, Shape


def rgb255_to_psychopy(rgb_255: Tuple[int, int, int]) -> List[float]:
    arr = np.clip(np.array(rgb_255, dtype=float), 0, 255)
    return ((arr / 127.5) - 1).tolist()  # 0->-1, 127.5->0, 255->1


def setup_window(
    bg_rgb_255: Tuple[int, int, int] = (128, 128, 128),
    fullscreen: bool = False,
    size: Optional[Tuple[int, int]] = None,
    monitor: Optional[str] = None,
):
    color = rgb255_to_psychopy(bg_rgb_255)
    win_kwargs = dict(color=color, colorSpace="rgb", units="pix", allowStencil=False)
    if monitor:
        win_kwargs["monitor"] = monitor
    if fullscreen:
        return visual.Window(fullscr=True, **win_kwargs)
    if size is None:
        size = (1024, 768)
    return visual.Window(size=size, fullscr=False, **win_kwargs)


def make_fixation_cross(win: visual.Window, size: int = 40, color: Tuple[int, int, int] = (0, 0, 0)):
    # If size is zero or negative, return None to indicate no fixation should be shown.
    if size is None or size <= 0:
        return None
    return visual.TextStim(win, text="+", height=size, color=rgb255_to_psychopy(color), colorSpace="rgb")


def make_bg_rect(win: visual.Window, bg_rgb_255: Tuple[int, int, int]):
    """Create a full-window background rectangle in pixel units."""
    return visual.Rect(
        win,
        width=win.size[0],
        height=win.size[1],
        fillColor=rgb255_to_psychopy(bg_rgb_255),
        fillColorSpace="rgb",
        lineColor=None,
        units="pix",
    )


def make_message(win: visual.Window, text: str, color: Tuple[int, int, int] = (255, 255, 255), height: int = 32):
    return visual.TextStim(win, text=text, height=height, color=rgb255_to_psychopy(color), colorSpace="rgb", wrapWidth=win.size[0] * 0.8)


def canvas_to_pix(
    x: float,
    y: float,
    diameter: float,
    canvas_size: Tuple[int, int],
) -> Tuple[float, float]:
    """Center of a shape anchored at canvas (x, y), in pix coords centered on the canvas.

    Canvas y grows downward; psychopy y grows upward.
    """
    w, h = canvas_size
    radius = diameter / 2.0
    return (x + radius - w / 2.0, h / 2.0 - (y + radius))


def make_dot_stims(
    win: visual.Window,
    dot_set: DotSet,
    color: Tuple[int, int, int],
):
    """Build one filled stimulus per shape of ``dot_set`` at its final diameter."""
    canvas_size = (dot_set.config.canvas_width, dot_set.config.canvas_height)
    fill = rgb255_to_psychopy(color)
    stims = []
    for pos, diameter in zip(dot_set.positions, dot_set.diameters):
        center = canvas_to_pix(pos.x, pos.y, diameter, canvas_size)
        if pos.shape is Shape.SQUARE:
            stim = visual.Rect(
                win, width=diameter, height=diameter, fillColor=fill, fillColorSpace="rgb", lineColor=None, units="pix"
            )
        else:
            stim = visual.Circle(win, radius=diameter / 2.0, fillColor=fill, fillColorSpace="rgb", lineColor=None, units="pix")
        stim.pos = center
        stims.append(stim)
    return stims


def make_pair_stims(
    win: visual.Window,
    dots_pair: DotsPair,
    color_one: Tuple[int, int, int],
    color_two: Tuple[int, int, int],
):
    return make_dot_stims(win, dots_pair.dot_set_one, color_one) + make_dot_stims(win, dots_pair.dot_set_two, color_two)


def draw_stims(stims, bg_rect=None, fix=None):
    if bg_rect is not None:
        bg_rect.draw()
    for s in stims:
        s.draw()
    if fix is not None:
        fix.draw()


def wait_for_response(
    key_map: Dict[str, int],
    timeout: Optional[float] = None,
) -> Tuple[Optional[str], Optional[int], Optional[float]]:
    """Block until one of ``key_map``'s keys (or escape) is pressed.

    Returns (key, chosen_set, rt_s); key is "escape" on abort and None on timeout.
    """
    event.clearEvents()
    start = time.perf_counter()
    keys = list(key_map.keys()) + ["escape"]
    while True:
        pressed = event.getKeys(keyList=keys)
        if pressed:
            key = pressed[0]
            rt = time.perf_counter() - start
            if key == "escape":
                return key, None, rt
            return key, key_map[key], rt
        if timeout is not None and time.perf_counter() - start >= timeout:
            return None, None, None
        core.wait(0.005)
