"""
Each/Every dot comparison task.

- The session runs through the four blocks (SOME_DOTS, SOME_OF_THE_DOTS,
  EACH_DOT, EVERY_DOT) in a random order.
- Each block starts with a cue screen, then `trials_per_block` trials.
- Each trial: fixation for `isi` seconds, then both dot sets (two colors, same
  canvas) for `duration` seconds, then a blank screen until the subject
  answers which color had more dots (F = color one, J = color two).
- Escape aborts the session.

Configuration keys used (in addition to the dot geometry keys):
- trials_per_block: trials before the block changes
- duration: stimulus display time (seconds)
- isi: fixation time before each pair (seconds)
- color_one / color_two: [r,g,b] 0-255 for the two dot sets
- bg: background [r,g,b] 0-255

Usage example:
python task/each_every_task.py --config configs/each_every_config.json --seed 3
"""
import argparse
import sys
import time
from pathlib import Path
from typing import Tuple, Optional

from psychopy import core, logging as pylogging

# Ensure project root on sys.path for local imports
_project_root = Path(__file__).resolve().parents[1]
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from eachevery import utils
from eachevery.config import TaskConfig, load_config, validate_config
from eachevery.logger import TrialLogger, MessageLogger
from eachevery.pair_generator import Block, DotsPairGenerator

KEY_MAP = {"f": 1, "j": 2}

BLOCK_PROMPTS = {
    Block.SOME_DOTS: "Are some dots {color}?",
    Block.SOME_OF_THE_DOTS: "Are some of the dots {color}?",
    Block.EACH_DOT: "Is each dot {color}?",
    Block.EVERY_DOT: "Is every dot {color}?",
}


def parse_args():
    p = argparse.ArgumentParser(description="Each/Every dot comparison task")
    p.add_argument("--config", help="Path to JSON config file. CLI overrides config keys.")
    p.add_argument("--trials_per_block", type=int, default=None, help="Trials per block")
    p.add_argument("--duration", type=float, default=None, help="Stimulus duration (s)")
    p.add_argument("--isi", type=float, default=None, help="Fixation time before each pair (s)")
    p.add_argument("--bg", type=int, nargs=3, default=None, help="Background RGB (0-255)")
    p.add_argument("--color_one", type=int, nargs=3, default=None, help="Dot set one RGB (0-255)")
    p.add_argument("--color_two", type=int, nargs=3, default=None, help="Dot set two RGB (0-255)")
    p.add_argument("--output_dir", default=None, help="Output dir for logs")
    p.add_argument("--seed", type=int, default=None, help="Random seed")
    p.add_argument("--fullscreen", action="store_true", default=None, help="Fullscreen")
    p.add_argument("--win_size", type=int, nargs=2, default=None, help="Window size when not fullscreen")
    p.add_argument("--fixation_size", type=int, default=None, help="Fixation cross size in pixels; 0 disables fixation")
    return p.parse_args()


def show_block_cue(win, bg_rect, block: Block, block_idx: int) -> bool:
    """Show the block framing and wait for space. Returns False on escape."""
    text = (
        f"Block {block_idx}\n\n"
        + BLOCK_PROMPTS[block].format(color="the first color")
        + "\n\nF = first color    J = second color\n\nPress space to begin."
    )
    bg_rect.draw()
    utils.make_message(win, text).draw()
    win.flip()
    key, _, _ = utils.wait_for_response({"space": 0})
    return key != "escape"


def run_task(
    task_cfg: TaskConfig,
    fullscreen: bool = False,
    win_size: Optional[Tuple[int, int]] = None,
    fixation_size: int = 40,
):
    msg_logger = MessageLogger(task_cfg.output_dir, filename="each_every_message_log.tsv")
    logger = TrialLogger(task_cfg.output_dir, filename="each_every_log.tsv")
    pylogging.console.setLevel(pylogging.CRITICAL)

    generator = DotsPairGenerator(config=task_cfg.dots, seed=task_cfg.seed, msg_logger=msg_logger)

    win = utils.setup_window(bg_rgb_255=task_cfg.bg, fullscreen=fullscreen, size=win_size)
    fix = utils.make_fixation_cross(win, size=fixation_size)
    bg_rect = utils.make_bg_rect(win, task_cfg.bg)

    logger.log("task_start", notes=f"blocks={' '.join(b.name for b in generator.block_set)}")
    aborted = False
    block_idx = 0
    while not generator.is_complete and not aborted:
        block_idx += 1
        block = generator.block_mode
        logger.log("block_start", block=block.name, notes=f"block={block_idx}")
        if not show_block_cue(win, bg_rect, block, block_idx):
            aborted = True
            break

        for trial in range(1, task_cfg.trials_per_block + 1):
            try:
                pair = generator.get_new_mode_pair()
            except RuntimeError as e:
                msg_logger.log("ERROR", f"pair_generation_failed block={block.name} trial={trial}: {e}")
                raise

            # Fixation
            if task_cfg.isi > 0:
                utils.draw_stims([], bg_rect=bg_rect, fix=fix)
                win.flip()
                core.wait(task_cfg.isi)

            stims = utils.make_pair_stims(win, pair, task_cfg.color_one, task_cfg.color_two)
            utils.draw_stims(stims, bg_rect=bg_rect)
            flip_ps = win.flip()
            flip_perf = time.perf_counter()
            logger.log(
                "pair_on",
                block=block.name,
                trial=trial,
                ratio=generator.ratio,
                dots_pair=pair,
                generator=generator,
                flip_time_psychopy_s=flip_ps,
                flip_time_perf_s=flip_perf,
            )
            core.wait(task_cfg.duration)

            bg_rect.draw()
            win.flip()
            key, chosen, rt = utils.wait_for_response(KEY_MAP)
            if key == "escape":
                logger.log("abort", block=block.name, trial=trial, notes="escape_pressed")
                aborted = True
                break
            logger.log(
                "response",
                block=block.name,
                trial=trial,
                ratio=generator.ratio,
                dots_pair=pair,
                generator=generator,
                response=key,
                correct=chosen == pair.larger_set,
                rt_s=rt,
            )

        logger.log("block_end", block=block.name, notes=f"block={block_idx}")
        if not aborted:
            generator.change_block()

    logger.log("task_end", notes="aborted" if aborted else "done")
    logger.close()
    msg_logger.close()
    win.close()
    core.quit()


def main():
    args = parse_args()
    cfg = {}
    if args.config:
        cfg = load_config(args.config)

    def _get(name, default=None):
        val = getattr(args, name, None)
        if val is not None:
            return val
        return cfg.get(name, default)

    # CLI values override config keys before validation
    merged = dict(cfg)
    for key in ("trials_per_block", "duration", "isi", "bg", "color_one", "color_two", "output_dir", "seed"):
        val = getattr(args, key, None)
        if val is not None:
            merged[key] = val

    try:
        validate_config(merged)
        task_cfg = TaskConfig.from_dict(merged)
        run_task(
            task_cfg,
            fullscreen=bool(_get("fullscreen", False)),
            win_size=tuple(_get("win_size")) if _get("win_size") else None,
            fixation_size=int(_get("fixation_size", 40)),
        )
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
