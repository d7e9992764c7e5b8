"""
Render generated dot pairs to PNG files for checking stimuli offline.
Usage:
python -m eachevery.generate_sample_stimuli --out_dir ./sample_stimuli --num 6 --seed 1
"""
import argparse
import sys
from pathlib import Path
from typing import Tuple

from PIL import Image, ImageDraw

from .config import TaskConfig, load_config, validate_config
from .dots import DotSet, DotsPair, Shape
from .pair_generator import DotsPairGenerator


def draw_dot_set(draw: ImageDraw.ImageDraw, dot_set: DotSet, color: Tuple[int, int, int]):
    for pos, diameter in zip(dot_set.positions, dot_set.diameters):
        box = (pos.x, pos.y, pos.x + diameter, pos.y + diameter)
        if pos.shape is Shape.SQUARE:
            draw.rectangle(box, fill=color)
        else:
            draw.ellipse(box, fill=color)


def render_dots_pair(
    dots_pair: DotsPair,
    color_one: Tuple[int, int, int] = (30, 30, 200),
    color_two: Tuple[int, int, int] = (200, 200, 30),
    bg: Tuple[int, int, int] = (128, 128, 128),
) -> Image.Image:
    """Draw both sets of a pair on one canvas-sized RGB image."""
    cfg = dots_pair.dot_set_one.config
    im = Image.new("RGB", (cfg.canvas_width, cfg.canvas_height), bg)
    draw = ImageDraw.Draw(im)
    draw_dot_set(draw, dots_pair.dot_set_one, color_one)
    draw_dot_set(draw, dots_pair.dot_set_two, color_two)
    return im


def main(argv=None):
    parser = argparse.ArgumentParser()
    parser.add_argument("--out_dir", required=True, help="Directory to save rendered pairs")
    parser.add_argument("--num", type=int, default=6, help="Number of pairs to render")
    parser.add_argument("--config", help="Optional JSON config with dot geometry keys")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    args = parser.parse_args(argv)

    try:
        cfg = {}
        if args.config:
            cfg = validate_config(load_config(args.config))
        task_cfg = TaskConfig.from_dict(cfg)
        seed = args.seed if args.seed is not None else task_cfg.seed
        generator = DotsPairGenerator(config=task_cfg.dots, seed=seed)
        out = Path(args.out_dir)
        out.mkdir(parents=True, exist_ok=True)
        for i in range(args.num):
            pair = generator.get_new_mode_pair()
            name = (
                f"pair_{i+1:02d}_{generator.block_mode.name.lower()}_{pair.control_type.name.lower()}"
                f"_{pair.dot_set_one.total_num_dots}v{pair.dot_set_two.total_num_dots}.png"
            )
            im = render_dots_pair(pair, task_cfg.color_one, task_cfg.color_two, task_cfg.bg)
            im.save(out / name, "PNG")
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)
    print(f"Wrote {args.num} pairs to {out.resolve()}")


if __name__ == "__main__":
    main()
