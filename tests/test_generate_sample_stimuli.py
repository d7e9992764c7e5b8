import random

from PIL import Image, ImageDraw

from eachevery.dots import ControlType, DotSet, DotsPair, Shape
from eachevery.generate_sample_stimuli import draw_dot_set, main, render_dots_pair


def test_draw_dot_set_paints_circles_and_squares(dot_config):
    s = DotSet(0, config=dot_config)
    s.add_dot(10, 10, 40, Shape.CIRCLE)
    s.add_dot(100, 10, 40, Shape.SQUARE)
    im = Image.new("RGB", (200, 100), (0, 0, 0))
    draw_dot_set(ImageDraw.Draw(im), s, (255, 0, 0))
    assert im.getpixel((30, 30)) == (255, 0, 0)
    assert im.getpixel((120, 30)) == (255, 0, 0)
    # a square's corner is filled, a circle's is not
    assert im.getpixel((101, 11)) == (255, 0, 0)
    assert im.getpixel((11, 11)) == (0, 0, 0)
    assert im.getpixel((60, 30)) == (0, 0, 0)


def test_render_dots_pair_uses_both_colors(dot_config):
    pair = DotsPair(3, 6, 3, 6, ControlType.EQUAL_AREAS, config=dot_config, rng=random.Random(2))
    im = render_dots_pair(pair, color_one=(255, 0, 0), color_two=(0, 0, 255), bg=(0, 0, 0))
    assert im.size == (dot_config.canvas_width, dot_config.canvas_height)
    colors = {c for _, c in im.getcolors(maxcolors=1 << 16)}
    assert {(255, 0, 0), (0, 0, 255), (0, 0, 0)} <= colors


def test_main_writes_pngs(tmp_path, capsys):
    main(["--out_dir", str(tmp_path), "--num", "3", "--seed", "4"])
    files = sorted(tmp_path.glob("pair_*.png"))
    assert len(files) == 3
    with Image.open(files[0]) as im:
        assert im.size == (800, 600)
    assert "Wrote 3 pairs" in capsys.readouterr().out
