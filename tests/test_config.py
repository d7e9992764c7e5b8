import json

import pytest

from eachevery.config import DotSetConfig, TaskConfig, load_config, validate_config


def _write(tmp_path, text, name="cfg.json"):
    p = tmp_path / name
    p.write_text(text, encoding="utf-8")
    return str(p)


def test_load_config_reads_json(tmp_path):
    path = _write(tmp_path, json.dumps({"min.diameter": 12, "max.diameter": 40}))
    assert load_config(path) == {"min.diameter": 12, "max.diameter": 40}


def test_load_config_accepts_code_fences(tmp_path):
    path = _write(tmp_path, '```json\n{"width": 640}\n```\n')
    assert load_config(path) == {"width": 640}


def test_load_config_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "missing.json"))
    with pytest.raises(ValueError, match="empty"):
        load_config(_write(tmp_path, "   ", "empty.json"))
    with pytest.raises(ValueError, match="Error parsing JSON"):
        load_config(_write(tmp_path, "{not json", "bad.json"))
    with pytest.raises(ValueError, match="top-level JSON object"):
        load_config(_write(tmp_path, "[1, 2]", "list.json"))


def test_shipped_config_is_valid():
    from pathlib import Path

    path = Path(__file__).resolve().parents[1] / "configs" / "each_every_config.json"
    cfg = validate_config(load_config(str(path)))
    task = TaskConfig.from_dict(cfg)
    assert task.dots.max_diameter == 50
    assert task.color_one == (30, 30, 200)


def test_validate_required_keys():
    with pytest.raises(KeyError):
        validate_config({}, required=["min.diameter"])


@pytest.mark.parametrize(
    "cfg",
    [
        {"min.diameter": 0},
        {"min.diameter": 30, "max.diameter": 30},
        {"max.diameter": "big"},
        {"average.radius.control": 1},
        {"average.diameter.arc": -1},
        {"width": 40},
        {"height": 50.5},
        {"trials_per_block": 0},
        {"duration": 0},
        {"isi": -0.1},
        {"bg": [0, 0]},
        {"color_one": [0, 0, 256]},
        {"max_attempts": True},
    ],
)
def test_validate_rejects_bad_values(cfg):
    with pytest.raises(ValueError):
        validate_config(cfg)


def test_dot_set_config_from_dict():
    cfg = {
        "average.radius.control": True,
        "average.diameter.arc": 20,
        "max.diameter.variance.arc": 4,
        "min.diameter": 8,
        "max.diameter": 30,
        "width": 400,
        "height": 300,
    }
    dc = DotSetConfig.from_dict(cfg)
    assert (dc.min_diameter, dc.max_diameter) == (8, 30)
    assert (dc.canvas_width, dc.canvas_height) == (400, 300)
    assert dc.average_radius_control is True
    assert dc.average_diameter_arc == 20
    assert dc.max_diameter_variance_arc == 4
    assert dc.min_distance_between_dots == 3


def test_dot_set_config_is_frozen():
    dc = DotSetConfig()
    with pytest.raises(AttributeError):
        dc.min_diameter = 1


def test_dot_set_config_rejects_bad_geometry():
    with pytest.raises(ValueError):
        DotSetConfig(min_diameter=20, max_diameter=10)
    with pytest.raises(ValueError):
        DotSetConfig(max_diameter=50, canvas_width=50)


def test_task_config_defaults():
    task = TaskConfig.from_dict({})
    assert task.dots == DotSetConfig()
    assert task.trials_per_block == 12
    assert task.seed is None
