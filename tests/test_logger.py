import csv

import pytest

from eachevery.dots import Ratio
from eachevery.logger import MessageLogger, TrialLogger
from eachevery.pair_generator import DotsPairGenerator


def _rows(path):
    with open(path, newline="", encoding="utf-8") as fh:
        return list(csv.reader(fh, delimiter="\t"))


def test_trial_logger_writes_pair_and_streak(tmp_path, dot_config):
    gen = DotsPairGenerator(config=dot_config, seed=5)
    pair = gen.get_new_pair(Ratio(1, 2))
    logger = TrialLogger(str(tmp_path), filename="trials.txt")
    logger.log("task_start", notes="hello")
    logger.log(
        "response",
        block=gen.block_mode.name,
        trial=1,
        ratio=Ratio(1, 2),
        dots_pair=pair,
        generator=gen,
        response="f",
        correct=False,
        rt_s=0.5,
    )
    logger.close()

    assert logger.path.name == "trials.tsv"
    assert (tmp_path / "meta.txt").exists()
    rows = _rows(logger.path)
    assert rows[0] == TrialLogger.COLUMNS
    first = dict(zip(rows[0], rows[1]))
    assert first["event"] == "task_start"
    assert first["control_type"] == ""
    assert first["notes"] == "hello"
    second = dict(zip(rows[0], rows[2]))
    assert second["row_idx"] == "2"
    assert second["ratio"] == "1:2"
    assert second["control_type"] == pair.control_type.name
    assert int(second["circles_one"]) == pair.num_circles_one
    assert int(second["squares_two"]) == pair.num_squares_two
    assert float(second["area_one"]) == pytest.approx(pair.dot_set_one.total_area, abs=1e-3)
    assert second["same_size_correct"] == str(gen.same_size_correct)
    assert second["last_was_big"] == str(int(gen.last_was_big))
    assert second["correct"] == "0"
    assert second["rt_s"] == "0.500000"


def test_message_logger(tmp_path):
    logger = MessageLogger(str(tmp_path))
    logger.log("warn", "something happened")
    logger.close()
    rows = _rows(tmp_path / "message_log.tsv")
    assert rows[0] == ["row_idx", "time_iso", "level", "message"]
    assert rows[1][0] == "1"
    assert rows[1][2] == "WARN"
    assert rows[1][3] == "something happened"
