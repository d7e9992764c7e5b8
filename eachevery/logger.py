"""
Simple TSV loggers for the dots task.
"""
import csv
from pathlib import Path
import time


class TrialLogger:
    """
    TSV logger that writes one row per trial event with the generated pair,
    the scheduler state and (for responses) the subject's answer.
    """

    COLUMNS = [
        "row_idx",
        "event",
        "block",
        "trial",
        "ratio",
        "control_type",
        "circles_one",
        "squares_one",
        "circles_two",
        "squares_two",
        "area_one",
        "area_two",
        "same_size_correct",
        "last_was_big",
        "flip_time_psychopy_s",
        "flip_time_perf_s",
        "response",
        "correct",
        "rt_s",
        "notes",
    ]

    def __init__(self, out_dir: str, filename: str = "each_every_log.tsv"):
        self.out_dir = Path(out_dir)
        self.out_dir.mkdir(parents=True, exist_ok=True)
        # ensure .tsv extension
        if not filename.endswith(".tsv"):
            filename = Path(filename).stem + ".tsv"
        self.path = self.out_dir / filename
        self._file = open(self.path, "w", newline="", encoding="utf-8")
        self._writer = csv.writer(self._file, delimiter="\t")
        self._writer.writerow(self.COLUMNS)
        self._idx = 0
        meta = self.out_dir / "meta.txt"
        with open(meta, "w", encoding="utf-8") as mf:
            mf.write(f"created: {time.strftime('%Y-%m-%d %H:%M:%S')}\n")

    def log(
        self,
        event: str,
        block: str = "",
        trial: int = None,
        ratio=None,
        dots_pair=None,
        generator=None,
        flip_time_psychopy_s: float = None,
        flip_time_perf_s: float = None,
        response: str = "",
        correct: bool = None,
        rt_s: float = None,
        notes: str = "",
    ):
        """Write one row. ``dots_pair`` and ``generator`` fill the pair and streak columns."""
        self._idx += 1
        pair_cols = ["", "", "", "", "", "", ""]
        if dots_pair is not None:
            pair_cols = [
                dots_pair.control_type.name,
                dots_pair.num_circles_one,
                dots_pair.num_squares_one,
                dots_pair.num_circles_two,
                dots_pair.num_squares_two,
                f"{dots_pair.dot_set_one.total_area:.3f}",
                f"{dots_pair.dot_set_two.total_area:.3f}",
            ]
        streak_cols = ["", ""]
        if generator is not None:
            streak_cols = [generator.same_size_correct, int(generator.last_was_big)]
        self._writer.writerow(
            [
                self._idx,
                event,
                block,
                trial if trial is not None else "",
                str(ratio) if ratio is not None else "",
                *pair_cols,
                *streak_cols,
                f"{flip_time_psychopy_s:.6f}" if flip_time_psychopy_s is not None else "",
                f"{flip_time_perf_s:.9f}" if flip_time_perf_s is not None else "",
                response,
                int(correct) if correct is not None else "",
                f"{rt_s:.6f}" if rt_s is not None else "",
                notes,
            ]
        )
        self._file.flush()

    def close(self):
        self._file.close()


class MessageLogger:
    """Simple TSV logger for textual messages (warnings, debug, info).

    Columns: row_idx, time_iso, level, message
    """

    def __init__(self, out_dir: str, filename: str = "message_log.tsv"):
        self.out_dir = Path(out_dir)
        self.out_dir.mkdir(parents=True, exist_ok=True)
        if not filename.endswith(".tsv"):
            filename = Path(filename).stem + ".tsv"
        self.path = self.out_dir / filename
        self._file = open(self.path, "w", newline="", encoding="utf-8")
        self._writer = csv.writer(self._file, delimiter="\t")
        self._writer.writerow(["row_idx", "time_iso", "level", "message"])
        self._idx = 0

    def log(self, level: str, message: str):
        self._idx += 1
        timestr = time.strftime("%Y-%m-%dT%H:%M:%S", time.localtime())
        self._writer.writerow([self._idx, timestr, level.upper(), message])
        self._file.flush()

    def close(self):
        self._file.close()
