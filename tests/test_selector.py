from src.core.selector import ResultSelector
from src.models.result import ResultTable, StrategyResult


def _table(scores, total=3):
    t = ResultTable(total_urls=total)
    for s, passes in scores.items():
        t.record(StrategyResult(strategy=s, total_urls=total, pass_scores=list(passes)))
    return t


def test_max_score_and_ties():
    sel = ResultSelector(_table({"a": [1], "b": [3, 3], "c": [3], "d": [0]}))
    assert sel.max_score() == 3
    assert sel.best_strategies() == ["b", "c"]


def test_empty_table():
    sel = ResultSelector(ResultTable())
    assert sel.max_score() == -1
    assert sel.best_strategies() == []


def test_write_best_one_per_line(tmp_path):
    out = tmp_path / "MostSuccessfulStrategies.txt"
    best = ResultSelector(_table({"a": [2], "b": [1], "c": [2]})).save_best(out)
    assert best == ["a", "c"]
    assert out.read_text(encoding="utf-8") == "a\nc\n"


def test_write_best_creates_parent_dirs(tmp_path):
    out = tmp_path / "results" / "best.txt"
    ResultSelector(_table({"a": [1]})).save_best(out)
    assert out.read_text(encoding="utf-8") == "a\n"


def test_unwritable_artifact_is_not_fatal(tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("x", encoding="utf-8")
    sel = ResultSelector(_table({"a": [1]}))
    assert sel.save_best(blocker / "best.txt") is None
    # table and selection are untouched
    assert sel.best_strategies() == ["a"]
