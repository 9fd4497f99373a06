from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional, Iterator, Tuple
import time
import json

@dataclass(frozen=True)
class ProbeResult:
    url: str
    succeeded: bool
    status_code: Optional[int] = None
    error: Optional[str] = None

    @property
    def detail(self) -> str:
        if self.error is not None:
            return self.error
        return str(self.status_code)


@dataclass
class StrategyResult:
    strategy: str
    total_urls: int
    pass_scores: List[int] = field(default_factory=list)
    error: Optional[str] = None
    duration: float = 0.0

    @property
    def score(self) -> int:
        # Worst pass wins; a strategy that never got probed scores zero.
        if not self.pass_scores:
            return 0
        return min(self.pass_scores)

    @property
    def has_errors(self) -> bool:
        return self.error is not None

    def add_pass(self, score: int):
        self.pass_scores.append(score)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "strategy": self.strategy,
            "score": self.score,
            "total_urls": self.total_urls,
            "pass_scores": list(self.pass_scores),
            "error": self.error,
            "duration": round(self.duration, 3),
        }


class ResultTable:
    """Strategy -> StrategyResult, in first-seen order; re-recording a strategy replaces it."""

    def __init__(self, total_urls: int = 0):
        self.total_urls = total_urls
        self._results: Dict[str, StrategyResult] = {}

    def record(self, result: StrategyResult):
        self._results[result.strategy] = result

    def __len__(self) -> int:
        return len(self._results)

    def __contains__(self, strategy: str) -> bool:
        return strategy in self._results

    def __iter__(self) -> Iterator[StrategyResult]:
        return iter(list(self._results.values()))

    def get(self, strategy: str) -> Optional[StrategyResult]:
        return self._results.get(strategy)

    def scores(self) -> Dict[str, int]:
        return {s: r.score for s, r in self._results.items()}

    def items(self) -> List[Tuple[str, int]]:
        return list(self.scores().items())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_urls": self.total_urls,
            "results": [r.to_dict() for r in self._results.values()],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)


@dataclass
class RunSummary:
    provider: str
    passes: int
    start_time: float
    end_time: float
    table: ResultTable
    best_score: int = -1
    best_strategies: List[str] = field(default_factory=list)

    @property
    def total_duration(self) -> float:
        if self.end_time and self.start_time:
            return max(0.0, self.end_time - self.start_time)
        return 0.0

    @property
    def strategies_tested(self) -> int:
        return len(self.table)

    @property
    def strategies_with_errors(self) -> int:
        return sum(1 for r in self.table if r.has_errors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "provider": self.provider,
            "passes": self.passes,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "total_duration": round(self.total_duration, 3),
            "total_urls": self.table.total_urls,
            "strategies_tested": self.strategies_tested,
            "strategies_with_errors": self.strategies_with_errors,
            "best_score": self.best_score,
            "best_strategies": list(self.best_strategies),
            "results": self.table.to_dict()["results"],
            "generated_at": time.time(),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)
