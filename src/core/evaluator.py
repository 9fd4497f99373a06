from __future__ import annotations

import time
from typing import Optional, Sequence, Callable

from .prober import Prober
from .harness import ProcessHarness
from ..models.target import RunConfig
from ..models.result import StrategyResult, ResultTable
from ..models.exceptions import ProviderException, ProcessException
from ..utils.logger import PerformanceLogger, get_logger

logger = get_logger("evaluator")


class StrategyEvaluator:
    """Scores strategies one after another against a fixed URL set.

    A strategy's score is the lowest pass score seen while its bypass process
    was running. Strategies and passes never overlap: only one bypass
    process may own the packet interception driver at a time, and each pass
    must see that process alone.
    """

    def __init__(
        self,
        config: RunConfig,
        prober: Optional[Prober] = None,
        harness_factory: Optional[Callable[..., ProcessHarness]] = None,
    ):
        self.config = config.normalized()
        self.prober = prober or Prober(timeout=self.config.probe_timeout, user_agent=self.config.user_agent)
        self.harness_factory = harness_factory or ProcessHarness
        self.perf = PerformanceLogger()
        self.stats = {
            "strategies_processed": 0,
            "start_failures": 0,
            "start_time": None,
            "end_time": None,
        }

    def run_passes(self, urls: Sequence[str], result: Optional[StrategyResult] = None, passes: Optional[int] = None) -> int:
        passes = max(1, passes if passes is not None else self.config.passes)
        urls = list(urls)
        lowest: Optional[int] = None
        for i in range(passes):
            score = self.prober.run_pass(urls)
            if result is not None:
                result.add_pass(score)
            if lowest is None or score < lowest:
                lowest = score
            logger.info(f"Pass {i + 1}: {score}/{len(urls)} successful requests")
        return lowest or 0

    def evaluate_strategy(self, strategy: str, urls: Sequence[str]) -> StrategyResult:
        urls = list(urls)
        result = StrategyResult(strategy=strategy, total_urls=len(urls))
        timer = f"strategy:{strategy}"
        self.perf.start_timer(timer)

        harness = self.harness_factory(self.config, strategy)
        try:
            with harness:
                self.run_passes(urls, result)
        except ProviderException as e:
            logger.error(f"Unknown provider: {self.config.provider}")
            result.error = str(e)
        except ProcessException as e:
            self.stats["start_failures"] += 1
            logger.error(f"Failed to start process for strategy {strategy!r}: {e.message}")
            result.error = str(e)

        result.duration = self.perf.stop_timer(timer)
        return result

    def evaluate(self, strategies: Sequence[str], urls: Sequence[str]) -> ResultTable:
        urls = list(urls)
        table = ResultTable(total_urls=len(urls))
        self.stats.update({"start_time": time.time(), "strategies_processed": 0, "start_failures": 0})

        for strategy in strategies:
            logger.info(f"Testing strategy: {strategy}")
            result = self.evaluate_strategy(strategy, urls)
            table.record(result)
            self.stats["strategies_processed"] += 1
            logger.info(f"Strategy: {strategy}, successes: {result.score} of {len(urls)}")

        self.stats["end_time"] = time.time()
        return table

    def close(self):
        self.prober.close()
