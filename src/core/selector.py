from pathlib import Path
from typing import List, Optional, Union

from ..models.result import ResultTable
from ..models.exceptions import OutputException
from ..utils.logger import get_logger

logger = get_logger("selector")


class ResultSelector:
    def __init__(self, table: ResultTable):
        self.table = table

    def max_score(self) -> int:
        """Highest strategy score, or -1 for an empty table."""
        scores = self.table.scores()
        if not scores:
            return -1
        return max(scores.values())

    def best_strategies(self) -> List[str]:
        # With every strategy at 0 (e.g. unknown provider) they all tie.
        best = self.max_score()
        return [s for s, score in self.table.items() if score == best]

    def write_best(self, path: Union[str, Path]) -> List[str]:
        best = self.best_strategies()
        p = Path(path)
        try:
            if p.parent and not p.parent.exists():
                p.parent.mkdir(parents=True, exist_ok=True)
            with open(p, "w", encoding="utf-8") as f:
                for s in best:
                    f.write(s + "\n")
        except OSError as e:
            raise OutputException(f"Cannot write best strategies: {e}", path=str(p))
        return best

    def save_best(self, path: Union[str, Path]) -> Optional[List[str]]:
        try:
            best = self.write_best(path)
        except OutputException as e:
            logger.error(f"Failed to create file for best strategies: {e.message}")
            return None
        logger.info(f"Best strategies written to {path}")
        return best
