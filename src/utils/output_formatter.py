import json
from typing import List, TextIO

from rich.console import Console
from rich.table import Table

from ..models.result import ResultTable, RunSummary


class OutputFormatter:
    def __init__(self):
        self.supported_formats = ["text", "json", "tsv"]

    def format_line(self, strategy: str, score: int, total: int) -> str:
        return f"Strategy: {strategy} -> {score}/{total} successful requests"

    def format_results(self, table: ResultTable, format_type: str = "text") -> List[str]:
        format_type = format_type.lower()
        if format_type == "json":
            return [table.to_json()]
        if format_type == "tsv":
            lines = ["strategy\tscore\ttotal\tpasses"]
            for r in table:
                s = r.strategy.replace("\t", "\\t")
                passes = ",".join(str(p) for p in r.pass_scores) or "-"
                lines.append(f"{s}\t{r.score}\t{r.total_urls}\t{passes}")
            return lines
        if format_type == "text":
            return [self.format_line(s, score, table.total_urls) for s, score in table.items()]
        raise ValueError(f"Unsupported format: {format_type}")

    def build_table(self, summary: RunSummary) -> Table:
        best = set(summary.best_strategies)
        t = Table(title=f"Results ({summary.provider}, {summary.passes} pass(es))", show_lines=False)
        t.add_column("#", justify="right", style="grey70")
        t.add_column("Strategy", overflow="fold")
        t.add_column("Score", justify="right")
        t.add_column("Passes", style="grey70")
        total = summary.table.total_urls
        for i, r in enumerate(summary.table, 1):
            style = "bold bright_green" if r.strategy in best and r.score > 0 else None
            passes = " ".join(str(p) for p in r.pass_scores) or (r.error and "error") or "-"
            t.add_row(str(i), r.strategy, f"{r.score}/{total}", passes, style=style)
        return t

    def print_summary(self, summary: RunSummary, console: Console = None):
        c = console or Console()
        c.print(self.build_table(summary))
        c.print(f"Duration: {summary.total_duration:.2f}s")
        if summary.best_score >= 0:
            c.print(f"Best score: {summary.best_score}/{summary.table.total_urls} "
                    f"({len(summary.best_strategies)} strateg{'y' if len(summary.best_strategies) == 1 else 'ies'})")

    def write(self, table: ResultTable, out: TextIO, format_type: str = "text"):
        for line in self.format_results(table, format_type):
            out.write(line + "\n")
        out.flush()

    def write_summary_json(self, summary: RunSummary, out: TextIO):
        json.dump(summary.to_dict(), out, indent=2, ensure_ascii=False)
        out.write("\n")
        out.flush()


output_formatter = OutputFormatter()
