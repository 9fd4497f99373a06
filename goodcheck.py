#!/usr/bin/env python3
from __future__ import annotations
import os
import sys
import argparse
import shutil
import json
import time
from dataclasses import replace
from typing import List, Dict, Any, Optional, Callable

from rich.console import Console

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from src.models.target import RunConfig, Provider
from src.models.result import ResultTable, RunSummary
from src.models.exceptions import (
    ConfigurationException,
    InputException,
    NetworkException,
    ProviderException,
)
from src.core.evaluator import StrategyEvaluator
from src.core.selector import ResultSelector
from src.core.cluster import fetch_cluster_codename, compute_auto_gcs
from src.utils.logger import setup_logging, get_logger, timestamped_log_path
from src.utils.validator import file_exists, load_strategies, load_checklist, validate_test_url
from src.utils.output_formatter import output_formatter
from config.constants import (
    DEFAULT_CONFIG,
    PROVIDERS,
    EXIT_CODES,
    get_version,
    get_defaults,
    get_default_executables,
    get_env_log_level,
)

logger = get_logger("cli")

TITLE = "GoodCheck - DPI bypass strategy checker"


class WideFormatter(argparse.RawTextHelpFormatter):
    def __init__(self, prog):
        width = shutil.get_terminal_size((100, 20)).columns
        super().__init__(prog, max_help_position=32, width=max(90, min(width, 140)))


class GoodCheckCLI:
    def __init__(self, input_fn: Callable[[str], str] = input, console: Optional[Console] = None):
        self.parser = self._create_parser()
        self.config: RunConfig | None = None
        self.evaluator: StrategyEvaluator | None = None
        self._input = input_fn
        self.console = console or Console()

    def _create_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(prog="goodcheck", description=TITLE, formatter_class=WideFormatter)
        parser.add_argument("-V", "--version", action="version", version=f"GoodCheck {get_version()}")

        inp = parser.add_argument_group("Input Options")
        inp.add_argument("--provider", default="", help=f"Bypass program to drive: {', '.join(PROVIDERS)} (prompted when omitted)")
        inp.add_argument("--strategy", dest="strategy_file", default="", help=f'File with one strategy per line (prompted inside "{DEFAULT_CONFIG["strategies_folder"]}" when omitted)')
        inp.add_argument("--checklist", dest="checklist_file", default="", help="File with extra URLs/domains to check (optional)")
        inp.add_argument("--profile", help="JSON profile overriding executables, test URLs and folders (CLI args override profile)")

        run = parser.add_argument_group("Test Options")
        run.add_argument("--passes", type=int, default=DEFAULT_CONFIG["passes"], help=f'Number of test passes per strategy (default: {DEFAULT_CONFIG["passes"]})')
        run.add_argument("-t", "--timeout", type=float, default=DEFAULT_CONFIG["probe_timeout"], help=f'Per-request timeout in seconds (default: {DEFAULT_CONFIG["probe_timeout"]})')
        run.add_argument("--warmup", type=float, default=DEFAULT_CONFIG["warmup_delay"], help=f'Seconds to wait after starting the bypass program (default: {DEFAULT_CONFIG["warmup_delay"]})')
        run.add_argument("--exe", action="append", default=[], metavar="ID=PATH", help="Override a provider executable (repeatable, e.g. cia=/opt/byedpi/ciadpi)")
        run.add_argument("--skip-gcs", dest="skip_gcs", action="store_true", default=None, help="Skip the ISP Google cache server auto URL")
        run.add_argument("--with-gcs", dest="skip_gcs", action="store_false", help="Include the ISP Google cache server auto URL (default)")
        run.add_argument("--tls12", dest="skip_tls12", action="store_false", default=None, help="Include the TLS 1.2 breakage test URL")
        run.add_argument("--no-tls12", dest="skip_tls12", action="store_true", help="Skip the TLS 1.2 breakage test URL (default)")

        out = parser.add_argument_group("Output Options")
        out.add_argument("--save-best", nargs="?", const="", default=None, metavar="FILE", help=f'Write the most successful strategies to FILE (default: {DEFAULT_CONFIG["most_successful_file"]})')
        out.add_argument("--json", action="store_true", help="Print the final report as JSON")
        out.add_argument("-o", "--output", help="Also write the final report to a file")
        out.add_argument("--no-log-file", action="store_true", help=f'Do not write a log file into "{DEFAULT_CONFIG["logs_folder"]}"')
        out.add_argument("--quiet", action="store_true", help="Only log warnings and errors")
        out.add_argument("--verbose", action="store_true", help="Debug logging")

        return parser

    def parse_arguments(self, argv: Optional[List[str]] = None) -> argparse.Namespace:
        return self.parser.parse_args(argv)

    def _load_profile_file(self, path: str) -> Dict[str, Any]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("profile JSON must be an object")
            return data
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load profile {path}: {e}")
            return {}

    def _create_run_config(self, args: argparse.Namespace, profile: Dict[str, Any]) -> RunConfig:
        d = get_defaults()
        for k in d:
            if k in profile:
                d[k] = profile[k]

        executables = get_default_executables()
        executables.update(profile.get("executables") or {})
        for item in args.exe or []:
            if "=" not in item:
                raise ConfigurationException("Executable override must look like ID=PATH", config_key="exe", config_value=item)
            k, v = item.split("=", 1)
            executables[k.strip()] = v.strip()

        if args.skip_gcs is not None:
            d["skip_auto_isp_gcs"] = args.skip_gcs
        if args.skip_tls12 is not None:
            d["skip_auto_tls12_breakage_test"] = args.skip_tls12
        if args.save_best is not None:
            d["output_most_successful_separately"] = True
            if args.save_best:
                d["most_successful_file"] = args.save_best

        return RunConfig(
            provider=args.provider,
            passes=args.passes,
            probe_timeout=args.timeout,
            warmup_delay=args.warmup,
            executables=executables,
            provider_names={k: p["name"] for k, p in PROVIDERS.items()},
            skip_auto_isp_gcs=bool(d["skip_auto_isp_gcs"]),
            skip_auto_tls12_breakage_test=bool(d["skip_auto_tls12_breakage_test"]),
            output_most_successful_separately=bool(d["output_most_successful_separately"]),
            most_successful_file=d["most_successful_file"],
            checklist_folder=d["checklist_folder"],
            strategies_folder=d["strategies_folder"],
            logs_folder=d["logs_folder"],
            tls12_test_url=d["tls12_test_url"],
            report_mapping_urls=tuple(d["report_mapping_urls"]),
            user_agent=d.get("user_agent"),
        ).normalized()

    def choose_provider(self, config: RunConfig) -> Optional[str]:
        choices: List[Provider] = config.available_providers()
        print("Select the program to test:")
        for i, p in enumerate(choices, 1):
            print(f"{i}: {p.name}")
        print("0: Cancel")
        try:
            raw = self._input("Enter number: ").strip()
        except EOFError:
            raw = ""
        try:
            choice = int(raw)
        except ValueError:
            choice = 0
        if choice <= 0 or choice > len(choices):
            return None
        return choices[choice - 1].key

    def ask_strategy_file(self, config: RunConfig) -> str:
        try:
            name = self._input(f"Enter the strategies file name (in folder {config.strategies_folder}): ").strip()
        except EOFError:
            name = ""
        return os.path.join(config.strategies_folder, name)

    def build_test_urls(self, config: RunConfig, checklist_file: str = "") -> List[str]:
        urls: List[str] = []
        if not config.skip_auto_tls12_breakage_test:
            urls.append(config.tls12_test_url)
        else:
            logger.info("Skipping TLS 1.2 breakage test")

        if not config.skip_auto_isp_gcs:
            try:
                codename = fetch_cluster_codename(config.report_mapping_urls)
            except NetworkException as e:
                logger.warning(f"Could not obtain cluster codename: {e.message}")
            else:
                logger.info(f"Cluster codename: {codename}")
                gcs = compute_auto_gcs(codename)
                urls.append(gcs)
                logger.info(f"Using ISP's GCS auto address: {gcs}")
        else:
            logger.info("Skipping ISP's GCS test")

        if checklist_file and file_exists(checklist_file):
            try:
                for u in load_checklist(checklist_file):
                    ok, err = validate_test_url(u)
                    if not ok:
                        logger.warning(f"Suspicious checklist entry {u}: {err}")
                    urls.append(u)
            except InputException as e:
                logger.error(f"Failed to read checklist: {e.message}")
        elif checklist_file:
            logger.warning(f"Checklist file not found: {checklist_file}")
        return urls

    def _write_report(self, summary: RunSummary, args: argparse.Namespace) -> None:
        if args.json:
            output_formatter.write_summary_json(summary, sys.stdout)
        else:
            output_formatter.write(summary.table, sys.stdout, "text")
            if not args.quiet:
                output_formatter.print_summary(summary, self.console)

        if args.output:
            try:
                d = os.path.dirname(args.output)
                if d:
                    os.makedirs(d, exist_ok=True)
                with open(args.output, "w", encoding="utf-8") as f:
                    if args.json:
                        output_formatter.write_summary_json(summary, f)
                    else:
                        output_formatter.write(summary.table, f, "text")
            except OSError as e:
                logger.error(f"Failed to write report to {args.output}: {e}")

    def run(self, args: argparse.Namespace) -> int:
        if args.verbose:
            lvl = "DEBUG"
        elif args.quiet:
            lvl = "WARNING"
        else:
            lvl = get_env_log_level("INFO")

        try:
            profile: Dict[str, Any] = {}
            if getattr(args, "profile", None):
                profile = self._load_profile_file(args.profile)

            self.config = self._create_run_config(args, profile)
            self.config.validate()
        except ConfigurationException as e:
            setup_logging(level=lvl)
            logger.error(f"{e}")
            return EXIT_CODES["CONFIG_ERROR"]

        log_file = None
        if not args.no_log_file:
            log_file = timestamped_log_path(
                self.config.logs_folder, DEFAULT_CONFIG["log_file_prefix"], DEFAULT_CONFIG["log_timestamp_format"]
            )
        setup_logging(level=lvl, log_file=log_file)
        logger.info(f"Starting GoodCheck {get_version()}")

        try:
            config = self.config
            if not config.provider:
                provider = self.choose_provider(config)
                if provider is None:
                    logger.info("Cancelled")
                    return EXIT_CODES["SUCCESS"]
                config = self.config = replace(config, provider=provider)

            try:
                provider = config.resolve_provider()
                logger.info(f"Provider: {provider.name} ({provider.exe})")
            except ProviderException as e:
                logger.error(f"{e.message}; every strategy will score 0")

            strategy_file = args.strategy_file or self.ask_strategy_file(config)
            try:
                strategies = load_strategies(strategy_file)
            except InputException as e:
                logger.error(f"Failed to read strategies file: {e.message}")
                return EXIT_CODES["INPUT_ERROR"]
            logger.info(f"Strategies loaded: {len(strategies)}")

            urls = self.build_test_urls(config, args.checklist_file)
            if not urls:
                logger.error("No URLs to check, exiting.")
                return EXIT_CODES["INPUT_ERROR"]
            logger.info(f"Total URLs to check: {len(urls)}")
            logger.info(f"Number of passes: {config.passes}")

            self.evaluator = StrategyEvaluator(config)
            start = time.time()
            table: ResultTable = self.evaluator.evaluate(strategies, urls)
            logger.info("Testing finished.")

            selector = ResultSelector(table)
            summary = RunSummary(
                provider=config.provider,
                passes=config.passes,
                start_time=start,
                end_time=time.time(),
                table=table,
                best_score=selector.max_score(),
                best_strategies=selector.best_strategies(),
            )
            self._write_report(summary, args)

            if config.output_most_successful_separately:
                selector.save_best(config.most_successful_file)

            if log_file:
                logger.info(f"Log saved to {log_file}. Exiting.")
            return EXIT_CODES["SUCCESS"]
        except KeyboardInterrupt:
            logger.info("Interrupted by user")
            return EXIT_CODES["UNKNOWN_ERROR"]
        finally:
            if self.evaluator:
                self.evaluator.close()


def main():
    cli = GoodCheckCLI()
    args = cli.parse_arguments()
    sys.exit(cli.run(args))


if __name__ == "__main__":
    main()
