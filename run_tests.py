#!/usr/bin/env python3
# ================================================================================
# Restful Booker Suite Runner
# ================================================================================
#
# Wraps pytest so CI jobs and local runs share one entry point.
#
#   unit  - offline checks of the framework (no network, no browser)
#   api   - REST specifications against the deployed platform
#   ui    - Playwright specifications against the deployed platform
#   all   - everything under booker_suites/
#
# The api and ui suites only execute with --live; without it pytest collects
# them and reports them as skipped.
#
# Usage:
#   python run_tests.py --suite unit
#   python run_tests.py --suite api --live --tags P0 smoke
#   python run_tests.py --suite ui --live --browser firefox --headed
#   python run_tests.py --suite all --live --parallel 4
#
# ================================================================================

import argparse
import os
import shutil
import subprocess
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from loguru import logger


logger.remove()
logger.add(
    sys.stdout,
    format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>runner</cyan> | {message}",
    level="INFO"
)


ROOT = Path(__file__).parent
RESULTS_DIR = ROOT / "test-results"

SUITE_PATHS = {
    "unit": "booker_suites/unit",
    "api": "booker_suites/api_testing/tests",
    "ui": "booker_suites/ui_testing/tests",
    "all": "booker_suites",
}
BROWSER_SUITES = ("ui", "all")


class TestRunner:
    """
    Builds and runs one pytest invocation for a suite.

    Allure results land in ``test-results/allure-results``; when the allure
    CLI is installed an HTML report is rendered next to them and
    ``test-results/allure-report`` points at the newest one.
    """

    __test__ = False

    def __init__(
        self,
        suite: str = "all",
        markers: Optional[List[str]] = None,
        workers: int = 1,
        browser: str = "chromium",
        headed: bool = False,
        live: bool = False,
        allure_report: bool = True,
        verbose: bool = False
    ):
        self.suite = suite
        self.markers = markers or []
        self.workers = workers
        self.browser = browser
        self.live = live
        self.allure_report = allure_report
        self.verbose = verbose

        self.is_ci = bool(os.getenv("CI"))
        # CI agents have no display
        self.headed = headed and not self.is_ci

        self.allure_results = RESULTS_DIR / "allure-results"
        self.allure_latest = RESULTS_DIR / "allure-report"

    @property
    def uses_browser(self) -> bool:
        return self.suite in BROWSER_SUITES

    def run(self) -> int:
        """Run the suite and return pytest's exit code."""
        self._log_plan()
        self.allure_results.mkdir(parents=True, exist_ok=True)

        command = self.build_command()
        logger.info(f"$ {' '.join(command)}")

        try:
            exit_code = subprocess.run(command, cwd=str(ROOT)).returncode
        except OSError as e:
            logger.error(f"Could not start pytest: {e}")
            exit_code = 1

        if self.allure_report:
            self._render_allure_report()

        if exit_code == 0:
            logger.info(f"Suite '{self.suite}' passed")
        else:
            logger.error(f"Suite '{self.suite}' failed (exit code {exit_code})")
        return exit_code

    def build_command(self) -> List[str]:
        command = [sys.executable, "-m", "pytest", SUITE_PATHS[self.suite]]

        if self.markers:
            command += ["-m", " or ".join(self.markers)]
        if self.live:
            command.append("--live")
        if self.workers > 1:
            command += ["-n", str(self.workers)]
        if self.allure_report:
            command += ["--alluredir", str(self.allure_results)]
        if self.uses_browser:
            command.append(f"--browser={self.browser}")
            if self.headed:
                command.append("--headed")

        command.append("-v" if self.verbose else "-q")
        return command

    def _log_plan(self) -> None:
        logger.info(
            f"suite={self.suite} live={self.live} workers={self.workers} "
            f"markers={self.markers or 'any'} ci={self.is_ci}"
        )
        if self.uses_browser:
            logger.info(f"browser={self.browser} headed={self.headed}")
        if not self.live and self.suite != "unit":
            logger.warning("--live not given: API and UI specifications will be skipped")

    def _render_allure_report(self) -> None:
        report_dir = RESULTS_DIR / f"allure-report-{datetime.now():%Y%m%d_%H%M%S}"
        try:
            subprocess.run(
                ["allure", "generate", str(self.allure_results), "-o", str(report_dir), "--clean"],
                check=True
            )
        except FileNotFoundError:
            logger.warning(f"allure CLI not installed; raw results kept in {self.allure_results}")
            return
        except subprocess.CalledProcessError as e:
            logger.error(f"allure generate failed: {e}")
            return

        if self.allure_latest.is_symlink():
            self.allure_latest.unlink()
        elif self.allure_latest.exists():
            shutil.rmtree(self.allure_latest)
        self.allure_latest.symlink_to(report_dir.name)
        logger.info(f"Allure report: {report_dir}")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run the Restful Booker test suites",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_tests.py --suite unit --no-allure
  python run_tests.py --suite all --live --tags P0 smoke --parallel 4
  python run_tests.py --suite ui --live --headed --browser webkit
        """
    )
    parser.add_argument("--suite", choices=list(SUITE_PATHS), default="all")
    parser.add_argument(
        "--tags", nargs="+", default=[],
        help="Markers to select, OR-ed together (P0 smoke booking ...)"
    )
    parser.add_argument(
        "--parallel", "-n", type=int, default=1,
        help="pytest-xdist worker count"
    )
    parser.add_argument("--browser", choices=["chromium", "firefox", "webkit"], default="chromium")
    parser.add_argument("--headed", action="store_true", help="Show the browser (ignored under CI)")
    parser.add_argument("--live", action="store_true", help="Hit the deployed platform")
    parser.add_argument("--no-allure", action="store_true", help="Skip Allure results and report")
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser.parse_args(argv)


def main():
    args = parse_args()
    runner = TestRunner(
        suite=args.suite,
        markers=args.tags,
        workers=args.parallel,
        browser=args.browser,
        headed=args.headed,
        live=args.live,
        allure_report=not args.no_allure,
        verbose=args.verbose
    )
    sys.exit(runner.run())


if __name__ == "__main__":
    main()
