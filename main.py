"""
Onboarding Flow Runner
Drives an onboarding flow of unknown shape to its end, one screen at a time.
Entry point for running the automation
"""
import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.panel import Panel

from config import Config
from core.errors import BrowserSessionError
from core.logger import RunLogger
from core.seen_store import SeenValueStore
from engines.browser_engine import BrowserEngine
from engines.flag_gate import FeatureFlagGate
from engines.orchestrator import OnboardingOrchestrator, RunReport

console = Console()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Onboarding Flow Runner: resolves onboarding screens by archetype until the flow ends",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run against the configured START_URL, gated on a new flag value
  python main.py

  # Run a specific flow without the flag gate, with a visible browser
  python main.py --url "https://example.com/onboarding" --no-gate --headed
        """
    )

    parser.add_argument(
        "--url",
        type=str,
        default=None,
        help="First screen of the onboarding flow (defaults to START_URL)"
    )

    parser.add_argument(
        "--no-gate",
        action="store_true",
        help="Skip the feature-flag gate and always run the step loop"
    )

    parser.add_argument(
        "--headed",
        action="store_true",
        help="Show the browser window"
    )

    parser.add_argument(
        "--max-iterations",
        type=int,
        default=None,
        help=f"Hard ceiling on loop iterations (default: {Config.MAX_ITERATIONS})"
    )

    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help=f"Where run logs and screenshots go (default: {Config.OUTPUT_DIR})"
    )

    return parser


def build_config(args: argparse.Namespace):
    """Derive a config class from Config with the command-line overrides applied."""
    overrides = {}
    if args.url:
        overrides['START_URL'] = args.url
    if args.no_gate:
        overrides['GATE_ENABLED'] = False
    if args.headed:
        overrides['BROWSER_HEADLESS'] = False
    if args.max_iterations is not None:
        overrides['MAX_ITERATIONS'] = args.max_iterations
    if args.output_dir:
        overrides['OUTPUT_DIR'] = Path(args.output_dir)
    return type("RunConfig", (Config,), overrides)


async def run_onboarding(config, stop_event: Optional[asyncio.Event] = None) -> Optional[RunReport]:
    """
    One full run: open the flow, consult the flag gate, drive the step loop.

    Returns:
        The run report, or None if the gate kept the loop from running

    Raises:
        BrowserSessionError: if no browser session could be acquired
    """
    logger = RunLogger(config.OUTPUT_DIR)
    store = SeenValueStore.load(config.SEEN_VALUES_FILE, logger)
    browser = BrowserEngine(config, logger)

    try:
        driver = await browser.open(config.START_URL)

        if config.GATE_ENABLED:
            gate = FeatureFlagGate(driver, store, config, logger)
            decision = await gate.evaluate()
            if not decision.should_run:
                return None

        orchestrator = OnboardingOrchestrator(driver, config, logger)
        return await orchestrator.run(stop_event=stop_event)
    finally:
        await browser.cleanup()
        logger.close()


def main():
    """Main entry point for the onboarding runner."""
    args = build_parser().parse_args()
    config = build_config(args)

    try:
        config.validate()
    except ValueError as e:
        console.print(f"[red]❌ Error: {e}[/red]")
        sys.exit(2)

    console.print(Panel.fit(
        f"🌐 Start URL: {config.START_URL}\n"
        f"🚩 Flag gate: {'on' if config.GATE_ENABLED else 'off'}\n"
        f"📁 Output: {config.OUTPUT_DIR}",
        title="🤖 ONBOARDING FLOW RUNNER",
    ))

    try:
        report = asyncio.run(run_onboarding(config))
    except KeyboardInterrupt:
        console.print("\n[yellow]👋 Run interrupted by user[/yellow]")
        sys.exit(130)
    except BrowserSessionError as e:
        console.print(f"[red]❌ {e}[/red]")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]❌ Unexpected error: {e}[/red]")
        console.print_exception()
        sys.exit(1)

    if report is None:
        console.print("ℹ️  No new value found or value already seen.")
    else:
        console.print(f"Onboarding automation finished: {report.outcome.value}")
    sys.exit(0)


if __name__ == "__main__":
    main()
