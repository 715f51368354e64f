"""
Main entry point for RUNFORGE.

Parses the command line, configures logging and launches the desktop
window with the generator, engine and high-score store wired together.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from runforge.config.settings import Settings, get_settings
from runforge.core.events import EventBus

logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False, log_file: Path | None = None) -> None:
    """Configure console and file logging."""
    level = logging.DEBUG if debug else logging.INFO

    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S"
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)

    if log_file is not None:
        # Truncate on each run for fresh logs
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # Reduce noise from some modules
    logging.getLogger("runforge.graphics").setLevel(logging.INFO)

    if log_file is not None:
        logging.info(f"Logging to file: {log_file}")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="runforge",
        description="Endless runner that builds its world from a text prompt.",
    )
    parser.add_argument("--debug", action="store_true", help="verbose logging")
    parser.add_argument(
        "--theme",
        type=Path,
        metavar="FILE",
        help="play a theme JSON file instead of generating one",
    )
    parser.add_argument("--fullscreen", action="store_true", help="start in fullscreen")
    parser.add_argument("--seed", type=int, help="seed for spawn and particle randomness")
    parser.add_argument("--log-file", type=Path, help="also write logs to this file")
    return parser.parse_args(argv)


async def run(settings: Settings, args: argparse.Namespace) -> None:
    """Build the session and run the window until it closes."""
    from runforge.ai.client import GeminiConfig, get_gemini_client
    from runforge.ai.theme_provider import ThemeProvider
    from runforge.engine.engine import RunnerEngine
    from runforge.graphics.glyphs import get_glyph_source
    from runforge.shell import GameShell
    from runforge.simulator.window import SimulatorWindow, WindowConfig
    from runforge.storage.highscore import HighScoreStore
    from runforge.theme import ThemeError, load_theme_file

    event_bus = EventBus()
    glyphs = get_glyph_source()

    client = get_gemini_client(GeminiConfig.from_settings(settings.ai))
    if not client.is_available:
        logger.warning("GEMINI_API_KEY not set - theme generation will fail, use --theme")

    shell = GameShell(
        provider=ThemeProvider(client),
        engine=RunnerEngine(glyphs=glyphs, event_bus=event_bus, seed=args.seed),
        high_scores=HighScoreStore(settings.storage.high_score_path),
        event_bus=event_bus,
        prompt=settings.default_prompt,
    )

    if args.theme is not None:
        try:
            shell.load_theme(load_theme_file(args.theme))
        except ThemeError as e:
            logger.error(f"Cannot use theme file {args.theme}: {e}")

    config = WindowConfig.from_settings(settings.display)
    if args.fullscreen:
        config.fullscreen = True

    window = SimulatorWindow(shell, config=config, event_bus=event_bus, glyphs=glyphs)
    await window.run()


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    from dotenv import load_dotenv

    # Load environment variables
    load_dotenv()

    args = parse_args(argv)
    settings = get_settings()
    setup_logging(args.debug or settings.debug, args.log_file or settings.log_file)

    logger.info("RUNFORGE starting...")

    try:
        asyncio.run(run(settings, args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)

    logger.info("RUNFORGE stopped")


if __name__ == "__main__":
    main()
