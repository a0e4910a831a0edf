"""
autodocs - keeps @autodocs documentation comments in sync with their code.

Entry point for the command line.

Usage:
    python main.py check                          # report outdated comments
    python main.py generate                       # regenerate outdated comments
    python main.py --config other.toml check      # custom config file
    python main.py --no-config generate           # built-in defaults only
    python main.py --debug generate --model ...   # verbose logs, other model
"""

import argparse
import logging
import sys
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

# Load .env before anything else
load_dotenv()

from config.settings import DEFAULT_CONFIG_FILE, AppConfig, load_config
from core.document import Document
from core.exceptions import ConfigError, ParseError, WriteError
from core.generator import GenerationClient, Generator
from core.loader import list_files


@dataclass
class CheckSummary:
    files_scanned: int = 0
    outdated: List[str] = field(default_factory=list)
    files_failed: List[str] = field(default_factory=list)


@dataclass
class RunSummary:
    files_scanned: int = 0
    files_updated: int = 0
    regenerated: int = 0
    failed: int = 0
    skipped: int = 0
    files_failed: List[str] = field(default_factory=list)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="autodocs",
        description="📝 autodocs - keep @autodocs comments in sync with the code they describe.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Examples:
  autodocs check
  autodocs generate
  autodocs --config autodocs.toml generate --concurrency 8
  autodocs --no-config check
        """,
    )
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG_FILE,
        help=f"Path to the TOML config file (default: {DEFAULT_CONFIG_FILE}).",
    )
    parser.add_argument(
        "--no-config",
        action="store_true",
        help="Do not read a config file; use built-in defaults.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging.",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Only print problems.",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # ── check ──────────────────────────────────
    subparsers.add_parser(
        "check",
        help="Check if all the docs are up to date.",
    )

    # ── generate ───────────────────────────────
    gen_parser = subparsers.add_parser(
        "generate",
        help="Regenerate outdated docs and write the files back.",
    )
    gen_parser.add_argument(
        "--model",
        default=None,
        help="Cerebras model to use (default from config/.env or llama-3.3-70b).",
    )
    gen_parser.add_argument(
        "--concurrency",
        type=int,
        default=None,
        help="Maximum concurrent generation calls per file.",
    )

    return parser.parse_args(argv)


def configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def resolve_config(args: argparse.Namespace) -> AppConfig:
    config = load_config(None if args.no_config else args.config)
    config.verbose = not args.quiet
    if getattr(args, "model", None):
        config.llm.model = args.model
    if getattr(args, "concurrency", None) is not None:
        if args.concurrency < 1:
            raise ConfigError(f"--concurrency must be at least 1, got {args.concurrency}")
        config.sync.concurrency = args.concurrency
    return config


def _collect(config: AppConfig, root: str) -> List[str]:
    if config.sync.uses_default_includes and config.verbose:
        print(f"⚠️  No include pattern provided, using the default one: {', '.join(config.sync.includes)}")
    files = list_files(config.sync.includes, config.sync.excludes, root=root)
    logging.getLogger(__name__).debug("Found %d files", len(files))
    return files


def run_check(config: AppConfig, root: str = ".") -> CheckSummary:
    """Report every outdated comment; never writes anything."""
    summary = CheckSummary()
    for path in _collect(config, root):
        summary.files_scanned += 1
        try:
            outdated = Document(path, tag=config.sync.tag).check()
        except (ParseError, OSError) as e:
            print(f"❌ {e}")
            summary.files_failed.append(path)
            continue
        for location in outdated:
            print(f"❌ Found outdated comment at {location}")
        summary.outdated.extend(outdated)

    if config.verbose:
        if summary.outdated:
            print(f"\n📋 {len(summary.outdated)} outdated comment(s) in {summary.files_scanned} file(s).")
        else:
            print(f"✅ All docs are up to date ({summary.files_scanned} file(s) checked).")
    return summary


def run_generate(
    config: AppConfig,
    generator: Optional[GenerationClient] = None,
    root: str = ".",
) -> RunSummary:
    """
    Main pipeline: Collect → Parse → Fingerprint → Generate → Patch → Write.
    Returns the aggregate summary of the run.
    """
    if generator is None:
        generator = Generator(config.llm)

    summary = RunSummary()
    for path in _collect(config, root):
        summary.files_scanned += 1
        try:
            document = Document(path, tag=config.sync.tag)
            result = document.resync(generator, max_workers=config.sync.concurrency)
            if result.changed:
                document.write()
        except (ParseError, WriteError, OSError) as e:
            print(f"❌ {e}")
            summary.files_failed.append(path)
            continue

        summary.regenerated += result.regenerated
        summary.failed += result.failed
        summary.skipped += result.skipped

        for report in result.reports:
            if report.outcome is not None and report.outcome.kind != "regenerated":
                print(f"⚠️  {report.comment.location_string(path)}: {report.outcome.reason}")

        if result.changed:
            summary.files_updated += 1
            if config.verbose:
                print(
                    f"✅ New docs have been generated for {path} "
                    f"({result.regenerated} regenerated, {result.failed} failed)"
                )

    if config.verbose:
        print(f"\n{'=' * 60}")
        print(f"📄 Files: {summary.files_scanned} scanned | {summary.files_updated} updated | "
              f"{len(summary.files_failed)} failed")
        print(f"📝 Comments: {summary.regenerated} regenerated | {summary.failed} failed | "
              f"{summary.skipped} skipped")
        if isinstance(generator, Generator):
            consumption = generator.get_consumption()
            print(
                f"💰 Total cost for {consumption.completions} completions "
                f"({consumption.prompt_tokens} prompt tokens and "
                f"{consumption.completion_tokens} completion tokens): ${consumption.cost:.4f}"
            )
        print(f"{'=' * 60}\n")

    return summary


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.debug)

    if args.command is None:
        # No command given - show help
        print("📝 autodocs - keep @autodocs comments in sync with their code\n")
        print("Commands:")
        print("  autodocs check      Report outdated comments")
        print("  autodocs generate   Regenerate outdated comments")
        print("\nRun 'autodocs --help' for full usage details.")
        return 0

    try:
        config = resolve_config(args)
        if args.command == "check":
            summary = run_check(config)
            return 1 if summary.outdated or summary.files_failed else 0

        summary = run_generate(config)
        return 1 if summary.files_failed else 0
    except (ConfigError, ValueError) as e:
        print(f"❌ {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
