"""committy

Generate a Conventional Commit message for the staged changes with an OpenAI
model, then commit with it.

Large change sets are degraded to fit the input budget: a zero-context diff
when it fits, otherwise a --stat summary, otherwise the staged file names. If
the API still rejects the request for size or tokens-per-minute reasons, the
request is retried once with a smaller stat summary.

Env vars (a .env file in the working directory is honoured):
- COMMITTY_OPENAI_API_KEY (required)
- COMMITTY_MODEL (optional, default: gpt-5)

Usage:
  committy [directory] [--dry-run] [--mode auto|full|unified0|stat|names] ...
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import find_dotenv, load_dotenv

from .ai import AIClient, generate_with_retry
from .config import API_KEY_ENV, DEFAULT_MAX_INPUT_CHARS, MODEL_ENV, Config, build_excludes
from .errors import CommitError, CommittyError, MissingCredentialError, VcsQueryError
from .git import ChangeSetReader, build_pathspec, commit_changes
from .prepare import InputMode, InputPreparer

logger = logging.getLogger(__name__)


# -----------------------------
# Console formatting
# -----------------------------

SEP = "═══════════════════════════════════════════════════════════"

API_KEY_HINT = f"Set it with: export {API_KEY_ENV}='your-api-key'"


def print_error(message: str, detail: str = "") -> None:
    print(f"\n❌ ERROR: {message}\n", file=sys.stderr)
    if detail:
        print(detail + "\n", file=sys.stderr)


def _init_logging(verbose: bool) -> None:
    """Send this package's debug records to stderr; safe to call repeatedly."""
    if not verbose:
        return
    pkg_logger = logging.getLogger("committy")
    pkg_logger.setLevel(logging.DEBUG)
    if pkg_logger.handlers:
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    pkg_logger.addHandler(handler)


# -----------------------------
# Arguments
# -----------------------------

def positive_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}")
    if n <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {n}")
    return n


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="committy",
        description="Generate git commit messages using ChatGPT.",
    )
    parser.add_argument(
        "directory",
        nargs="?",
        default="",
        help="Directory to use with git diff --cached (default: repository root)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only display the generated commit message",
    )
    parser.add_argument(
        "--model",
        default=None,
        help=f"OpenAI model to use (default: env {MODEL_ENV} or gpt-5)",
    )
    parser.add_argument(
        "--mode",
        choices=[m.value for m in InputMode],
        default=InputMode.AUTO.value,
        help="Diff mode: auto|full|unified0|stat|names (default: auto)",
    )
    parser.add_argument(
        "--max-input-chars",
        type=positive_int,
        default=DEFAULT_MAX_INPUT_CHARS,
        help=f"Max characters to send to the model (default: {DEFAULT_MAX_INPUT_CHARS})",
    )
    parser.add_argument(
        "--exclude",
        action="extend",
        nargs="+",
        default=[],
        metavar="PATTERN",
        help="Additional git pathspec patterns to exclude (repeatable)",
    )
    parser.add_argument(
        "--no-default-excludes",
        action="store_true",
        help="Disable default exclude patterns (lock files, builds, maps, etc)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log git commands and input-preparation decisions to stderr",
    )
    return parser


# -----------------------------
# Main
# -----------------------------

def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv(find_dotenv(usecwd=True))
    args = build_parser().parse_args(argv)
    _init_logging(args.verbose)

    try:
        config = Config.from_env(os.environ, model=args.model)
    except MissingCredentialError as e:
        print_error(str(e), API_KEY_HINT)
        return 1

    target_dir = Path(args.directory).expanduser().resolve() if args.directory else None
    excludes = build_excludes(args.exclude, use_defaults=not args.no_default_excludes)
    pathspec = build_pathspec(target_dir, excludes)
    logger.debug("pathspec: %s", pathspec)

    preparer = InputPreparer(ChangeSetReader(pathspec))
    max_chars = args.max_input_chars

    try:
        payload = preparer.prepare(InputMode(args.mode), max_chars)
        if payload.is_empty:
            print("No staged changes to commit.")
            return 0

        print(f"Using model: {config.model}")
        print("Generating commit message...")
        ai = AIClient(config.api_key, config.model)
        message = generate_with_retry(ai, preparer, payload, max_chars, notify=print)
        if not message:
            print_error("The model returned an empty commit message.")
            return 1

        print("\n" + SEP)
        print("                    COMMIT MESSAGE")
        print(SEP + "\n")
        print(message)
        print("\n" + SEP + "\n")

        if args.dry_run:
            print("(Dry run: commit not executed)\n")
            return 0

        print("Committing changes...")
        commit_changes(message)
        print("✅ Changes committed.\n")
    except CommitError as e:
        print_error("git commit failed", e.stderr)
        return 1
    except VcsQueryError as e:
        print_error(f"git query failed: {' '.join(e.command)}", e.stderr)
        return 1
    except CommittyError as e:
        print_error(str(e))
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
