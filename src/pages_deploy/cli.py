from __future__ import annotations

import argparse
import logging
import shlex
import sys
from collections.abc import Mapping
from pathlib import Path

from pages_deploy.config import DeployConfig, load_config_from_env
from pages_deploy.errors import ConfigError, StepFailed, VerifyError
from pages_deploy.pipeline import build_steps, run_pipeline
from pages_deploy.report import write_run_report
from pages_deploy.verify import pages_url, verify_published

EXIT_CONFIG_ERROR = 2
EXIT_VERIFY_FAILED = 1

_LOGGER_NAME = "pages_deploy"


def _setup_logging(level: str) -> logging.Logger:
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level.upper())

    # Drop the handler from a previous main() call; its stream may already be closed.
    for handler in list(logger.handlers):
        if getattr(handler, "_pages_deploy", False):
            logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(levelname)s - %(message)s", datefmt="%H:%M:%S")
    )
    console_handler._pages_deploy = True  # type: ignore[attr-defined]
    logger.addHandler(console_handler)
    return logger


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pages-deploy",
        description=(
            "Build API docs, write a root redirect page, import the output into the "
            "gh-pages branch and force-push it. Reads TOKEN and TRAVIS_REPO_SLUG "
            "(or GITHUB_REPOSITORY) from the environment."
        ),
    )
    parser.add_argument("--doc-dir", default=None, help="Docs output directory (default: target/doc)")
    parser.add_argument(
        "--doc-command",
        default=None,
        help='Docs build command, shell-quoted (default: "cargo doc")',
    )
    parser.add_argument(
        "--redirect-target",
        default=None,
        help="Path the root index.html redirects to (default: geo/index.html)",
    )
    parser.add_argument("--branch", default=None, help="Pages branch (default: gh-pages)")
    parser.add_argument("--host", default=None, help="Git host (default: github.com)")
    parser.add_argument(
        "--sudo",
        action="store_true",
        default=None,
        help="Install the publisher with sudo",
    )
    parser.add_argument(
        "--check-redirect",
        action="store_true",
        help="Fail before publishing if the redirect target is missing from the output",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log the (redacted) commands without running anything",
    )
    parser.add_argument("--report", type=Path, default=None, help="Write a JSON run report here")
    parser.add_argument(
        "--verify",
        action="store_true",
        help="After pushing, fetch the Pages URL and check it serves the redirect",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser


def _load_config(args: argparse.Namespace, environ: Mapping[str, str] | None) -> DeployConfig:
    doc_command = None
    if args.doc_command is not None:
        try:
            doc_command = shlex.split(args.doc_command)
        except ValueError as exc:
            raise ConfigError(f"Could not parse --doc-command: {exc}") from exc
    return load_config_from_env(
        environ,
        doc_dir=args.doc_dir,
        doc_command=doc_command,
        redirect_target=args.redirect_target,
        branch=args.branch,
        host=args.host,
        use_sudo=args.sudo,
    )


def main(argv: list[str] | None = None, *, environ: Mapping[str, str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logger = _setup_logging(args.log_level)

    try:
        config = _load_config(args, environ)
    except ConfigError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    logger.info("Publishing %s to %s@%s", config.doc_dir, config.repo_slug, config.branch)

    steps = build_steps(config, check_redirect=bool(args.check_redirect))
    outcome = run_pipeline(steps, dry_run=bool(args.dry_run))

    if args.report is not None:
        try:
            write_run_report(args.report, outcome, config)
        except OSError as exc:
            # Report failures never change the exit code.
            print(f"ERROR: could not write run report {args.report}: {exc}", file=sys.stderr)

    try:
        outcome.check()
    except StepFailed as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return exc.returncode

    if args.verify and not args.dry_run:
        try:
            ok = verify_published(pages_url(config.repo_slug), config.redirect_target)
        except VerifyError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return EXIT_VERIFY_FAILED
        if not ok:
            return EXIT_VERIFY_FAILED

    return 0
