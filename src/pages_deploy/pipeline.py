"""Linear publish pipeline.

Build docs -> write redirect -> ensure publisher -> import into branch -> push.

Every step's exit status is checked explicitly; the first non-zero status stops
the pipeline and becomes the overall return code. Nothing is retried and no step
after the failing one runs.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from pages_deploy.config import DeployConfig
from pages_deploy.errors import DeployError, StepFailed
from pages_deploy.redirect import check_redirect_target, write_redirect
from pages_deploy.remote import redact_argv
from pages_deploy.steps import (
    PipelineState,
    Step,
    StepResult,
    build_docs_command,
    import_command,
    install_publisher_command,
    push_command,
)

logger = logging.getLogger(__name__)

# Shell convention for "command not found".
EXIT_COMMAND_NOT_FOUND = 127
EXIT_SIGNAL_BASE = 128
# In-process steps (redirect write/check) have no exit status of their own.
EXIT_ACTION_FAILED = 1

Runner = Callable[..., Any]


@dataclass(frozen=True)
class PipelineOutcome:
    state: PipelineState
    returncode: int
    results: tuple[StepResult, ...] = field(default_factory=tuple)
    failed_step: str | None = None

    @property
    def ok(self) -> bool:
        return self.state is PipelineState.DONE and self.returncode == 0

    def check(self) -> PipelineOutcome:
        if self.failed_step is not None:
            raise StepFailed(self.failed_step, self.returncode)
        return self


def build_steps(
    config: DeployConfig,
    *,
    check_redirect: bool = False,
    which: Callable[[str], str | None] | None = None,
) -> list[Step]:
    if which is None:
        which = shutil.which

    steps: list[Step] = [
        Step(
            name="build-docs",
            reached=PipelineState.BUILT,
            argv=tuple(build_docs_command(config)),
        ),
        Step(
            name="write-redirect",
            reached=PipelineState.REDIRECTED,
            action=lambda: write_redirect(config.doc_dir, config.redirect_target),
        ),
    ]

    if check_redirect:
        steps.append(
            Step(
                name="check-redirect",
                reached=PipelineState.REDIRECTED,
                action=lambda: check_redirect_target(config.doc_dir, config.redirect_target),
            )
        )

    existing = which(config.publisher_executable)
    steps.append(
        Step(
            name="install-publisher",
            reached=PipelineState.PUBLISHER_READY,
            argv=tuple(install_publisher_command(config)),
            skip_reason=f"{config.publisher_executable} already on PATH ({existing})"
            if existing
            else None,
        )
    )
    steps.append(
        Step(
            name="import-docs",
            reached=PipelineState.IMPORTED,
            argv=tuple(import_command(config)),
        )
    )
    steps.append(
        Step(
            name="push",
            reached=PipelineState.PUSHED,
            argv=tuple(push_command(config)),
        )
    )
    return steps


def _run_command(name: str, argv: tuple[str, ...], runner: Runner) -> int:
    try:
        completed = runner(list(argv), check=False)
    except FileNotFoundError:
        logger.error("Executable not found for step %s: %s", name, argv[0])
        return EXIT_COMMAND_NOT_FOUND
    rc = int(completed.returncode)
    if rc < 0:
        # Killed by signal N: report 128+N like a shell does.
        rc = EXIT_SIGNAL_BASE - rc
    return rc


def _run_action(name: str, action: Callable[[], object]) -> int:
    try:
        action()
    except (OSError, ValueError, DeployError) as exc:
        logger.error("Step %s failed: %s", name, exc)
        return EXIT_ACTION_FAILED
    return 0


def run_pipeline(
    steps: Sequence[Step],
    *,
    runner: Runner | None = None,
    dry_run: bool = False,
) -> PipelineOutcome:
    """Run ``steps`` in order, stopping at the first failure.

    ``runner`` is called as ``runner(argv, check=False)`` and must return an
    object with a ``returncode`` attribute (``subprocess.run`` by default).
    Tool output is not captured; it goes straight to the inherited streams.
    """

    if runner is None:
        runner = subprocess.run

    state = PipelineState.START
    results: list[StepResult] = []

    for step in steps:
        if step.argv is not None:
            logger.info("Command:")
            logger.info("  %s", " ".join(redact_argv(step.argv)))
        else:
            logger.info("Step: %s", step.name)

        if step.skip_reason is not None:
            logger.info("Skipping %s: %s", step.name, step.skip_reason)
            results.append(StepResult(step.name, 0, skipped=True))
            state = step.reached
            continue

        if dry_run:
            results.append(StepResult(step.name, 0, skipped=True))
            state = step.reached
            continue

        if step.argv is not None:
            rc = _run_command(step.name, step.argv, runner)
        else:
            rc = _run_action(step.name, step.action)

        results.append(StepResult(step.name, rc))
        if rc != 0:
            logger.error("Aborting: %s exited with %d (state was %s)", step.name, rc, state.value)
            return PipelineOutcome(
                state=PipelineState.FAILED,
                returncode=rc,
                results=tuple(results),
                failed_step=step.name,
            )
        state = step.reached

    logger.info("Pipeline finished after state %s", state.value)
    return PipelineOutcome(state=PipelineState.DONE, returncode=0, results=tuple(results))
