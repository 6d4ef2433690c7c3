from __future__ import annotations

import enum
import sys
from collections.abc import Callable
from dataclasses import dataclass

from pages_deploy.config import DeployConfig
from pages_deploy.remote import push_url


class PipelineState(enum.Enum):
    START = "start"
    BUILT = "built"
    REDIRECTED = "redirected"
    PUBLISHER_READY = "publisher_ready"
    IMPORTED = "imported"
    PUSHED = "pushed"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class Step:
    """One pipeline stage: an external command or an in-process action.

    Exactly one of ``argv`` and ``action`` is set. ``skip_reason`` marks a step
    that counts as successful without running (e.g. publisher already present).
    """

    name: str
    reached: PipelineState
    argv: tuple[str, ...] | None = None
    action: Callable[[], object] | None = None
    skip_reason: str | None = None

    def __post_init__(self) -> None:
        if (self.argv is None) == (self.action is None):
            raise ValueError(f"Step {self.name!r} needs exactly one of argv or action")


@dataclass(frozen=True)
class StepResult:
    name: str
    returncode: int
    skipped: bool = False


def build_docs_command(config: DeployConfig) -> list[str]:
    return list(config.doc_command)


def install_publisher_command(config: DeployConfig) -> list[str]:
    cmd = [sys.executable, "-m", "pip", "install", config.publisher_package]
    if config.use_sudo:
        cmd.insert(0, "sudo")
    return cmd


def import_command(config: DeployConfig) -> list[str]:
    # -n writes .nojekyll so underscore-prefixed rustdoc assets are served.
    return [
        config.publisher_executable,
        "-n",
        "--no-history",
        "-b",
        config.branch,
        config.doc_dir,
    ]


def push_command(config: DeployConfig) -> list[str]:
    flags = "-qf" if config.quiet_push else "-f"
    return [
        "git",
        "push",
        flags,
        push_url(config.token, config.repo_slug, config.host),
        config.branch,
    ]
