from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

from pages_deploy.errors import ConfigError
from pages_deploy.remote import DEFAULT_HOST

DEFAULT_BRANCH = "gh-pages"
DEFAULT_DOC_DIR = "target/doc"
DEFAULT_DOC_COMMAND: tuple[str, ...] = ("cargo", "doc")
DEFAULT_REDIRECT_TARGET = "geo/index.html"
DEFAULT_PUBLISHER_PACKAGE = "ghp-import"

TOKEN_VAR = "TOKEN"
SLUG_VARS: tuple[str, ...] = ("TRAVIS_REPO_SLUG", "GITHUB_REPOSITORY")


@dataclass(frozen=True, slots=True)
class DeployConfig:
    token: str
    repo_slug: str
    host: str = DEFAULT_HOST
    branch: str = DEFAULT_BRANCH
    doc_dir: str = DEFAULT_DOC_DIR
    doc_command: tuple[str, ...] = DEFAULT_DOC_COMMAND
    redirect_target: str = DEFAULT_REDIRECT_TARGET
    publisher_package: str = DEFAULT_PUBLISHER_PACKAGE
    publisher_executable: str = "ghp-import"
    use_sudo: bool = False
    quiet_push: bool = True

    def __repr__(self) -> str:
        # Keep the token out of tracebacks and debug logs.
        return (
            f"DeployConfig(repo_slug={self.repo_slug!r}, host={self.host!r}, "
            f"branch={self.branch!r}, doc_dir={self.doc_dir!r})"
        )


def _env(environ: Mapping[str, str], name: str, default: str | None = None) -> str | None:
    value = environ.get(name)
    if value is None or value == "":
        return default
    return value


def _env_bool(environ: Mapping[str, str], name: str, default: bool = False) -> bool:
    raw = _env(environ, name)
    if raw is None:
        return default
    raw_norm = raw.strip().lower()
    if raw_norm in {"1", "true", "t", "yes", "y", "on"}:
        return True
    if raw_norm in {"0", "false", "f", "no", "n", "off"}:
        return False
    return default


def load_config_from_env(
    environ: Mapping[str, str] | None = None,
    **overrides: Any,
) -> DeployConfig:
    """Build a :class:`DeployConfig` from environment variables.

    Required:
      - ``TOKEN``: credential interpolated into the push URL.
      - ``TRAVIS_REPO_SLUG`` (or ``GITHUB_REPOSITORY``): ``owner/repo``.

    Optional:
      - ``PAGES_DEPLOY_HOST``, ``PAGES_DEPLOY_BRANCH``, ``PAGES_DEPLOY_SUDO``.

    Keyword overrides (typically from the CLI) win over the environment; ``None``
    values are ignored so unset CLI flags fall through.
    """

    if environ is None:
        environ = os.environ

    token = _env(environ, TOKEN_VAR)
    slug = None
    for name in SLUG_VARS:
        slug = _env(environ, name)
        if slug:
            break

    missing: list[str] = []
    if not token:
        missing.append(TOKEN_VAR)
    if not slug:
        missing.append(" or ".join(SLUG_VARS))

    if missing:
        raise ConfigError(
            "Missing required deploy environment variables: " + ", ".join(missing)
        )

    config = DeployConfig(
        token=str(token),
        repo_slug=str(slug).strip().strip("/"),
        host=_env(environ, "PAGES_DEPLOY_HOST", DEFAULT_HOST) or DEFAULT_HOST,
        branch=_env(environ, "PAGES_DEPLOY_BRANCH", DEFAULT_BRANCH) or DEFAULT_BRANCH,
        use_sudo=_env_bool(environ, "PAGES_DEPLOY_SUDO", default=False),
    )

    applied = {k: v for k, v in overrides.items() if v is not None}
    if "doc_command" in applied:
        applied["doc_command"] = tuple(applied["doc_command"])
        if not applied["doc_command"]:
            raise ConfigError("Documentation command must not be empty")
    if "repo_slug" in applied and "/" not in str(applied["repo_slug"]):
        raise ConfigError(f"Repository slug must be owner/repo, got {applied['repo_slug']!r}")

    return replace(config, **applied)
