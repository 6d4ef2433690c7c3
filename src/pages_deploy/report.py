from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pages_deploy.config import DeployConfig
from pages_deploy.pipeline import PipelineOutcome
from pages_deploy.remote import push_url, redact_url

REPORT_SCHEMA_VERSION = "1.0.0"


def build_run_report(outcome: PipelineOutcome, config: DeployConfig) -> dict[str, Any]:
    # Only the redacted remote ever leaves the process.
    return {
        "schema_version": REPORT_SCHEMA_VERSION,
        "state": outcome.state.value,
        "returncode": outcome.returncode,
        "failed_step": outcome.failed_step,
        "branch": config.branch,
        "doc_dir": config.doc_dir,
        "redirect_target": config.redirect_target,
        "remote": redact_url(push_url(config.token, config.repo_slug, config.host)),
        "steps": [
            {"name": r.name, "returncode": r.returncode, "skipped": r.skipped}
            for r in outcome.results
        ],
    }


def write_run_report(path: str | Path, outcome: PipelineOutcome, config: DeployConfig) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(
        json.dumps(build_run_report(outcome, config), indent=2, sort_keys=True, ensure_ascii=False)
        + "\n",
        encoding="utf-8",
        newline="\n",
    )
    return p
