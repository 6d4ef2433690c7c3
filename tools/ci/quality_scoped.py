from __future__ import annotations

import subprocess
import sys
from pathlib import Path

TESTS_DIR = "tests"
RUFF_PATHS: list[str] = ["src/pages_deploy", "tests", "tools"]


def _repo_root() -> Path:
    # tools/ci/quality_scoped.py -> tools/ci -> tools -> repo root
    return Path(__file__).resolve().parents[2]


def _run(cmd: list[str], repo_root: Path) -> int:
    print("Command:")
    print("  " + " ".join(cmd))
    completed = subprocess.run(cmd, cwd=str(repo_root), check=False)
    return int(completed.returncode)


def main(argv: list[str] | None = None) -> int:
    _ = argv  # no args
    repo_root = _repo_root()

    if not (repo_root / TESTS_DIR).is_dir():
        print(f"ERROR: Missing test directory: {TESTS_DIR}", file=sys.stderr)
        return 2

    print("Quality: pytest")
    rc = _run([sys.executable, "-m", "pytest", "-q", "--maxfail=1", TESTS_DIR], repo_root)
    if rc != 0:
        return rc

    print("Quality: ruff")
    return _run([sys.executable, "-m", "ruff", "check", *RUFF_PATHS], repo_root)


if __name__ == "__main__":
    raise SystemExit(main())
