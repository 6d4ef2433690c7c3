from __future__ import annotations

from pages_deploy.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
