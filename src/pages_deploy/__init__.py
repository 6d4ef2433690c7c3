"""Publish generated API documentation to a GitHub Pages branch.

This package is the CI-side deploy step: build docs, drop a redirect page at the
output root, import the output into ``gh-pages`` and force-push it. Secrets are
read from environment variables only.
"""

__all__: list[str] = [
    "cli",
    "config",
    "errors",
    "pipeline",
    "redirect",
    "remote",
    "report",
    "steps",
    "verify",
]
