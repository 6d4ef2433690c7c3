"""Root redirect page for the generated docs.

The docs generator writes one directory per crate and no top-level index, so
the Pages site root gets a meta-refresh page pointing at the crate entry page.
The content is a fixed literal (no timestamps, no templating beyond the target).
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath

INDEX_NAME = "index.html"

_EXTERNAL_PREFIXES = ("http://", "https://", "mailto:", "tel:", "file://")


def redirect_html(target: str) -> str:
    return f"<meta http-equiv=refresh content=0;url={target}>\n"


def write_redirect(out_dir: str | Path, target: str) -> Path:
    out_path = Path(out_dir) / INDEX_NAME
    with out_path.open("w", encoding="utf-8", newline="\n") as f:
        f.write(redirect_html(target))
    return out_path


def _strip_fragment_and_query(url: str) -> str:
    u = url
    if "#" in u:
        u = u.split("#", 1)[0]
    if "?" in u:
        u = u.split("?", 1)[0]
    return u


def check_redirect_target(out_dir: str | Path, target: str) -> Path:
    """Resolve the redirect target inside ``out_dir``.

    Returns the resolved file. Raises ``FileNotFoundError`` when the target is
    missing and ``ValueError`` when it is an absolute URL or path, or escapes
    ``out_dir``.
    """

    t = target.strip()
    if not t:
        raise ValueError("Redirect target is empty")
    if t.startswith("/") or t.lower().startswith(_EXTERNAL_PREFIXES):
        raise ValueError(f"Redirect target must be relative to the docs root: {target!r}")

    root = Path(out_dir).resolve()
    rel = PurePosixPath(_strip_fragment_and_query(t))
    resolved = (root / Path(*rel.parts)).resolve()
    try:
        resolved.relative_to(root)
    except ValueError as exc:
        raise ValueError(f"Redirect target escapes the docs root: {target!r}") from exc

    if resolved.is_dir():
        resolved = resolved / INDEX_NAME
    if not resolved.is_file():
        raise FileNotFoundError(f"Redirect target not found in {root}: {target}")
    return resolved
