from __future__ import annotations

from pathlib import Path

import pytest

from pages_deploy.redirect import check_redirect_target, redirect_html, write_redirect

EXPECTED = "<meta http-equiv=refresh content=0;url=geo/index.html>\n"


def test_redirect_html_is_fixed_literal() -> None:
    assert redirect_html("geo/index.html") == EXPECTED
    assert redirect_html("geo/index.html") == redirect_html("geo/index.html")


def test_write_redirect_writes_exact_bytes(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("TOKEN", "ignored")
    out = write_redirect(tmp_path, "geo/index.html")
    assert out == tmp_path / "index.html"
    assert out.read_bytes() == EXPECTED.encode("utf-8")


def test_write_redirect_overwrites_existing_index(tmp_path: Path) -> None:
    (tmp_path / "index.html").write_text("<html>old</html>", encoding="utf-8")
    write_redirect(tmp_path, "geo/index.html")
    assert (tmp_path / "index.html").read_text(encoding="utf-8") == EXPECTED


def test_write_redirect_missing_dir_raises(tmp_path: Path) -> None:
    with pytest.raises(OSError):
        write_redirect(tmp_path / "missing", "geo/index.html")


def test_check_redirect_target_resolves_existing_page(tmp_path: Path) -> None:
    page = tmp_path / "geo" / "index.html"
    page.parent.mkdir()
    page.write_text("<html></html>", encoding="utf-8")

    assert check_redirect_target(tmp_path, "geo/index.html") == page.resolve()
    assert check_redirect_target(tmp_path, "geo/index.html#top") == page.resolve()
    assert check_redirect_target(tmp_path, "geo/") == page.resolve()


def test_check_redirect_target_missing_page(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        check_redirect_target(tmp_path, "geo/index.html")


@pytest.mark.parametrize("target", ["/geo/index.html", "file:///etc/passwd", "../outside.html", ""])
def test_check_redirect_target_rejects_unsafe_targets(tmp_path: Path, target: str) -> None:
    with pytest.raises(ValueError):
        check_redirect_target(tmp_path, target)


@pytest.mark.parametrize(
    "target", ["https://docs.rs/geo", "http://example.org/", "mailto:a@b.c", "tel:123"]
)
def test_check_redirect_target_rejects_external_urls(tmp_path: Path, target: str) -> None:
    with pytest.raises(ValueError):
        check_redirect_target(tmp_path, target)
