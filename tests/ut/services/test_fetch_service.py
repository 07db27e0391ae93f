"""FetchOrchestrator 单元测试"""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from gnock.core.copier import copy_tree
from gnock.core.exceptions import ErrorKind, GnockError, InvalidURLError, RetrievalError
from gnock.core.installer import PackageInstaller
from gnock.services.fetch_service import FetchOrchestrator, FetchState, validate_url


class _TreeFetcher:
    """把预置目录复制到临时目录，并记录临时目录路径"""

    def __init__(self, files: dict[str, str] | None = None, error: Exception | None = None) -> None:
        self.files = files or {}
        self.error = error
        self.scratch: Path | None = None

    def fetch(self, url: str, dest: str | Path) -> None:
        self.scratch = Path(dest)
        assert self.scratch.is_dir()
        if self.error is not None:
            raise self.error
        for rel, content in self.files.items():
            p = self.scratch / rel
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_text(content)


def _orchestrator(tmp_path: Path, fetcher: object) -> FetchOrchestrator:
    installer = PackageInstaller(tmp_path / "gno", examples_dir="examples", manifest_filename="gno.mod")
    return FetchOrchestrator(fetcher, installer, temp_prefix="gnock-test-")  # type: ignore[arg-type]


class TestValidateUrl:
    @pytest.mark.parametrize("url", [
        "github.com/username/repo",
        "github.com/username/repo/sub/dir",
        "https://github.com/username/repo",
        "github.com/username/repo/",
        "/srv/mirror/repo",
    ])
    def test_valid(self, url: str) -> None:
        assert len(validate_url(url)) >= 3

    @pytest.mark.parametrize("url", [
        "invalid-url",
        "github.com/username",
        "https://github.com",
        "github.com//repo",
        "",
    ])
    def test_invalid(self, url: str) -> None:
        with pytest.raises(InvalidURLError) as exc_info:
            validate_url(url)
        assert exc_info.value.kind is ErrorKind.INVALID_URL
        assert exc_info.value.url == url


class TestFetchOrchestrator:
    def test_single_package_at_root(self, tmp_path: Path) -> None:
        fetcher = _TreeFetcher({"gno.mod": "module gno.land/r/demo/mypackage"})
        orch = _orchestrator(tmp_path, fetcher)

        installed = orch.fetch_and_install("github.com/username/repo")

        assert [p.module_path for p in installed] == ["gno.land/r/demo/mypackage"]
        assert (tmp_path / "gno/examples/gno.land/r/demo/mypackage").is_dir()
        assert orch.state is FetchState.DONE
        assert fetcher.scratch is not None
        assert fetcher.scratch.name.startswith("gnock-test-")
        assert not fetcher.scratch.exists()

    def test_complex_structure(self, tmp_path: Path) -> None:
        mock_repo = tmp_path / "mock-repo"
        files = {
            "example_pkg/nested1/foo.gno": "// foo.gno content",
            "example_pkg/nested1/gno.mod": "module gno.land/p/demo/nested1",
            "example_pkg/nested2/bar.gno": "// bar.gno content",
            "example_pkg/nested2/gno.mod": "module gno.land/r/nested2",
        }
        for rel, content in files.items():
            (mock_repo / rel).parent.mkdir(parents=True, exist_ok=True)
            (mock_repo / rel).write_text(content)

        fetcher = MagicMock()
        fetcher.fetch.side_effect = lambda url, dest: copy_tree(mock_repo, dest)

        installed = _orchestrator(tmp_path, fetcher).fetch_and_install("github.com/example/repo")

        assert len(installed) == 2
        examples = tmp_path / "gno" / "examples"
        assert (examples / "gno.land/p/demo/nested1/foo.gno").read_text() == "// foo.gno content"
        assert (examples / "gno.land/r/nested2/bar.gno").read_text() == "// bar.gno content"
        assert (examples / "gno.land/r/nested2/gno.mod").read_text() == "module gno.land/r/nested2"

    def test_invalid_url_has_no_side_effects(self, tmp_path: Path) -> None:
        fetcher = MagicMock()
        orch = _orchestrator(tmp_path, fetcher)

        with pytest.raises(InvalidURLError):
            orch.fetch_and_install("invalid-url")

        fetcher.fetch.assert_not_called()
        assert orch.state is FetchState.FAILED
        assert not (tmp_path / "gno").exists()

    def test_retrieval_error_cleans_scratch(self, tmp_path: Path) -> None:
        fetcher = _TreeFetcher(error=RetrievalError("git clone failed", url="github.com/username/repo"))
        orch = _orchestrator(tmp_path, fetcher)

        with pytest.raises(RetrievalError):
            orch.fetch_and_install("github.com/username/repo")

        assert orch.state is FetchState.FAILED
        assert fetcher.scratch is not None
        assert not fetcher.scratch.exists()
        assert not (tmp_path / "gno").exists()

    def test_install_error_cleans_scratch(self, tmp_path: Path) -> None:
        fetcher = _TreeFetcher({"pkg/gno.mod": "module gno.land /r/bad"})
        orch = _orchestrator(tmp_path, fetcher)

        with pytest.raises(GnockError) as exc_info:
            orch.fetch_and_install("github.com/username/repo")

        assert exc_info.value.kind is ErrorKind.INVALID_DECLARATION
        assert orch.state is FetchState.FAILED
        assert fetcher.scratch is not None
        assert not fetcher.scratch.exists()

    def test_installer_called_with_scratch_and_empty_relpath(self, tmp_path: Path) -> None:
        fetcher = _TreeFetcher()
        installer = MagicMock()
        installer.install.return_value = []

        FetchOrchestrator(fetcher, installer, temp_prefix="gnock-test-").fetch_and_install("a.b/c/d")

        installer.install.assert_called_once_with(str(fetcher.scratch), "")

    def test_repeated_fetch_overwrites(self, tmp_path: Path) -> None:
        fetcher = _TreeFetcher({"gno.mod": "module gno.land/r/demo/x", "x.gno": "v1"})
        orch = _orchestrator(tmp_path, fetcher)
        orch.fetch_and_install("github.com/u/r")
        fetcher.files["x.gno"] = "v2"
        orch.fetch_and_install("github.com/u/r")

        assert (tmp_path / "gno/examples/gno.land/r/demo/x/x.gno").read_text() == "v2"

    def test_no_temp_dirs_left_behind(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        scratch_root = tmp_path / "tmp"
        scratch_root.mkdir()
        monkeypatch.setenv("TMPDIR", str(scratch_root))
        import tempfile
        monkeypatch.setattr(tempfile, "tempdir", None)

        orch = _orchestrator(tmp_path, _TreeFetcher(error=RetrievalError("boom")))
        with pytest.raises(RetrievalError):
            orch.fetch_and_install("github.com/u/r")

        assert os.listdir(scratch_root) == []


class TestUrlNormalization:
    def test_fetcher_receives_stripped_url(self, tmp_path: Path) -> None:
        fetcher = MagicMock()
        _orchestrator(tmp_path, fetcher).fetch_and_install("  github.com/u/r \n")
        assert fetcher.fetch.call_args.args[0] == "github.com/u/r"
