"""Tests for building a single branch folder."""

import os

import pytest

from branchmirror.git.backend import CommandContext, MirrorCancelled
from branchmirror.mirror.materializer import (
    BranchMaterializer,
    BranchState,
    lock_path_for,
)
from branchmirror.naming import disambiguate_folder_name
from tests.helpers import RecordingBackend

URL = "git@github.com:owner/repo.git"


def _visible(path):
    return sorted(p.name for p in path.iterdir() if not p.name.startswith("."))


class TestMaterialize:
    @pytest.mark.short
    def test_creates_checked_out_folder(self, tmp_path):
        backend = RecordingBackend()

        result = BranchMaterializer(backend).materialize(URL, "main", tmp_path)

        assert result.state is BranchState.DONE
        assert result.path == tmp_path / "main"
        assert (tmp_path / "main" / "BRANCH").read_text() == "main"
        assert [call[0] for call in backend.calls] == [
            "init",
            "list_remotes",
            "add_remote",
            "fetch",
            "checkout",
        ]
        assert backend.checked_out() == ["main"]

    @pytest.mark.short
    def test_sanitizes_folder_but_checks_out_real_branch(self, tmp_path):
        backend = RecordingBackend()

        result = BranchMaterializer(backend).materialize(URL, "feature/x", tmp_path)

        assert result.path == tmp_path / "feature_x"
        assert backend.checked_out() == ["feature/x"]
        assert _visible(tmp_path) == ["feature_x"]

    @pytest.mark.short
    def test_explicit_folder_name(self, tmp_path):
        result = BranchMaterializer(RecordingBackend()).materialize(
            URL, "feat:a", tmp_path, folder_name="feat_a__1234"
        )
        assert result.path == tmp_path / "feat_a__1234"
        assert result.path.exists()

    @pytest.mark.short
    def test_creates_missing_parent(self, tmp_path):
        parent = tmp_path / "deep" / "er"
        result = BranchMaterializer(RecordingBackend()).materialize(URL, "main", parent)
        assert result.state is BranchState.DONE
        assert (parent / "main").is_dir()

    @pytest.mark.short
    @pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
    def test_folder_mode_follows_umask(self, tmp_path):
        umask = os.umask(0)
        os.umask(umask)

        result = BranchMaterializer(RecordingBackend()).materialize(URL, "main", tmp_path)

        assert result.path.stat().st_mode & 0o777 == 0o777 & ~umask

    @pytest.mark.short
    def test_lock_file_removed_after_checkout(self, tmp_path):
        result = BranchMaterializer(RecordingBackend()).materialize(URL, "main", tmp_path)

        assert result.state is BranchState.DONE
        assert not lock_path_for(result.path).exists()
        assert [p.name for p in tmp_path.iterdir()] == ["main"]


class TestFoldersFromEarlierRuns:
    @staticmethod
    def _existing_checkout(path, branch):
        (path / ".git").mkdir(parents=True)
        (path / ".git" / "HEAD").write_text(f"ref: refs/heads/{branch}\n")

    @pytest.mark.short
    def test_folder_of_other_branch_is_not_reused(self, tmp_path, caplog):
        self._existing_checkout(tmp_path / "feat_a", "feat|a")
        backend = RecordingBackend()

        result = BranchMaterializer(backend).materialize(URL, "feat/a", tmp_path)

        assert result.state is BranchState.DONE
        assert result.path == tmp_path / disambiguate_folder_name("feat_a", "feat/a")
        assert (result.path / "BRANCH").read_text() == "feat/a"
        assert backend.checked_out() == ["feat/a"]
        assert "collides" in caplog.text

    @pytest.mark.short
    def test_branch_found_in_its_plain_folder(self, tmp_path):
        self._existing_checkout(tmp_path / "feat_a", "feat|a")
        backend = RecordingBackend()

        # A later run hands feat|a the suffixed folder because feat/a is listed first
        result = BranchMaterializer(backend).materialize(
            URL,
            "feat|a",
            tmp_path,
            folder_name=disambiguate_folder_name("feat_a", "feat|a"),
        )

        assert result.state is BranchState.SKIPPED
        assert result.path == tmp_path / "feat_a"
        assert backend.calls == []

    @pytest.mark.short
    def test_branch_found_in_its_suffixed_folder(self, tmp_path):
        self._existing_checkout(tmp_path / "feat_a", "feat|a")
        suffixed = tmp_path / disambiguate_folder_name("feat_a", "feat/a")
        self._existing_checkout(suffixed, "feat/a")
        backend = RecordingBackend()

        result = BranchMaterializer(backend).materialize(URL, "feat/a", tmp_path)

        assert result.state is BranchState.SKIPPED
        assert result.path == suffixed
        assert backend.calls == []

    @pytest.mark.short
    def test_detached_head_folder_is_skipped(self, tmp_path):
        (tmp_path / "main" / ".git").mkdir(parents=True)
        (tmp_path / "main" / ".git" / "HEAD").write_text("0" * 40 + "\n")
        backend = RecordingBackend()

        result = BranchMaterializer(backend).materialize(URL, "main", tmp_path)

        assert result.state is BranchState.SKIPPED
        assert result.path == tmp_path / "main"
        assert backend.calls == []


class TestSkipExisting:
    @pytest.mark.short
    def test_existing_folder_is_untouched(self, tmp_path):
        existing = tmp_path / "main"
        existing.mkdir()
        (existing / "notes.txt").write_bytes(b"local edits\x00")
        backend = RecordingBackend()

        result = BranchMaterializer(backend).materialize(URL, "main", tmp_path)

        assert result.state is BranchState.SKIPPED
        assert backend.calls == []
        assert [p.name for p in existing.iterdir()] == ["notes.txt"]
        assert (existing / "notes.txt").read_bytes() == b"local edits\x00"

    @pytest.mark.short
    def test_existing_sanitized_folder_is_skipped(self, tmp_path):
        (tmp_path / "feature_x").mkdir()
        backend = RecordingBackend()

        result = BranchMaterializer(backend).materialize(URL, "feature/x", tmp_path)

        assert result.state is BranchState.SKIPPED
        assert backend.calls == []
        assert not lock_path_for(tmp_path / "feature_x").exists()

    @pytest.mark.short
    def test_second_run_is_skipped(self, tmp_path):
        backend = RecordingBackend()
        materializer = BranchMaterializer(backend)

        materializer.materialize(URL, "main", tmp_path)
        calls_after_first = len(backend.calls)
        result = materializer.materialize(URL, "main", tmp_path)

        assert result.state is BranchState.SKIPPED
        assert len(backend.calls) == calls_after_first

    @pytest.mark.short
    def test_skip_is_logged(self, tmp_path, capture_logs):
        (tmp_path / "main").mkdir()

        BranchMaterializer(RecordingBackend()).materialize(URL, "main", tmp_path)

        assert "already exists" in capture_logs.getvalue()


class TestFailure:
    @pytest.mark.short
    def test_failure_is_reported_not_raised(self, tmp_path, caplog):
        backend = RecordingBackend(failing_checkouts=["gone"])

        result = BranchMaterializer(backend).materialize(URL, "gone", tmp_path)

        assert result.state is BranchState.FAILED
        assert "did not match" in result.error
        assert "Error cloning branch gone" in caplog.text

    @pytest.mark.short
    def test_failure_leaves_no_folder_behind(self, tmp_path):
        backend = RecordingBackend(failing_checkouts=["gone"])

        BranchMaterializer(backend).materialize(URL, "gone", tmp_path)

        assert _visible(tmp_path) == []
        assert not any(p.name.endswith(".partial") for p in tmp_path.iterdir())

    @pytest.mark.short
    def test_failed_branch_is_retried_next_run(self, tmp_path):
        backend = RecordingBackend(failing_checkouts=["flaky"])
        materializer = BranchMaterializer(backend)

        first = materializer.materialize(URL, "flaky", tmp_path)
        backend.failing_checkouts.clear()
        second = materializer.materialize(URL, "flaky", tmp_path)

        assert first.state is BranchState.FAILED
        assert second.state is BranchState.DONE
        assert (tmp_path / "flaky" / "BRANCH").read_text() == "flaky"


class TestCancellation:
    @pytest.mark.short
    def test_cancellation_propagates_and_cleans_up(self, tmp_path):
        ctx = CommandContext()

        class CancelDuringFetch(RecordingBackend):
            def fetch(self, path, ctx):
                super().fetch(path, ctx)
                ctx.cancel()

        with pytest.raises(MirrorCancelled):
            BranchMaterializer(CancelDuringFetch()).materialize(
                URL, "main", tmp_path, ctx=ctx
            )

        assert _visible(tmp_path) == []
        assert not any(p.name.endswith(".partial") for p in tmp_path.iterdir())
