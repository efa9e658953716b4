"""Tests for the end-to-end run: changed files → lint → inventory → plan → apply."""

import logging
import types
from unittest.mock import MagicMock

import pytest
from github import GithubException

from erbcop_core.errors import ConfigError
from erbcop_core.models import Finding
from erbcop_core.reconcile import render_inline_body
from erbcop_core.runner import RunSummary, print_shadow_actions, run_lint_review

SHA = "a" * 40
PATCH = "@@ -3,3 +3,4 @@\n a\n+b\n c\n d"  # lines 3-6


def _base_config():
    return {
        "github_token": "tok",
        "linter_command": "erb_lint",
        "include": ["*.erb"],
        "exclude": [],
        "outside_diff": True,
        "failure_exit_code": 109,
    }


def _raw_review(comment_id, body, path, line):
    raw = MagicMock()
    raw.id, raw.body, raw.path, raw.line = comment_id, body, path, line
    return raw


def _setup(mocker, findings, review_comments=(), issue_comments=()):
    mock_pr = MagicMock()
    mock_pr.head.sha = SHA
    mock_pr.get_files.return_value = [
        types.SimpleNamespace(filename="app/views/a.html.erb", status="modified", patch=PATCH),
        types.SimpleNamespace(filename="app/models/user.rb", status="modified", patch=PATCH),
    ]
    mock_pr.get_review_comments.return_value = list(review_comments)
    mock_pr.get_issue_comments.return_value = list(issue_comments)
    mock_pr.create_review_comment.return_value = MagicMock(id=500)
    mock_pr.create_issue_comment.return_value = MagicMock(id=600)
    mock_repo = MagicMock()
    mocker.patch("erbcop_core.runner.get_pull", return_value=mock_pr)
    mock_lint = mocker.patch("erbcop_core.runner.run_linter", return_value=list(findings))
    return mock_repo, mock_pr, mock_lint


class TestRunLintReview:
    def test_lints_only_changed_templates(self, mocker):
        mock_repo, _, mock_lint = _setup(mocker, [])

        run_lint_review("owner/repo", 1, _base_config(), linter_args=["--enable-all-linters"], repo_obj=mock_repo)

        mock_lint.assert_called_once_with(
            ["app/views/a.html.erb"], command="erb_lint", extra_args=["--enable-all-linters"]
        )

    def test_debug_log_counts_indexed_files(self, mocker, caplog):
        mock_repo, _, _ = _setup(mocker, [])

        with caplog.at_level(logging.DEBUG, logger="erbcop_core.runner"):
            run_lint_review("owner/repo", 1, _base_config(), repo_obj=mock_repo)

        assert "1 lintable file(s) changed in owner/repo#1" in caplog.text

    def test_clean_run_exits_zero(self, mocker):
        mock_repo, mock_pr, _ = _setup(mocker, [])

        summary = run_lint_review("owner/repo", 1, _base_config(), repo_obj=mock_repo)

        assert isinstance(summary, RunSummary)
        assert summary.exit_code == 0
        mock_pr.create_review_comment.assert_not_called()
        mock_pr.create_issue_comment.assert_not_called()

    def test_findings_in_diff_are_posted_inline(self, mocker):
        finding = Finding("app/views/a.html.erb", 4, "SpaceAroundErbTag", "Use 1 space")
        mock_repo, mock_pr, _ = _setup(mocker, [finding])

        summary = run_lint_review("owner/repo", 1, _base_config(), repo_obj=mock_repo)

        mock_repo.get_commit.assert_called_once_with(SHA)
        kwargs = mock_pr.create_review_comment.call_args.kwargs
        assert (kwargs["path"], kwargs["line"]) == ("app/views/a.html.erb", 4)
        assert "erb_lint-comment-id: app/views/a.html.erb-4" in kwargs["body"]
        assert summary.exit_code == 109
        assert summary.applied == 1

    def test_findings_outside_diff_go_to_summary_comment(self, mocker):
        finding = Finding("app/views/a.html.erb", 40, "FinalNewline", "Missing newline")
        mock_repo, mock_pr, _ = _setup(mocker, [finding])

        summary = run_lint_review("owner/repo", 1, _base_config(), repo_obj=mock_repo)

        mock_pr.create_review_comment.assert_not_called()
        body = mock_pr.create_issue_comment.call_args.args[0]
        assert "**app/views/a.html.erb:40**" in body
        assert summary.exit_code == 109

    def test_outside_diff_disabled_still_fails(self, mocker):
        finding = Finding("app/views/a.html.erb", 40, "FinalNewline", "Missing newline")
        mock_repo, mock_pr, _ = _setup(mocker, [finding])
        config = {**_base_config(), "outside_diff": False, "failure_exit_code": 3}

        summary = run_lint_review("owner/repo", 1, config, repo_obj=mock_repo)

        mock_pr.create_issue_comment.assert_not_called()
        assert summary.exit_code == 3

    def test_resolved_comment_is_deleted(self, mocker):
        finding = Finding("app/views/a.html.erb", 4, "Foo", "bad")
        stale = _raw_review(42, render_inline_body("app/views/a.html.erb", 4, [finding]), "app/views/a.html.erb", 4)
        mock_repo, _, _ = _setup(mocker, [], review_comments=[stale])

        summary = run_lint_review("owner/repo", 1, _base_config(), repo_obj=mock_repo)

        stale.delete.assert_called_once_with()
        assert summary.exit_code == 0

    def test_unchanged_comment_is_left_alone(self, mocker):
        finding = Finding("app/views/a.html.erb", 4, "Foo", "bad")
        current = _raw_review(42, render_inline_body("app/views/a.html.erb", 4, [finding]), "app/views/a.html.erb", 4)
        mock_repo, mock_pr, _ = _setup(mocker, [finding], review_comments=[current])

        summary = run_lint_review("owner/repo", 1, _base_config(), repo_obj=mock_repo)

        current.edit.assert_not_called()
        current.delete.assert_not_called()
        mock_pr.create_review_comment.assert_not_called()
        assert summary.plan.actions == []
        assert summary.exit_code == 109

    def test_shadow_mode_does_not_post(self, mocker):
        finding = Finding("app/views/a.html.erb", 4, "Foo", "bad")
        mock_repo, mock_pr, _ = _setup(mocker, [finding])

        summary = run_lint_review("owner/repo", 1, _base_config(), shadow=True, repo_obj=mock_repo)

        mock_pr.create_review_comment.assert_not_called()
        assert summary.applied == 0
        assert len(summary.plan.actions) == 1
        assert summary.exit_code == 109

    def test_event_head_sha_is_used_when_given(self, mocker):
        finding = Finding("app/views/a.html.erb", 4, "Foo", "bad")
        mock_repo, _, _ = _setup(mocker, [finding])

        summary = run_lint_review("owner/repo", 1, _base_config(), head_sha="b" * 40, repo_obj=mock_repo)

        mock_repo.get_commit.assert_called_once_with("b" * 40)
        assert summary.head_sha == "b" * 40

    def test_missing_pr_raises_config_error(self, mocker):
        mocker.patch("erbcop_core.runner.get_pull", side_effect=GithubException(404, {"message": "Not Found"}, None))
        with pytest.raises(ConfigError, match="#7"):
            run_lint_review("owner/repo", 7, _base_config(), repo_obj=MagicMock())

    def test_api_error_while_applying_propagates(self, mocker):
        finding = Finding("app/views/a.html.erb", 4, "Foo", "bad")
        mock_repo, mock_pr, _ = _setup(mocker, [finding])
        mock_pr.create_review_comment.side_effect = GithubException(422, {"message": "Validation Failed"}, None)

        with pytest.raises(GithubException):
            run_lint_review("owner/repo", 1, _base_config(), repo_obj=mock_repo)


class TestPrintShadowActions:
    def test_reports_up_to_date(self, capsys):
        from erbcop_core.reconcile import Plan

        print_shadow_actions(Plan())
        assert "already up to date" in capsys.readouterr().out
