from __future__ import annotations

import logging
from collections.abc import Iterable

from github import Github

from erbcop_core.diff import changed_lines_from_patch
from erbcop_core.models import ChangedFile, Comment
from erbcop_core.utils.paths import is_lint_target

logger = logging.getLogger(__name__)


def get_repo(repo_name: str, token: str):
    return Github(token).get_repo(repo_name)


def get_pull(repo, pr_number: int):
    return repo.get_pull(pr_number)


def get_changed_files(pr, include: Iterable[str] = ("*.erb",), exclude: Iterable[str] = ()) -> list[ChangedFile]:
    """Return the lintable files of a pull request with the lines GitHub can comment on.

    Removed files are dropped: there is nothing left on disk to lint.
    """
    include, exclude = list(include), list(exclude)
    changed = []
    for file in pr.get_files():
        if file.status == "removed" or not is_lint_target(file.filename, include, exclude):
            continue
        changed.append(
            ChangedFile(path=file.filename, changed_lines=changed_lines_from_patch(file.patch))
        )
    return changed


def _review_comment(raw) -> Comment:
    return Comment(id=raw.id, body=raw.body or "", path=raw.path, line=raw.line)


def _issue_comment(raw) -> Comment:
    return Comment(id=raw.id, body=raw.body or "")


class PullRequestComments:
    """Reads and writes the comments of one pull request.

    ``fetch`` remembers the PyGithub objects it returned so that every later
    edit or delete costs exactly one API request.
    """

    def __init__(self, repo, pr):
        self._repo = repo
        self._pr = pr
        self._review_handles: dict[int, object] = {}
        self._issue_handles: dict[int, object] = {}
        self._commits: dict[str, object] = {}

    def fetch(self) -> tuple[list[Comment], list[Comment]]:
        """Return fresh (review comments, issue comments) for the pull request."""
        review_raw = list(self._pr.get_review_comments())
        issue_raw = list(self._pr.get_issue_comments())
        self._review_handles = {c.id: c for c in review_raw}
        self._issue_handles = {c.id: c for c in issue_raw}
        logger.debug("Fetched %d review comments and %d issue comments", len(review_raw), len(issue_raw))
        return [_review_comment(c) for c in review_raw], [_issue_comment(c) for c in issue_raw]

    def create_review_comment(self, path: str, line: int, body: str, commit_sha: str) -> int:
        commit = self._commits.get(commit_sha)
        if commit is None:
            commit = self._commits[commit_sha] = self._repo.get_commit(commit_sha)
        created = self._pr.create_review_comment(body=body, commit=commit, path=path, line=line)
        self._review_handles[created.id] = created
        return created.id

    def update_review_comment(self, comment_id: int, body: str) -> None:
        self._review_handles[comment_id].edit(body)

    def delete_review_comment(self, comment_id: int) -> None:
        self._review_handles.pop(comment_id).delete()

    def create_issue_comment(self, body: str) -> int:
        created = self._pr.create_issue_comment(body)
        self._issue_handles[created.id] = created
        return created.id

    def update_issue_comment(self, comment_id: int, body: str) -> None:
        self._issue_handles[comment_id].edit(body)

    def delete_issue_comment(self, comment_id: int) -> None:
        self._issue_handles.pop(comment_id).delete()
