"""Version-control facts for the snapshot, read from the local git checkout."""

import subprocess
from pathlib import Path
from typing import Optional


class GitInfo:
    """
    Head commit, branch and browse URL of a git checkout.

    Each fact is looked up once and cached. When git is not installed or the
    directory is not a checkout, every fact is None.
    """

    def __init__(self, repo_dir: Optional[str] = None, view_url_template: Optional[str] = None):
        """
        Args:
            repo_dir: Directory inside the checkout (defaults to the working directory)
            view_url_template: Commit URL with ``{sha}`` and optionally ``{branch}``
                placeholders, e.g. "https://github.com/org/repo/commit/{sha}"
        """
        self.repo_dir = Path(repo_dir) if repo_dir else Path.cwd()
        self.view_url_template = view_url_template
        self._cache = {}

    def _git(self, *args: str) -> Optional[str]:
        if args in self._cache:
            return self._cache[args]

        try:
            result = subprocess.run(
                ["git", *args],
                cwd=str(self.repo_dir),
                capture_output=True,
                text=True,
                check=True,
                timeout=5,
            )
            value = result.stdout.strip() or None
        except (OSError, subprocess.SubprocessError):
            value = None

        self._cache[args] = value
        return value

    def head_sha1(self) -> Optional[str]:
        return self._git("rev-parse", "HEAD")

    def current_branch(self) -> Optional[str]:
        """Branch name, or the head commit when HEAD is detached."""
        branch = self._git("rev-parse", "--abbrev-ref", "HEAD")
        if branch == "HEAD":
            return self.head_sha1()
        return branch

    def head_view_url(self) -> Optional[str]:
        sha = self.head_sha1()
        if not sha or not self.view_url_template:
            return None
        return self.view_url_template.format(sha=sha, branch=self.current_branch() or "")
