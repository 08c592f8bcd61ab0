import subprocess
import unittest
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

from vc_changelog.grouping.group_model import CommitAuthor
from vc_changelog.vcs.git_client import (
    FIELD_SEP,
    RECORD_SEP,
    GitClient,
    GitError,
    commit_url_template_from_remote,
    parse_git_tag,
)


class DummyProc(SimpleNamespace):
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""


def log_record(sha, author, email, message, timestamp="2024-05-01T10:00:00+00:00"):
    return FIELD_SEP.join([sha, author, email, author, email, timestamp, message]) + RECORD_SEP


class TestGitClient(unittest.TestCase):
    def test_get_commits_parses_log(self) -> None:
        output = (
            log_record("a" * 40, "Jane", "jane@example.com", "feat(api): add endpoint\n\nBody line\n")
            + "\n"
            + log_record("b" * 40, "", "", "fix: x\n")
            + "\n"
        )
        calls = []

        def fake_run(self, args, check=True):
            calls.append(args)
            return DummyProc(returncode=0, stdout=output, stderr="")

        with patch.object(GitClient, "_run", autospec=True) as mock_run:
            mock_run.side_effect = fake_run
            client = GitClient(Path("/repo"), commit_url_template="https://github.com/o/r/commit/{sha}")
            commits = client.get_commits("v1.0.0", "v1.1.0")

        self.assertEqual(calls[0][0], "log")
        self.assertIn("--reverse", calls[0])
        self.assertEqual(calls[0][-1], "v1.0.0..v1.1.0")
        self.assertEqual(len(commits), 2)
        first, second = commits
        self.assertEqual(first.sha, "a" * 40)
        self.assertEqual(first.message, "feat(api): add endpoint\n\nBody line")
        self.assertEqual(first.author, CommitAuthor(name="Jane", email="jane@example.com"))
        self.assertEqual(first.timestamp, "2024-05-01T10:00:00+00:00")
        self.assertEqual(first.url, "https://github.com/o/r/commit/" + "a" * 40)
        self.assertIsNone(second.author)

    def run_with(self, log_output, remote=None):
        """Build a fake ``_run`` answering ``git log`` and ``git remote get-url``."""

        def fake_run(self, args, check=True):
            if args[0] == "remote":
                if remote is None:
                    return DummyProc(returncode=2, stdout="", stderr="error: No such remote 'origin'")
                return DummyProc(stdout=remote + "\n")
            return DummyProc(stdout=log_output)

        return fake_run

    def test_get_commits_url_from_origin_remote(self) -> None:
        output = log_record("c" * 40, "Jane", "j@x", "chore: y")
        with patch.object(GitClient, "_run", autospec=True) as mock_run:
            mock_run.side_effect = self.run_with(output, remote="git@github.com:octo/app.git")
            commits = GitClient(Path("/repo")).get_commits("v1")
        self.assertEqual(commits[0].url, "https://github.com/octo/app/commit/" + "c" * 40)

    def test_get_commits_without_url_template_or_remote(self) -> None:
        output = log_record("c" * 40, "Jane", "j@x", "chore: y")
        with patch.object(GitClient, "_run", autospec=True) as mock_run:
            mock_run.side_effect = self.run_with(output)
            with self.assertLogs("vc_changelog.vcs.git_client", level="WARNING"):
                commits = GitClient(Path("/repo")).get_commits("v1")
        self.assertEqual(commits[0].url, "")

    def test_configured_template_skips_remote_lookup(self) -> None:
        output = log_record("c" * 40, "Jane", "j@x", "chore: y")
        with patch.object(GitClient, "_run", autospec=True) as mock_run:
            mock_run.side_effect = self.run_with(output, remote="git@github.com:octo/app.git")
            GitClient(Path("/repo"), commit_url_template="https://x/{sha}").get_commits("v1")
        self.assertEqual(mock_run.call_count, 1)

    def test_message_containing_field_separator_is_kept(self) -> None:
        output = log_record("a" * 40, "Jane", "j@x", f"feat: table\n\ncol1{FIELD_SEP}col2\n") + log_record(
            "b" * 40, "Jane", "j@x", "fix: y"
        )
        with patch.object(GitClient, "_run", autospec=True) as mock_run:
            mock_run.side_effect = self.run_with(output, remote="https://github.com/octo/app")
            commits = GitClient(Path("/repo")).get_commits("v1")
        self.assertEqual([c.sha for c in commits], ["a" * 40, "b" * 40])
        self.assertEqual(commits[0].message, f"feat: table\n\ncol1{FIELD_SEP}col2")

    def test_malformed_record_is_reported(self) -> None:
        output = FIELD_SEP.join(["a" * 40, "Jane"]) + RECORD_SEP + log_record("b" * 40, "Jane", "j@x", "fix: y")
        with patch.object(GitClient, "_run", autospec=True) as mock_run:
            mock_run.side_effect = self.run_with(output, remote="https://github.com/octo/app")
            with self.assertLogs("vc_changelog.vcs.git_client", level="WARNING") as logs:
                commits = GitClient(Path("/repo")).get_commits("v1")
        self.assertEqual([c.sha for c in commits], ["b" * 40])
        self.assertIn("malformed git log record", logs.output[0])

    def test_get_commits_empty_range(self) -> None:
        with patch.object(GitClient, "_run", return_value=DummyProc(stdout="")) as mock_run:
            self.assertEqual(GitClient(Path("/repo")).get_commits("v1", "v1"), [])
        self.assertEqual(mock_run.call_count, 1)

    def test_run_raises_on_failure(self) -> None:
        failed = subprocess.CompletedProcess(
            args=["git"], returncode=128, stdout="", stderr="fatal: bad revision 'nope..HEAD'"
        )
        with patch("vc_changelog.vcs.git_client.subprocess.run", return_value=failed):
            with self.assertRaises(GitError) as ctx:
                GitClient(Path("/repo")).get_commits("nope")
        self.assertIn("bad revision", str(ctx.exception))

    def test_run_without_git_executable(self) -> None:
        with patch("vc_changelog.vcs.git_client.subprocess.run", side_effect=FileNotFoundError("git")):
            with self.assertRaises(GitError):
                GitClient(Path("/repo")).get_commits("v1")

    def test_find_repo_root(self) -> None:
        with patch("pathlib.Path.exists", lambda self: self == Path("/work/repo/.git")):
            with patch("pathlib.Path.resolve", lambda self: self):
                self.assertEqual(GitClient.find_repo_root(Path("/work/repo/src/pkg")), Path("/work/repo"))
                self.assertIsNone(GitClient.find_repo_root(Path("/elsewhere")))


class TestParseGitTag(unittest.TestCase):
    def test_tag_refs(self) -> None:
        cases = [
            ("refs/tags/v1.2.0", "v1.2.0"),
            ("tags/v1.2.0", "v1.2.0"),
            ("refs/tags/release/2024", "release/2024"),
            ("refs/heads/main", ""),
            ("refs/tags/", ""),
            ("v1.2.0", ""),
        ]
        for ref, expected in cases:
            with self.subTest(ref=ref):
                self.assertEqual(parse_git_tag(ref), expected)


class TestCommitUrlTemplateFromRemote(unittest.TestCase):
    def test_remote_forms(self) -> None:
        cases = [
            ("https://github.com/octo/app.git", "https://github.com/octo/app/commit/{sha}"),
            ("https://github.com/octo/app", "https://github.com/octo/app/commit/{sha}"),
            ("https://token:x@github.com/octo/app.git", "https://github.com/octo/app/commit/{sha}"),
            ("git@github.com:octo/app.git", "https://github.com/octo/app/commit/{sha}"),
            ("ssh://git@gitlab.example.com/group/sub/app.git", "https://gitlab.example.com/group/sub/app/commit/{sha}"),
            ("/srv/git/app.git", None),
            ("", None),
        ]
        for remote, expected in cases:
            with self.subTest(remote=remote):
                self.assertEqual(commit_url_template_from_remote(remote), expected)


if __name__ == "__main__":
    unittest.main()
