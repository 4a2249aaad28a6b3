import unittest
from datetime import datetime, timezone
from types import SimpleNamespace

from vc_history_reader.history.model import NO_FILE_PATH, NO_REVISION, Change, ChangeType, Commit
from vc_history_reader.process.runner import ExecutionResult, ProcessFailure
from vc_history_reader.vcs.renames import RenameResolver, has_potential_renames


def make_commit(revision: str, *changes: Change) -> Commit:
    return Commit(
        revision=revision,
        revision_before="parent",
        commit_date=datetime(2020, 1, 1, tzinfo=timezone.utc),
        author_name="Alice",
        comment="Move file",
        changes=changes,
    )


def deleted(path: str, revision: str = "c1") -> Change:
    return Change(ChangeType.DELETED, NO_FILE_PATH, path, revision, "parent")


def added(path: str, revision: str = "c1") -> Change:
    return Change(ChangeType.NEW, path, NO_FILE_PATH, revision, NO_REVISION)


class FakeCommands:
    """Records the revisions it is asked for and returns canned results."""

    def __init__(self, result: ExecutionResult) -> None:
        self.result = result
        self.revisions = []

    def __call__(self, revision: str):
        self.revisions.append(revision)
        return SimpleNamespace(execute=lambda: self.result, describe=lambda: f"git show {revision}")


class TestRenameResolver(unittest.TestCase):
    def test_candidate_detection(self) -> None:
        self.assertTrue(has_potential_renames(make_commit("c1", deleted("a.py"), added("b.py"))))
        self.assertFalse(has_potential_renames(make_commit("c1", added("b.py"))))
        self.assertFalse(has_potential_renames(make_commit("c1", deleted("a.py"))))

    def test_non_candidate_passes_through(self) -> None:
        commands = FakeCommands(ExecutionResult(exit_code=0))
        commit = make_commit("c1", added("b.py"))

        self.assertIs(RenameResolver(commands).resolve(commit), commit)
        self.assertEqual(commands.revisions, [])

    def test_candidate_changes_are_replaced(self) -> None:
        commands = FakeCommands(ExecutionResult(stdout="\nR090\ta.py\tb.py\n", exit_code=0))
        commit = make_commit("c1", deleted("a.py"), added("b.py"))

        resolved = RenameResolver(commands).resolve(commit)

        self.assertEqual(commands.revisions, ["c1"])
        self.assertEqual(resolved.changes, (Change(ChangeType.MOVED, "b.py", "a.py", "c1", "parent"),))
        self.assertEqual(resolved.revision, commit.revision)
        self.assertEqual(resolved.comment, commit.comment)

    def test_failed_command_keeps_original_changes(self) -> None:
        commit = make_commit("c1", deleted("a.py"), added("b.py"))
        failures = [
            ExecutionResult(stderr="fatal: bad object", exit_code=128),
            ExecutionResult(failure=ProcessFailure("git not found")),
            ExecutionResult(stdout="Z\tnot-a-status", exit_code=0),
        ]
        for result in failures:
            resolved = RenameResolver(FakeCommands(result)).resolve(commit)
            self.assertEqual(resolved.changes, commit.changes)

    def test_resolve_all_in_parallel_preserves_order(self) -> None:
        commands = FakeCommands(ExecutionResult(stdout="R100\told\tnew", exit_code=0))
        commits = [
            make_commit(f"c{i}", deleted("old", f"c{i}"), added("new", f"c{i}")) if i % 2 else make_commit(f"c{i}")
            for i in range(10)
        ]

        resolved = RenameResolver(commands, max_workers=4).resolve_all(commits)

        self.assertEqual([c.revision for c in resolved], [f"c{i}" for i in range(10)])
        self.assertEqual(sorted(commands.revisions), sorted(f"c{i}" for i in range(1, 10, 2)))
        self.assertTrue(all(c.changes[0].type == ChangeType.MOVED for c in resolved[1::2]))

    def test_invalid_worker_count(self) -> None:
        with self.assertRaises(ValueError):
            RenameResolver(FakeCommands(ExecutionResult()), max_workers=0)


if __name__ == "__main__":
    unittest.main()
