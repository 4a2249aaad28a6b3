import unittest
from unittest.mock import patch

from vc_history_reader.history.results import VcsError
from vc_history_reader.process.runner import ExecutionResult, ProcessRunner
from vc_history_reader.vcs.svn_client import SVNClient


class TestSVNClient(unittest.TestCase):
    def test_file_content_command(self) -> None:
        client = SVNClient("svn://example.com/repo/")

        runner = client.file_content_command("trunk/a.txt", "17", "cp1252")

        self.assertEqual(runner.command, ["svn", "cat", "svn://example.com/repo/trunk/a.txt@17"])
        self.assertEqual(runner.config.output_charset, "cp1252")

    def test_file_content_success(self) -> None:
        output = ExecutionResult(stdout="first\r\nsecond\r\n", exit_code=0)
        with patch.object(ProcessRunner, "execute", return_value=output):
            result = SVNClient("svn://example.com/repo").log_file_content("a.txt", "3").execute()

        self.assertTrue(result.is_successful)
        self.assertEqual(result.text, "first\r\nsecond")

    def test_file_content_error(self) -> None:
        output = ExecutionResult(stderr="svn: E160013: path not found", exit_code=1)
        with patch.object(ProcessRunner, "execute", return_value=output):
            result = SVNClient("svn://example.com/repo").log_file_content("missing.txt", "3").execute()

        self.assertFalse(result.is_successful)
        self.assertIsInstance(result.exception, VcsError)
        self.assertIn("E160013", str(result.exception))

    def test_describe(self) -> None:
        command = SVNClient("svn://example.com/repo").log_file_content("a.txt", "3")
        self.assertEqual(command.describe(), "svn cat svn://example.com/repo/a.txt@3")


if __name__ == "__main__":
    unittest.main()
