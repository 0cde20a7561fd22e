"""
Unit tests for the command-line entry point.
"""

import socket

import pytest

from staticserver import __version__
from staticserver.__main__ import build_parser, check_doc_root, main


class TestParser:

    def test_positional_arguments(self):
        args = build_parser().parse_args(["8080", "./www"])

        assert args.port == 8080
        assert args.doc_root == "./www"
        assert args.host == "0.0.0.0"
        assert args.timeout is None
        assert args.log_level == "INFO"

    def test_options(self):
        args = build_parser().parse_args(
            ["9000", "/srv", "--host", "127.0.0.1", "-t", "2.5", "-l", "DEBUG", "-b", "16"]
        )

        assert args.host == "127.0.0.1"
        assert args.timeout == 2.5
        assert args.log_level == "DEBUG"
        assert args.backlog == 16

    @pytest.mark.parametrize("argv", [
        [],
        ["8080"],
        ["http", "./www"],
        ["8080", "./www", "--log-level", "LOUD"],
    ])
    def test_usage_errors(self, argv, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(argv)

        assert exc_info.value.code == 2
        assert "usage:" in capsys.readouterr().err

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out


class TestDocRoot:

    def test_existing_directory(self, doc_root):
        check_doc_root(str(doc_root))

    def test_missing_directory(self, tmp_path, capsys):
        missing = tmp_path / "nope"

        with pytest.raises(SystemExit) as exc_info:
            main(["8080", str(missing)])

        assert exc_info.value.code == 1
        assert f"Document root directory does not exist: {missing}" in capsys.readouterr().err

    def test_file_instead_of_directory(self, doc_root, capsys):
        path = doc_root / "index.html"

        with pytest.raises(SystemExit) as exc_info:
            main(["8080", str(path)])

        assert exc_info.value.code == 1
        assert f"Document root is not a directory: {path}" in capsys.readouterr().err


class TestStartupFailures:

    def test_port_in_use(self, doc_root, capsys):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as blocker:
            blocker.bind(("127.0.0.1", 0))
            blocker.listen(1)
            port = blocker.getsockname()[1]

            with pytest.raises(SystemExit) as exc_info:
                main([str(port), str(doc_root), "--host", "127.0.0.1", "-l", "CRITICAL"])

        assert exc_info.value.code == 1
        assert capsys.readouterr().err.startswith("Error: Failed to bind")

    def test_port_out_of_range(self, doc_root, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["70000", str(doc_root)])

        assert exc_info.value.code == 1
        assert "Error: Invalid port: 70000" in capsys.readouterr().err
