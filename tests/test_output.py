"""Tests for output.py - Verbosity filtering and colour."""

from skillctl.output import MessageType, OutputManager, VerbosityLevel


class TestOutputManager:

    def test_filters_by_verbosity(self, capsys):
        output = OutputManager(verbosity=0)
        output.message("shown", MessageType.NORMAL, VerbosityLevel.ALWAYS)
        output.message("hidden", MessageType.INFO, VerbosityLevel.VERBOSE)
        assert capsys.readouterr().out == "shown\n"

    def test_verbose_shows_more(self, capsys):
        output = OutputManager(verbosity=1)
        output.message("detail", MessageType.INFO, VerbosityLevel.VERBOSE)
        output.message("trace", MessageType.DEBUG, VerbosityLevel.DEBUG)
        assert capsys.readouterr().out == "detail\n"

    def test_warnings_and_errors_go_to_stderr(self, capsys):
        output = OutputManager()
        output.message("careful", MessageType.WARNING)
        output.message("broken", MessageType.ERROR)
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == "careful\nbroken\n"

    def test_color_only_when_enabled(self):
        assert OutputManager(use_color=False).format("ok", MessageType.SUCCESS) == "ok"
        colored = OutputManager(use_color=True).format("ok", MessageType.SUCCESS)
        assert colored.startswith("\033[32m")
        assert colored.endswith("\033[0m")

    def test_normal_text_is_never_colored(self):
        assert OutputManager(use_color=True).format("plain", MessageType.NORMAL) == "plain"
