"""Unit tests for CLI runtime helpers."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from benchrunner.cli.options import OptionDescriptor
from benchrunner.cli.runtime import (
    DEFAULT_BANNER,
    dispatch_exit_intent,
    parse_args,
    resolve_args,
    usage_text,
)
from benchrunner.core.config import (
    Config,
    PlotFormat,
    PlotOutput,
    PlotPurpose,
    PrintExit,
    Verbosity,
)
from benchrunner.core.errors import OptionError, ValueParseError


class TestResolveArgs:
    """Pure argument resolution."""

    def test_no_arguments_yield_defaults(
        self, default_config: Config, options: list[OptionDescriptor]
    ) -> None:
        config, residual = resolve_args(default_config, options, [])
        assert config == default_config
        assert residual == []

    def test_last_sample_count_wins(self, options: list[OptionDescriptor]) -> None:
        config, _ = resolve_args(Config(samples=100), options, ["-s", "5", "-s", "20"])
        assert config.samples == 20

    def test_plot_requests_are_additive(self, options: list[OptionDescriptor]) -> None:
        config, _ = resolve_args(Config(), options, ["-t", "window", "-k", "csv"])
        assert config.plot == {
            PlotPurpose.TIMING: frozenset({PlotOutput.with_defaults(PlotFormat.WINDOW)}),
            PlotPurpose.KERNEL_DENSITY: frozenset({PlotOutput.with_defaults(PlotFormat.CSV)}),
        }

    def test_repeated_plot_purpose_accumulates(self, options: list[OptionDescriptor]) -> None:
        config, _ = resolve_args(Config(), options, ["-t", "pdf", "--plot-timing", "png:10x10"])
        assert config.plot[PlotPurpose.TIMING] == frozenset(
            {
                PlotOutput.with_defaults(PlotFormat.PDF),
                PlotOutput(kind=PlotFormat.PNG, width=10, height=10),
            }
        )

    def test_all_scalar_flags(self, options: list[OptionDescriptor]) -> None:
        config, _ = resolve_args(
            Config(),
            options,
            ["-g", "-I", "90%", "--resamples", "1000", "-v", "-l"],
        )
        assert config.perform_gc is True
        assert config.conf_interval == pytest.approx(0.9)
        assert config.resamples == 1000
        assert config.verbosity == Verbosity.VERBOSE
        assert config.print_exit == PrintExit.LIST

    def test_gc_flags_last_one_wins(self, options: list[OptionDescriptor]) -> None:
        config, _ = resolve_args(Config(), options, ["-g", "-G"])
        assert config.perform_gc is False

    def test_residual_arguments_keep_order(self, options: list[OptionDescriptor]) -> None:
        _, residual = resolve_args(Config(), options, ["sort", "-q", "fib", "-s", "3", "sum"])
        assert residual == ["sort", "fib", "sum"]

    def test_double_dash_ends_options(self, options: list[OptionDescriptor]) -> None:
        config, residual = resolve_args(Config(), options, ["-q", "--", "fib"])
        assert config.verbosity == Verbosity.QUIET
        assert residual == ["fib"]

    def test_combined_short_flags_and_attached_values(
        self, options: list[OptionDescriptor]
    ) -> None:
        config, _ = resolve_args(Config(), options, ["-gq", "-s7"])
        assert config.perform_gc is True
        assert config.verbosity == Verbosity.QUIET
        assert config.samples == 7

    def test_long_option_prefixes(self, options: list[OptionDescriptor]) -> None:
        config, _ = resolve_args(Config(), options, ["--samp", "9"])
        assert config.samples == 9

    def test_unknown_flag_is_an_option_error(self, options: list[OptionDescriptor]) -> None:
        with pytest.raises(OptionError, match="unrecognized option '--bogus'"):
            resolve_args(Config(), options, ["--bogus"])

    def test_missing_argument_is_an_option_error(
        self, options: list[OptionDescriptor]
    ) -> None:
        with pytest.raises(OptionError, match="expected one argument"):
            resolve_args(Config(), options, ["-s"])

    def test_dash_leading_value_is_an_option_error(
        self, options: list[OptionDescriptor]
    ) -> None:
        with pytest.raises(OptionError, match="expected one argument"):
            resolve_args(Config(), options, ["-t", "-x"])

    def test_option_errors_are_reported_before_value_errors(
        self, options: list[OptionDescriptor]
    ) -> None:
        with pytest.raises(OptionError):
            resolve_args(Config(), options, ["-s", "0", "--bogus"])

    @pytest.mark.parametrize(
        ("argv", "message"),
        [
            (["-s", "0"], "sample count must be positive"),
            (["--resamples", "abc"], "invalid resample count provided"),
            (["-I", "150%"], "confidence interval must be less than 1"),
            (["-t", "bogus"], "unknown plot type"),
        ],
    )
    def test_value_errors(
        self, options: list[OptionDescriptor], argv: list[str], message: str
    ) -> None:
        with pytest.raises(ValueParseError, match=message):
            resolve_args(Config(), options, argv)

    def test_config_source_sits_between_default_and_flags(
        self, tmp_path: Path, options: list[OptionDescriptor]
    ) -> None:
        config_path = tmp_path / "bench.yaml"
        config_path.write_text(
            textwrap.dedent(
                """
                samples: 40
                resamples: 400
                """
            ).strip(),
            encoding="utf-8",
        )
        config, _ = resolve_args(
            Config(samples=1, resamples=1),
            options,
            ["-s", "4"],
            config_source=config_path,
        )
        assert config.samples == 4
        assert config.resamples == 400


class TestDispatchExitIntent:
    """Help and version handling."""

    def test_help_prints_banner_and_usage(
        self,
        default_config: Config,
        options: list[OptionDescriptor],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        config = default_config.model_copy(update={'print_exit': PrintExit.HELP})
        assert dispatch_exit_intent(config, options, prog="bench") == 0
        out = capsys.readouterr().out
        assert out.startswith("benchrunner test suite 0.1\n")
        assert "usage: bench [OPTIONS]" in out
        assert "--plot-timing" in out
        assert "window or win" in out
        assert "72dpi points for pdf and svg" in out

    def test_version_prints_banner_only(
        self, options: list[OptionDescriptor], capsys: pytest.CaptureFixture[str]
    ) -> None:
        config = Config(print_exit=PrintExit.VERSION)
        assert dispatch_exit_intent(config, options) == 0
        assert capsys.readouterr().out == f"{DEFAULT_BANNER}\n"

    @pytest.mark.parametrize("intent", [PrintExit.NORMAL, PrintExit.LIST])
    def test_other_intents_continue(
        self,
        options: list[OptionDescriptor],
        intent: PrintExit,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert dispatch_exit_intent(Config(print_exit=intent), options) is None
        assert capsys.readouterr().out == ""

    def test_usage_lists_every_option(self, options: list[OptionDescriptor]) -> None:
        text = usage_text(options, prog="bench")
        for option in options:
            for flag in option.option_strings():
                assert flag in text


class TestParseArgs:
    """Top-level parsing with process exit."""

    def test_returns_config_and_residual(self, default_config: Config) -> None:
        config, residual = parse_args(default_config, argv=["-s", "3", "fib"], prog="bench")
        assert config.samples == 3
        assert residual == ["fib"]

    def test_parse_error_exits_with_64(
        self, default_config: Config, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with pytest.raises(SystemExit) as excinfo:
            parse_args(default_config, argv=["-s", "-5"], prog="bench")
        assert excinfo.value.code == 64
        err = capsys.readouterr().err
        assert err == (
            "Error: sample count must be positive\n"
            'Run "bench --help" for usage information\n'
        )

    def test_unknown_flag_exits_with_64(
        self, default_config: Config, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with pytest.raises(SystemExit) as excinfo:
            parse_args(default_config, argv=["--frobnicate"], prog="bench")
        assert excinfo.value.code == 64
        assert "Error: unrecognized option '--frobnicate'" in capsys.readouterr().err

    @pytest.mark.parametrize("flag", ["-h", "-?", "--help"])
    def test_help_exits_successfully(
        self, default_config: Config, flag: str, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with pytest.raises(SystemExit) as excinfo:
            parse_args(default_config, argv=[flag], prog="bench")
        assert excinfo.value.code == 0
        assert "Plot types:" in capsys.readouterr().out

    def test_version_exits_successfully(
        self, default_config: Config, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with pytest.raises(SystemExit) as excinfo:
            parse_args(default_config, argv=["-V"], prog="bench")
        assert excinfo.value.code == 0
        assert capsys.readouterr().out == "benchrunner test suite 0.1\n"

    def test_last_exit_intent_wins(
        self, default_config: Config, capsys: pytest.CaptureFixture[str]
    ) -> None:
        config, _ = parse_args(default_config, argv=["--help", "--list"], prog="bench")
        assert config.print_exit == PrintExit.LIST
        assert capsys.readouterr().out == ""

    def test_verbose_flag_logs_matches_and_changes(
        self, default_config: Config, capsys: pytest.CaptureFixture[str]
    ) -> None:
        config, _ = parse_args(default_config, argv=["-v", "-s", "5"], prog="bench")
        assert config.verbosity == Verbosity.VERBOSE
        err = capsys.readouterr().err
        assert "Matched option -v" in err
        assert "Matched option -s 5" in err
        assert "- samples: 100 -> 5" in err

    def test_normal_verbosity_keeps_debug_logging_quiet(
        self, default_config: Config, capsys: pytest.CaptureFixture[str]
    ) -> None:
        parse_args(default_config, argv=["-s", "5"], prog="bench")
        assert "Matched option" not in capsys.readouterr().err
