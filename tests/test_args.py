from pathlib import Path

import pytest

from tvsearch2epg.args import ArgumentParser


def parse(*argv):
    return ArgumentParser().parse_args(list(argv))


def test_defaults():
    args = parse()

    assert args.days is None
    assert args.offset is None
    assert args.output is None
    assert not args.configure


def test_capabilities_print_and_exit(capsys):
    with pytest.raises(SystemExit) as exc:
        parse("--capabilities")

    assert exc.value.code == 0
    assert capsys.readouterr().out.split() == ["baseline", "manualconfig"]


def test_version_prints_package_version(capsys):
    from tvsearch2epg import __version__

    with pytest.raises(SystemExit):
        parse("--version")

    assert capsys.readouterr().out.strip() == __version__


@pytest.mark.parametrize(
    "argv",
    [
        ["--days", "0"],
        ["--days", "15"],
        ["--offset", "-1"],
        ["--offset", "15"],
        ["--workers", "11"],
        ["--warning", "--debug"],
        ["--console", "--quiet"],
        ["--configure", "--list-channels"],
    ],
)
def test_invalid_combinations_are_rejected(argv):
    with pytest.raises(SystemExit) as exc:
        parse(*argv)

    assert exc.value.code == 2


def test_valid_values_pass_through():
    args = parse("--days", "14", "--offset", "1", "--workers", "3", "--output", "guide.xml")

    assert (args.days, args.offset, args.workers) == (14, 1, 3)
    assert args.output == Path("guide.xml")


def test_logging_config():
    parser = ArgumentParser()

    assert parser.get_logging_config(parser.parse_args([])) == {
        "level": "default",
        "console": False,
        "quiet": False,
    }
    assert parser.get_logging_config(parser.parse_args(["--debug", "--console"])) == {
        "level": "debug",
        "console": True,
        "quiet": False,
    }
    assert parser.get_logging_config(parser.parse_args(["--warning", "--quiet"]))["quiet"]


def test_system_defaults_follow_basedir(tmp_path):
    defaults = ArgumentParser().get_system_defaults(tmp_path)

    assert defaults["config_file"] == tmp_path / "conf" / "tvsearch2epg.xml"
    assert defaults["log_file"] == tmp_path / "log" / "tvsearch2epg.log"
