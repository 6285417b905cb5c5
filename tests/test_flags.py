import datetime
import os

import pytest

from zinx.flags import CommandArgs, FlagSet, parse_command_args


def test_flag_name_deduplicates():
    flag_set = FlagSet()
    names = [flag_set.flag_name("c") for _ in range(3)]
    assert names == ["c", "c1", "c2"]
    assert flag_set.flag_name("d") == "d"


def test_string_flag_default_and_value():
    flag_set = FlagSet()
    name = flag_set.add_string("c", "default.json", "config")
    assert flag_set[name] == "default.json"
    assert flag_set.parse(["-c", "x.json"]) == []
    assert flag_set[name] == "x.json"


@pytest.mark.parametrize("argv", [["-c=x.json"], ["--c", "x.json"], ["--c=x.json"]])
def test_string_flag_syntaxes(argv):
    flag_set = FlagSet()
    flag_set.add_string("c", "", "")
    flag_set.parse(argv)
    assert flag_set["c"] == "x.json"


def test_bool_flag():
    flag_set = FlagSet()
    flag_set.add_bool("v", False, "")
    flag_set.parse(["-v"])
    assert flag_set["v"] is True
    flag_set.parse(["-v=false"])
    assert flag_set["v"] is False


def test_bool_flag_does_not_consume_next_argument():
    flag_set = FlagSet()
    flag_set.add_bool("v", False, "")
    assert flag_set.parse(["-v", "false"]) == ["false"]
    assert flag_set["v"] is True


def test_int_and_float_flags():
    flag_set = FlagSet()
    flag_set.add_int("n", 0, "")
    flag_set.add_float("f", 0.0, "")
    flag_set.parse(["-n", "0x10", "-f", "2.5"])
    assert flag_set["n"] == 0x10
    assert flag_set["f"] == 2.5


def test_duration_flag():
    flag_set = FlagSet()
    flag_set.add_duration("d", datetime.timedelta(seconds=1), "")
    assert flag_set["d"] == datetime.timedelta(seconds=1)
    flag_set.parse(["-d", "1h30m"])
    assert flag_set["d"] == datetime.timedelta(hours=1, minutes=30)
    flag_set.parse(["-d=300ms"])
    assert flag_set["d"] == datetime.timedelta(milliseconds=300)


@pytest.mark.parametrize("flag_value", ["5x", "abc", "1.2.3s"])
def test_invalid_duration(flag_value):
    flag_set = FlagSet()
    flag_set.add_duration("d", datetime.timedelta(0), "")
    with pytest.raises(ValueError):
        flag_set.parse(["-d", flag_value])


def test_invalid_int_raises():
    flag_set = FlagSet()
    flag_set.add_int("n", 0, "")
    with pytest.raises(ValueError):
        flag_set.parse(["-n", "seven"])


def test_unknown_flag_raises():
    flag_set = FlagSet()
    with pytest.raises(ValueError, match="not defined"):
        flag_set.parse(["-nope"])


def test_missing_argument_raises():
    flag_set = FlagSet()
    flag_set.add_string("c", "", "")
    with pytest.raises(ValueError, match="needs an argument"):
        flag_set.parse(["-c"])


def test_bad_syntax_raises():
    flag_set = FlagSet()
    with pytest.raises(ValueError, match="bad flag syntax"):
        flag_set.parse(["---x"])


def test_positional_arguments_stop_parsing():
    flag_set = FlagSet()
    flag_set.add_string("c", "", "")
    flag_set.add_bool("v", False, "")
    assert flag_set.parse(["-c", "a", "pos", "-v"]) == ["pos", "-v"]
    assert flag_set["v"] is False


def test_double_dash_terminates():
    flag_set = FlagSet()
    flag_set.add_bool("v", False, "")
    assert flag_set.parse(["--", "-v"]) == ["-v"]
    assert flag_set["v"] is False


def test_repeated_definitions_are_separate_flags():
    flag_set = FlagSet()
    first = flag_set.add_string("c", "one", "")
    second = flag_set.add_string("c", "two", "")
    flag_set.parse([f"-{second}", "changed"])
    assert flag_set[first] == "one"
    assert flag_set[second] == "changed"


def test_unknown_name_lookup_raises_key_error():
    with pytest.raises(KeyError):
        FlagSet()["missing"]


def test_parse_command_args_relative_config():
    args = parse_command_args(["/usr/local/bin/server", "-c", "conf/a.json"], "ignored.json")
    cwd = os.getcwd()
    assert args == CommandArgs(
        exe_abs_dir=cwd,
        exe_name="server",
        config_file=os.path.normpath(os.path.join(cwd, "conf/a.json")),
    )


def test_parse_command_args_absolute_config_and_default(tmp_path):
    default_path = str(tmp_path / "zinx.json")
    args = parse_command_args(["server"], default_path)
    assert args.config_file == default_path

    other = str(tmp_path / "other.json")
    assert parse_command_args(["server", f"-c={other}"], default_path).config_file == other


def test_parse_command_args_rejects_unknown_flag():
    with pytest.raises(ValueError):
        parse_command_args(["server", "-x"], "a.json")