import inspect
import io
import os
import re

import pytest

from zinx.logger import (
    BIT_DATE,
    BIT_DEFAULT,
    BIT_LEVEL,
    BIT_LONG_FILE,
    BIT_MICROSECONDS,
    BIT_SHORT_FILE,
    BIT_TIME,
    Level,
    LogPanic,
    ZinxLogger,
)


def _this_file():
    return __file__.replace(os.sep, "/")


def test_default_header_has_date_time_level_and_short_file():
    out = io.StringIO()
    log = ZinxLogger(out, "", BIT_DEFAULT)
    expected_line = inspect.currentframe().f_lineno + 1
    log.info("hello", "world")
    match = re.fullmatch(
        r"\d{4}/\d{2}/\d{2} \d{2}:\d{2}:\d{2} \[INFO\](\S+):(\d+): hello world\n",
        out.getvalue(),
    )
    assert match is not None
    assert match.group(1) == os.path.basename(__file__)
    assert int(match.group(2)) == expected_line


def test_no_flags_writes_only_content():
    out = io.StringIO()
    ZinxLogger(out, "", 0).warn("plain")
    assert out.getvalue() == "plain\n"


def test_level_without_time_flags_is_not_written():
    out = io.StringIO()
    ZinxLogger(out, "", BIT_LEVEL | BIT_SHORT_FILE).error("quiet")
    assert out.getvalue() == "quiet\n"


def test_prefix_is_wrapped_in_angle_brackets():
    out = io.StringIO()
    ZinxLogger(out, "MODULE", 0).info("x")
    assert out.getvalue() == "<MODULE>x\n"


def test_microseconds_flag():
    out = io.StringIO()
    ZinxLogger(out, "", BIT_MICROSECONDS).info("x")
    text = out.getvalue()
    assert len(text) == len("00:00:00.000000 x\n")
    assert text.endswith(" x\n")
    assert re.fullmatch(r"\d{2}:\d{2}:\d{2}\.\d{6} x\n", text) is not None


def test_long_file_shows_full_path():
    out = io.StringIO()
    ZinxLogger(out, "", BIT_DATE | BIT_LONG_FILE).info("x")
    assert _this_file() + ":" in out.getvalue()


def test_debugf_formats_arguments():
    out = io.StringIO()
    ZinxLogger(out, "", 0).debugf("a = %d", 10)
    assert out.getvalue() == "a = 10\n"


def test_existing_newline_is_not_doubled():
    out = io.StringIO()
    ZinxLogger(out, "", 0).infof("line\n")
    assert out.getvalue() == "line\n"


def test_empty_message_gets_no_newline():
    out = io.StringIO()
    ZinxLogger(out, "", 0).output(Level.INFO, "")
    assert out.getvalue() == ""


def test_close_and_open_debug():
    out = io.StringIO()
    log = ZinxLogger(out, "", 0)
    log.close_debug()
    log.debug("hidden")
    log.debugf("hidden %d", 1)
    log.info("shown")
    assert out.getvalue() == "shown\n"
    assert log.debug_closed
    log.open_debug()
    log.debug("back")
    assert out.getvalue().endswith("back\n")


def test_panic_writes_and_raises():
    out = io.StringIO()
    log = ZinxLogger(out, "", BIT_DEFAULT)
    with pytest.raises(LogPanic) as info:
        log.panicf("boom %s", "now")
    assert str(info.value) == "boom now"
    assert Level.PANIC.label in out.getvalue()


def test_fatal_exits_with_status_one():
    out = io.StringIO()
    log = ZinxLogger(out, "", BIT_DEFAULT)
    with pytest.raises(SystemExit) as info:
        log.fatal("dead")
    assert info.value.code == 1
    assert Level.FATAL.label in out.getvalue()


def test_flag_manipulation():
    log = ZinxLogger(io.StringIO(), "", BIT_DATE)
    assert log.flags() == BIT_DATE
    log.add_flag(BIT_TIME)
    assert log.flags() == BIT_DATE | BIT_TIME
    log.reset_flags(BIT_LEVEL)
    assert log.flags() == BIT_LEVEL


def test_stack_includes_message_and_threads():
    out = io.StringIO()
    ZinxLogger(out, "", BIT_DEFAULT).stack(" Zinx Stack! ")
    text = out.getvalue()
    assert " Zinx Stack! \n" in text
    assert "MainThread" in text
    assert Level.ERROR.label in text


def test_set_log_file_and_close(tmp_path, capsys):
    log = ZinxLogger(None, "", 0)
    log_dir = tmp_path / "log"
    log.set_log_file(str(log_dir), "testfile.log")
    log.error("to file")
    log.close()
    log.error("to stderr")
    assert (log_dir / "testfile.log").read_text(encoding="utf-8") == "to file\n"
    assert capsys.readouterr().err == "to stderr\n"


def test_set_log_file_appends(tmp_path):
    for word in ("first", "second"):
        with ZinxLogger(None, "", 0) as log:
            log.set_log_file(str(tmp_path), "app.log")
            log.info(word)
    assert (tmp_path / "app.log").read_text(encoding="utf-8") == "first\nsecond\n"