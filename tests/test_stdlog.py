import os

import pytest

from zinx import stdlog
from zinx.logger import (
    BIT_DATE,
    BIT_DEFAULT,
    BIT_LEVEL,
    BIT_LONG_FILE,
    BIT_SHORT_FILE,
    BIT_TIME,
    LogPanic,
)


@pytest.fixture(autouse=True)
def _restore_std_logger():
    yield
    stdlog.std_logger.close()
    stdlog.reset_flags(BIT_DEFAULT)
    stdlog.set_prefix("")
    stdlog.open_debug()


def test_default_debug_output(capsys):
    stdlog.debug("zinx debug content1")
    stdlog.debug("zinx debug content2")
    err = capsys.readouterr().err
    lines = err.splitlines()
    assert len(lines) == 2
    assert lines[0].endswith("zinx debug content1")
    assert "[DEBUG]" + os.path.basename(__file__) + ":" in lines[0]


def test_debugf(capsys):
    stdlog.debugf(" zinx debug a = %d\n", 10)
    assert capsys.readouterr().err.endswith(" zinx debug a = 10\n")


def test_reset_flags_long_file(capsys):
    stdlog.reset_flags(BIT_DATE | BIT_LONG_FILE | BIT_LEVEL)
    assert stdlog.flags() == BIT_DATE | BIT_LONG_FILE | BIT_LEVEL
    stdlog.info("zinx info content")
    err = capsys.readouterr().err
    assert "[INFO]" + __file__.replace(os.sep, "/") + ":" in err
    assert err.endswith("zinx info content\n")


def test_prefix(capsys):
    stdlog.reset_flags(BIT_DATE | BIT_LONG_FILE | BIT_LEVEL)
    stdlog.set_prefix("MODULE")
    stdlog.error("zinx error content")
    err = capsys.readouterr().err
    assert err.startswith("<MODULE>")
    assert "[ERROR]" in err


def test_add_flag_and_stack(capsys):
    stdlog.reset_flags(BIT_DATE | BIT_LONG_FILE | BIT_LEVEL)
    stdlog.add_flag(BIT_SHORT_FILE | BIT_TIME)
    assert stdlog.flags() == BIT_DATE | BIT_LONG_FILE | BIT_LEVEL | BIT_SHORT_FILE | BIT_TIME
    stdlog.stack(" Zinx Stack! ")
    err = capsys.readouterr().err
    assert " Zinx Stack! \n" in err
    assert "[ERROR]" + os.path.basename(__file__) + ":" in err


def test_log_file_and_close_debug(tmp_path, capsys):
    stdlog.set_log_file(str(tmp_path / "log"), "testfile.log")
    stdlog.debug("===> zinx debug content ~~666")
    stdlog.debug("===> zinx debug content ~~888")
    stdlog.error("===> zinx Error!!!! ~~~555~~~")
    stdlog.close_debug()
    stdlog.debug("===> hidden")
    stdlog.error("===> zinx Error  after debug close !!!!")
    stdlog.std_logger.close()

    content = (tmp_path / "log" / "testfile.log").read_text(encoding="utf-8")
    lines = content.splitlines()
    assert len(lines) == 4
    assert lines[0].endswith("===> zinx debug content ~~666")
    assert lines[2].endswith("===> zinx Error!!!! ~~~555~~~")
    assert lines[3].endswith("===> zinx Error  after debug close !!!!")
    assert "hidden" not in content
    assert capsys.readouterr().err == ""


def test_panic_raises():
    stdlog.reset_flags(0)
    with pytest.raises(LogPanic):
        stdlog.panic("stop")


def test_fatalf_exits():
    stdlog.reset_flags(0)
    with pytest.raises(SystemExit) as info:
        stdlog.fatalf("bye %s", "now")
    assert info.value.code == 1