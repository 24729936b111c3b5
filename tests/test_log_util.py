import logging

import pytest

from vcx.utils.log_util import level_from_name, log_io


@pytest.mark.parametrize("value, expected", [
    ("debug", logging.DEBUG),
    (" Warning ", logging.WARNING),
    ("ERROR", logging.ERROR),
    ("10", 10),
    (30, 30),
    ("chatty", logging.INFO),
    (None, logging.INFO),
])
def test_level_from_name(value, expected):
    assert level_from_name(value) == expected


def test_level_from_name_custom_default():
    assert level_from_name("nope", default=logging.ERROR) == logging.ERROR


class Target:
    @log_io(level=logging.INFO, mask=("secret",))
    def combine(self, a, secret, b=0):
        return a + b

    @log_io()
    def fail(self):
        raise RuntimeError("bad input")


def test_log_io_logs_arguments_and_result(caplog):
    with caplog.at_level(logging.INFO, logger="vcx"):
        assert Target().combine(1, "hunter2", b=2) == 3
    text = caplog.text
    assert "Target.combine(a=1, secret=***, b=2)" in text
    assert "hunter2" not in text
    assert "= 3" in text


def test_log_io_is_silent_below_level(caplog):
    with caplog.at_level(logging.WARNING, logger="vcx"):
        Target().combine(1, 2)
    assert caplog.records == []


def test_log_io_logs_and_reraises(caplog):
    with caplog.at_level(logging.ERROR, logger="vcx"):
        with pytest.raises(RuntimeError):
            Target().fail()
    assert "Exception in" in caplog.text
