import logging

import pytest

from linbox.logmsg import (
    VERBOSE,
    VERY_VERBOSE,
    LogMessage,
    LogMessageType,
    format_hex_pretty,
)


def test_format_hex_pretty_source_example():
    data = bytes.fromhex("BA001F001E000022FFFFFF")
    assert format_hex_pretty(data) == "BA.00.1F.00.1E.00.00.22.FF.FF.FF (11)"


def test_format_hex_pretty_short_has_no_count():
    assert format_hex_pretty(bytes([0x3C, 0xAB])) == "3C.AB"


def test_format_hex_pretty_empty():
    assert format_hex_pretty(b"") == ""


def test_format_hex_pretty_count_matches_length():
    data = bytes(range(9))
    text = format_hex_pretty(data)
    assert text.endswith(f"({len(data)})")
    assert text.split(" ")[0].split(".") == [f"{b:02X}" for b in data]


def test_levels_follow_names():
    for kind in LogMessageType:
        level = LogMessage(kind).type.level
        if kind.name.startswith("ERROR_"):
            assert level == logging.ERROR
        elif kind.name.startswith("WARN_"):
            assert level == logging.WARNING
    assert LogMessage(LogMessageType.INFO_CHECK_FOR_LIN_FAULT_FIXED).type.level == logging.INFO
    assert LogMessage().type.level == logging.NOTSET


def test_verbose_levels_below_debug():
    assert LogMessage(LogMessageType.VERBOSE_READ_LIN_FRAME_MSG).type.level == VERBOSE
    assert LogMessage(LogMessageType.VV_READ_LIN_FRAME_SYNC_EXPECTED).type.level == VERY_VERBOSE
    assert VERY_VERBOSE < VERBOSE < logging.DEBUG


def test_log_message_converts_data():
    msg = LogMessage(LogMessageType.VERBOSE_LIN_ANSWER_RESPONSE, 0x18, [1, 2, 3])
    assert msg.data == bytes([1, 2, 3])
    assert msg.current_pid == 0x18


def test_log_message_defaults():
    msg = LogMessage()
    assert msg.type is LogMessageType.UNKNOWN
    assert msg.data == b""
    assert msg.message_from_master is False


def test_log_message_rejects_long_data():
    with pytest.raises(ValueError):
        LogMessage(data=bytes(10))