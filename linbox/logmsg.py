"""Deferred log records produced while reading the LIN bus."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto

VERBOSE = logging.DEBUG - 2
VERY_VERBOSE = logging.DEBUG - 4

MAX_DATA_LENGTH = 9


class LogMessageType(Enum):
    """Kinds of events recorded by the bus listener."""

    UNKNOWN = auto()
    ERROR_LIN_ANSWER_CAN_WRITE_LIN_ANSWER = auto()
    ERROR_LIN_ANSWER_TOO_LONG = auto()
    VERBOSE_LIN_ANSWER_RESPONSE = auto()
    ERROR_CHECK_FOR_LIN_FAULT_DETECTED = auto()
    INFO_CHECK_FOR_LIN_FAULT_FIXED = auto()
    ERROR_READ_LIN_FRAME_UNABLE_TO_ANSWER = auto()
    ERROR_READ_LIN_FRAME_LOST_MSG = auto()
    VV_READ_LIN_FRAME_BREAK_EXPECTED = auto()
    VV_READ_LIN_FRAME_SYNC_EXPECTED = auto()
    WARN_READ_LIN_FRAME_SID_CRC = auto()
    WARN_READ_LIN_FRAME_LINV1_CRC = auto()
    WARN_READ_LIN_FRAME_LINV2_CRC = auto()
    VERBOSE_READ_LIN_FRAME_MSG = auto()

    @property
    def level(self) -> int:
        """Level at which an event of this kind is queued."""
        prefixes = (
            ("ERROR_", logging.ERROR),
            ("WARN_", logging.WARNING),
            ("INFO_", logging.INFO),
            ("VERBOSE_", VERBOSE),
            ("VV_", VERY_VERBOSE),
        )
        for prefix, level in prefixes:
            if self.name.startswith(prefix):
                return level
        return logging.NOTSET


@dataclass
class LogMessage:
    """One queued event with the frame data it refers to."""

    type: LogMessageType = LogMessageType.UNKNOWN
    current_pid: int = 0
    data: bytes = b""
    current_data_valid: bool = False
    message_source_known: bool = False
    message_from_master: bool = False

    def __post_init__(self) -> None:
        self.data = bytes(self.data)
        if len(self.data) > MAX_DATA_LENGTH:
            raise ValueError(f"log data holds at most {MAX_DATA_LENGTH} bytes, got {len(self.data)}")


def format_hex_pretty(data: bytes) -> str:
    """Format bytes as dotted upper-case hex, with the count appended past four bytes."""
    data = bytes(data)
    text = ".".join(f"{byte:02X}" for byte in data)
    if len(data) > 4:
        return f"{text} ({len(data)})"
    return text