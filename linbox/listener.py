"""Byte-level LIN bus frame reader for a slave node."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Iterable

from .logmsg import VERBOSE, VERY_VERBOSE, LogMessage, LogMessageType, format_hex_pretty

logger = logging.getLogger(__name__)

LIN_BREAK = 0x00
LIN_SYNC = 0x55
DIAGNOSTIC_FRAME_MASTER = 0x3C
DIAGNOSTIC_FRAME_SLAVE = 0x3D

MSG_QUEUE_LENGTH = 6
LOG_QUEUE_LENGTH = 6
MAX_ANSWER_LENGTH = 8
# Up to 8 data bytes followed by the checksum.
FRAME_BUFFER_SIZE = 9
# 8 data bits, 1 start bit, 2 stop bits.
UART_FRAME_BITS = 8 + 1 + 2

_HEATER_PIDS = (0x20, 0x21, 0x22)
_HEATER_NODE_ID = 0x01


class LinChecksum(Enum):
    """LIN checksum flavour: classic (data only) or enhanced (data and PID)."""

    VERSION_1 = 1
    VERSION_2 = 2


class ReadState(Enum):
    """Position of the reader within a LIN frame."""

    BREAK = auto()
    SYNC = auto()
    SID = auto()
    DATA = auto()
    ACT = auto()


@dataclass(frozen=True)
class LinMessage:
    """A validated frame sent by the bus master."""

    pid: int
    data: bytes


def data_checksum(data: Iterable[int], offset: int = 0) -> int:
    """Inverted sum with carry of the bytes, starting from offset."""
    total = offset
    for byte in data:
        total += byte
        if total > 0xFF:
            total -= 0xFF
    return ~total & 0xFF


def addr_parity(pid: int) -> int:
    """The two LIN parity bits for a 6-bit frame identifier."""
    b0, b1, b2, b3, b4, b5 = ((pid >> bit) & 1 for bit in range(6))
    p0 = b0 ^ b1 ^ b2 ^ b4
    p1 = 1 ^ (b1 ^ b3 ^ b4 ^ b5)
    return p0 | (p1 << 1)


def describe(message: LogMessage, observer_mode: bool = False) -> tuple[int, str] | None:
    """Log level and text for a queued event, or None if it is not shown."""
    pid = message.current_pid
    kind = message.type
    data = format_hex_pretty(message.data)

    if kind is LogMessageType.ERROR_LIN_ANSWER_CAN_WRITE_LIN_ANSWER:
        return logging.ERROR, "Cannot answer LIN because there is no open order from master."
    if kind is LogMessageType.ERROR_LIN_ANSWER_TOO_LONG:
        return logging.ERROR, "LIN answer cannot be longer than 8 bytes."
    if kind is LogMessageType.VERBOSE_LIN_ANSWER_RESPONSE:
        suffix = " - NOT SEND (OBSERVER MODE)" if observer_mode else ""
        return VERBOSE, f"RESPONSE {pid:02X} {data}{suffix}"
    if kind is LogMessageType.ERROR_CHECK_FOR_LIN_FAULT_DETECTED:
        return logging.ERROR, "Fault on LIN BUS detected."
    if kind is LogMessageType.INFO_CHECK_FOR_LIN_FAULT_FIXED:
        return logging.INFO, "Fault on LIN BUS fixed."
    if kind is LogMessageType.ERROR_READ_LIN_FRAME_UNABLE_TO_ANSWER:
        return logging.ERROR, f"PID {pid:02X}      order - unable to send response"
    if kind is LogMessageType.ERROR_READ_LIN_FRAME_LOST_MSG:
        if not message.data:
            return VERBOSE, f"PID {pid:02X}      order no answer"
        if len(message.data) < 8:
            return logging.WARNING, f"PID {pid:02X}      {data} partial data received"
        return None
    if kind is LogMessageType.VV_READ_LIN_FRAME_BREAK_EXPECTED:
        return VERY_VERBOSE, f"0x{pid:02X} Expected BREAK not received."
    if kind is LogMessageType.VV_READ_LIN_FRAME_SYNC_EXPECTED:
        return VERY_VERBOSE, f"0x{pid:02X} Expected SYNC not found."
    if kind is LogMessageType.WARN_READ_LIN_FRAME_SID_CRC:
        return logging.WARNING, f"0x{pid:02X} LIN CRC error on SID."
    if kind is LogMessageType.WARN_READ_LIN_FRAME_LINV1_CRC:
        return logging.WARNING, "LIN v1 CRC error"
    if kind is LogMessageType.WARN_READ_LIN_FRAME_LINV2_CRC:
        return logging.WARNING, "LIN v2 CRC error"
    if kind is LogMessageType.VERBOSE_READ_LIN_FRAME_MSG:
        # Traffic of the heater itself is very chatty.
        is_heater = pid in _HEATER_PIDS or (
            pid in (DIAGNOSTIC_FRAME_MASTER, DIAGNOSTIC_FRAME_SLAVE)
            and message.data[:1] == bytes([_HEATER_NODE_ID])
        )
        if message.message_source_known:
            source = " - MASTER" if message.message_from_master else " - SLAVE"
        else:
            source = ""
        validity = "" if message.current_data_valid else "INVALID"
        level = VERY_VERBOSE if is_heater else VERBOSE
        return level, f"PID {pid:02X}      {data} {source} {validity}"
    return None


def _micros() -> int:
    return time.monotonic_ns() // 1000


class LinBusListener(ABC):
    """Reads LIN frames byte by byte and answers the master's orders."""

    def __init__(
        self,
        write: Callable[[bytes], object],
        baud_rate: int = 9600,
        checksum: LinChecksum = LinChecksum.VERSION_2,
        observer_mode: bool = False,
        fault_pin: Callable[[], bool] | None = None,
        clock: Callable[[], int] | None = None,
    ) -> None:
        if baud_rate <= 0:
            raise ValueError(f"baud rate must be positive, got {baud_rate}")
        self._write = write
        self._checksum = checksum
        self._observer_mode = observer_mode
        self._fault_pin = fault_pin
        self._clock = clock or _micros

        time_per_baud = int(1_000_000 / baud_rate)
        self._time_per_first_byte = int(time_per_baud * UART_FRAME_BITS * 5.0)

        self._fault_count = 0
        self._can_write_lin_answer = False
        self._last_data_received = 0

        self._lin_queue: deque[LinMessage] = deque()
        self._log_queue: deque[LogMessage] = deque()

        self._state = ReadState.BREAK
        self._reset_frame()

    @property
    def lin_bus_fault(self) -> bool:
        """Whether the transceiver has reported a fault for a while."""
        return self._fault_count > 3

    def _reset_frame(self) -> None:
        self._state = ReadState.BREAK
        self._pid_with_parity = 0x00
        self._pid = 0x00
        self._order_answered = False
        self._data_valid = True
        self._data = bytearray()

    def _log(self, message: LogMessage) -> None:
        if logger.isEnabledFor(message.type.level) and len(self._log_queue) < LOG_QUEUE_LENGTH:
            self._log_queue.append(message)

    def check_for_lin_fault(self) -> bool:
        """Poll the fault pin; on a fault drop the current frame and return True."""
        if self._fault_pin is not None:
            # The pin is inverted: high means no fault.
            if not self._fault_pin():
                if self._fault_count < 0xFF:
                    self._fault_count += 1
                else:
                    self._fault_count = 0x0F
                if self._fault_count % 3 == 0:
                    self._log(LogMessage(LogMessageType.ERROR_CHECK_FOR_LIN_FAULT_DETECTED))
            elif self.lin_bus_fault:
                self._fault_count = 0
                self._log(LogMessage(LogMessageType.INFO_CHECK_FOR_LIN_FAULT_FIXED))
            else:
                self._fault_count = 0

        if self.lin_bus_fault:
            self._reset_frame()
            return True
        return False

    def update(self) -> None:
        """Periodic poll."""
        self.check_for_lin_fault()

    def feed(self, data: Iterable[int]) -> None:
        """Process bytes received from the UART; they are discarded on a bus fault."""
        if self.check_for_lin_fault():
            return
        for byte in bytes(data):
            while not self._read_lin_frame(byte):
                self._last_data_received = self._clock()
            self._last_data_received = self._clock()

    def handle_break(self) -> None:
        """React to a break condition signalled by the UART."""
        # A valid break has already been read as a zero byte, leaving the reader awaiting SYNC.
        if self._state is not ReadState.SYNC:
            self._state = ReadState.BREAK

    def _report_unanswered(self) -> None:
        if not (self._pid_with_parity and self._pid and self._data_valid):
            return
        if len(self._data) >= 8:
            return
        if self._order_answered:
            # The transceiver should have echoed the answer back.
            self._log(LogMessage(LogMessageType.ERROR_READ_LIN_FRAME_UNABLE_TO_ANSWER, self._pid))
        else:
            self._log(LogMessage(LogMessageType.ERROR_READ_LIN_FRAME_LOST_MSG, self._pid, bytes(self._data)))

    def _read_lin_frame(self, byte: int) -> bool:
        """Advance the reader with one byte; False if the byte must be read again."""
        state = self._state
        if state is ReadState.BREAK:
            self._report_unanswered()
            self._reset_frame()
            if byte == LIN_BREAK:
                self._state = ReadState.SYNC
            elif byte == LIN_SYNC:
                # Some UARTs do not pass the break on as a byte.
                self._state = ReadState.SID
            else:
                self._log(LogMessage(LogMessageType.VV_READ_LIN_FRAME_BREAK_EXPECTED, byte))
        elif state is ReadState.SYNC:
            if byte == LIN_SYNC:
                self._state = ReadState.SID
            else:
                self._log(LogMessage(LogMessageType.VV_READ_LIN_FRAME_SYNC_EXPECTED, byte))
                self._state = ReadState.SYNC if byte == LIN_BREAK else ReadState.BREAK
        elif state is ReadState.SID:
            self._read_pid(byte)
        elif state is ReadState.DATA:
            if self._clock() > self._last_data_received + self._time_per_first_byte:
                self._state = ReadState.BREAK
                return False
            self._data.append(byte)
            if len(self._data) >= FRAME_BUFFER_SIZE:
                self._state = ReadState.ACT

        if self._state is ReadState.ACT and len(self._data) > 1:
            self._finish_frame()
        return True

    def _read_pid(self, byte: int) -> None:
        self._pid_with_parity = byte
        self._pid = byte & 0x3F
        if self._checksum is LinChecksum.VERSION_2:
            if self._pid_with_parity != self._pid | (addr_parity(self._pid) << 6):
                self._log(LogMessage(LogMessageType.WARN_READ_LIN_FRAME_SID_CRC, self._pid_with_parity))
                self._data_valid = False

        if self._data_valid:
            self._can_write_lin_answer = True
            try:
                self.answer_lin_order(self._pid)
            finally:
                self._can_write_lin_answer = False

        # Data is read even after an error.
        self._state = ReadState.DATA

    def _finish_frame(self) -> None:
        frame = bytes(self._data)
        payload, crc = frame[:-1], frame[-1]
        pid = self._pid
        source_known = False
        from_master = True

        if self._checksum is LinChecksum.VERSION_1 or pid in (DIAGNOSTIC_FRAME_MASTER, DIAGNOSTIC_FRAME_SLAVE):
            if crc != data_checksum(payload, 0):
                self._log(LogMessage(LogMessageType.WARN_READ_LIN_FRAME_LINV1_CRC))
                self._data_valid = False
            if pid == DIAGNOSTIC_FRAME_MASTER:
                source_known = True
            elif pid == DIAGNOSTIC_FRAME_SLAVE:
                source_known = True
                from_master = False
        else:
            crc_master = data_checksum(payload, pid)
            crc_slave = data_checksum(payload, self._pid_with_parity)
            if crc not in (crc_master, crc_slave):
                self._log(LogMessage(LogMessageType.WARN_READ_LIN_FRAME_LINV2_CRC))
                self._data_valid = False
            source_known = True
            if crc == crc_slave:
                from_master = False

        self._log(
            LogMessage(
                LogMessageType.VERBOSE_READ_LIN_FRAME_MSG,
                pid,
                frame,
                current_data_valid=self._data_valid,
                message_source_known=source_known,
                message_from_master=from_master,
            )
        )

        if self._data_valid and from_master and len(self._lin_queue) < MSG_QUEUE_LENGTH:
            self._lin_queue.append(LinMessage(pid, payload))
        self._state = ReadState.BREAK

    def write_lin_answer(self, data: bytes) -> bool:
        """Answer the open order with data and its checksum; False if not allowed."""
        data = bytes(data)
        if not self._can_write_lin_answer:
            self._log(LogMessage(LogMessageType.ERROR_LIN_ANSWER_CAN_WRITE_LIN_ANSWER))
            return False
        self._can_write_lin_answer = False
        if len(data) > MAX_ANSWER_LENGTH:
            self._log(LogMessage(LogMessageType.ERROR_LIN_ANSWER_TOO_LONG))
            return False

        if self._checksum is LinChecksum.VERSION_1 or self._pid == DIAGNOSTIC_FRAME_SLAVE:
            crc = data_checksum(data, 0)
        else:
            crc = data_checksum(data, self._pid_with_parity)

        if not self._observer_mode:
            self._order_answered = True
            self._write(data + bytes([crc]))

        self._log(LogMessage(LogMessageType.VERBOSE_LIN_ANSWER_RESPONSE, self._pid, data))
        return True

    def process_lin_msg_queue(self) -> int:
        """Hand queued master frames to lin_message_received; return how many."""
        count = 0
        while self._lin_queue:
            message = self._lin_queue.popleft()
            self.lin_message_received(message.pid, message.data)
            count += 1
        return count

    def process_log_queue(self) -> int:
        """Emit queued events to the logger; return how many were taken."""
        count = 0
        while self._log_queue:
            message = self._log_queue.popleft()
            count += 1
            described = describe(message, self._observer_mode)
            if described is not None:
                level, text = described
                logger.log(level, text)
        return count

    @abstractmethod
    def answer_lin_order(self, pid: int) -> bool:
        """Called when the master requests frame pid; answer with write_lin_answer."""

    @abstractmethod
    def lin_message_received(self, pid: int, message: bytes) -> None:
        """Called for every valid frame sent by the master."""