"""LIN diagnostic transport layer: node configuration and multi-frame PDUs."""

from __future__ import annotations

import logging
from abc import abstractmethod
from collections import deque
from typing import Any

from .listener import DIAGNOSTIC_FRAME_MASTER, DIAGNOSTIC_FRAME_SLAVE, LinBusListener
from .logmsg import format_hex_pretty

logger = logging.getLogger(__name__)

LIN_NAD_BROADCAST = 0x7F
LIN_INITIAL_NODE_ADDRESS = 0x03
LIN_SID_RESPONSE = 0x40
LIN_SID_NEGATIVE_RESPONSE = 0x7F
LIN_SID_ASSIGN_NAD = 0xB0
LIN_SID_ASSIGN_NAD_RESPONSE = LIN_SID_ASSIGN_NAD | LIN_SID_RESPONSE
LIN_SID_READ_BY_IDENTIFIER = 0xB2
LIN_SID_READ_BY_IDENTIFIER_RESPONSE = LIN_SID_READ_BY_IDENTIFIER | LIN_SID_RESPONSE
LIN_SID_HEARTBEAT = 0xB9
LIN_SID_HEARTBEAT_RESPONSE = LIN_SID_HEARTBEAT | LIN_SID_RESPONSE
# Negative response code: sub-function not supported.
LIN_NRC_NOT_SUPPORTED = 0x12

FRAME_LENGTH = 8
FIELD_LENGTH = 5
MULTI_PDU_MAX_LENGTH = 64
MULTI_PDU_MIN_LENGTH = 7
MAX_ANSWER_LENGTH = 0xFFF
EMPTY_RESPONSE = b"\xff" * FRAME_LENGTH

_PCI_SINGLE = 0x00
_PCI_FIRST = 0x10
_PCI_CONSECUTIVE = 0x20


class LinBusProtocol(LinBusListener):
    """A LIN slave node answering diagnostic requests of the master."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._node_address = LIN_INITIAL_NODE_ADDRESS
        self._updates_to_send: deque[bytes] = deque()
        self._multi_expected = 0
        self._multi_buffer = bytearray()
        self._multi_counter = 0

    @abstractmethod
    def lin_identifier(self) -> bytes:
        """Supplier and function id of this node, four bytes."""

    @abstractmethod
    def lin_heartbeat(self) -> None:
        """Called when the master sends a heartbeat to this node."""

    @abstractmethod
    def lin_read_field_by_identifier(self, identifier: int) -> bytes | None:
        """Up to five bytes for a read-by-identifier request, or None if unsupported."""

    @abstractmethod
    def lin_multiframe_received(self, message: bytes) -> bytes | None:
        """Answer to a complete multi-frame request; empty or None for no answer."""

    def lin_reset_device(self) -> None:
        """Drop every response still waiting to be sent."""
        self._updates_to_send.clear()

    @property
    def node_address(self) -> int:
        """The node address currently assigned to this slave."""
        return self._node_address

    @property
    def pending_responses(self) -> list[bytes]:
        """Responses queued for the next slave diagnostic frames, oldest first."""
        return list(self._updates_to_send)

    def _queue_response(self, response: bytes | bytearray) -> None:
        self._updates_to_send.append(bytes(response))

    def _new_response(self) -> bytearray:
        response = bytearray(EMPTY_RESPONSE)
        response[0] = self._node_address
        return response

    def answer_lin_order(self, pid: int) -> bool:
        """Send the oldest queued response when the master polls the slave frame."""
        if pid == DIAGNOSTIC_FRAME_SLAVE and self._updates_to_send:
            self.write_lin_answer(self._updates_to_send.popleft())
            return True
        return False

    def lin_message_received(self, pid: int, message: bytes) -> None:
        """Dispatch a master frame to the diagnostic transport layer."""
        raw = bytes(message)
        message = raw.ljust(FRAME_LENGTH, b"\xff")
        if pid == DIAGNOSTIC_FRAME_MASTER:
            if message[0] not in (self._node_address, LIN_NAD_BROADCAST):
                return
            pci_type = message[1] & 0xF0
            if pci_type == _PCI_SINGLE:
                # A single frame ends any open multi-frame message.
                self._multi_expected = 0
                self._multi_buffer.clear()
                self._multi_counter = 0
                self._diag_single(message, raw)
            elif pci_type == _PCI_FIRST:
                self._diag_first(message)
            elif pci_type == _PCI_CONSECUTIVE:
                if self._diag_consecutive(message):
                    self._diag_multi()
        elif pid == self._node_address:
            logger.warning("Unhandled message for me.")

    def _is_matching_identifier(self, candidate: bytes) -> bool:
        return bytes(candidate[:4]) == bytes(self.lin_identifier())[:4]

    def _diag_single(self, message: bytes, raw: bytes) -> None:
        my_node_address = message[0] == self._node_address
        broadcast_address = message[0] == LIN_NAD_BROADCAST
        message_length = message[1]
        service_identifier = message[2]
        if message_length > 6:
            logger.error("LIN Protocol issue: Single frame message too long.")
            return

        if service_identifier == LIN_SID_READ_BY_IDENTIFIER and message_length == 6:
            if self._is_matching_identifier(message[4:8]):
                response = self._new_response()
                field = self.lin_read_field_by_identifier(message[3])
                if field is not None:
                    field = bytes(field)
                    if len(field) > FIELD_LENGTH:
                        raise ValueError(f"identifier field holds at most {FIELD_LENGTH} bytes, got {len(field)}")
                    response[1] = 6
                    response[2] = LIN_SID_READ_BY_IDENTIFIER_RESPONSE
                    response[3:8] = field.ljust(FIELD_LENGTH, b"\x00")
                else:
                    response[1] = 3
                    response[2] = LIN_SID_NEGATIVE_RESPONSE
                    response[3] = LIN_SID_READ_BY_IDENTIFIER
                    response[4] = LIN_NRC_NOT_SUPPORTED
                self._queue_response(response)
        elif my_node_address and service_identifier == LIN_SID_HEARTBEAT and message_length >= 5:
            response = self._new_response()
            response[1] = 2
            response[2] = LIN_SID_HEARTBEAT_RESPONSE
            response[3] = 0x00
            self._queue_response(response)
            self.lin_heartbeat()
        elif broadcast_address and service_identifier == LIN_SID_ASSIGN_NAD and message_length == 6:
            if self._is_matching_identifier(message[3:7]):
                logger.info("Assigned new SID %02X", message[7])
                # The response still carries the old node address.
                response = self._new_response()
                response[1] = 1
                response[2] = LIN_SID_ASSIGN_NAD_RESPONSE
                self._queue_response(response)
                self._node_address = message[7]
        elif my_node_address:
            logger.debug("SID %02X  MY  - %s - Unhandled", service_identifier, format_hex_pretty(raw))
        elif broadcast_address:
            logger.debug("SID %02X  BC  - %s - Unhandled", service_identifier, format_hex_pretty(raw))

    def _diag_first(self, message: bytes) -> None:
        # Only the length byte counts; the upper nibble of the PCI is not added.
        message_length = message[2]
        if message_length < MULTI_PDU_MIN_LENGTH:
            logger.error("LIN Protocol issue: Multi frame message too short.")
            return
        if message_length > MULTI_PDU_MAX_LENGTH:
            logger.error("LIN Protocol issue: Multi frame message too long.")
            return
        self._multi_expected = message_length
        self._multi_buffer = bytearray(message[3:8])
        self._multi_counter = 1

    def _diag_consecutive(self, message: bytes) -> bool:
        if len(self._multi_buffer) >= self._multi_expected:
            return False
        if message[1] & 0x0F != self._multi_counter:
            return False
        # The frame counter has four bits and wraps around.
        self._multi_counter = (self._multi_counter + 1) & 0x0F
        remaining = self._multi_expected - len(self._multi_buffer)
        self._multi_buffer.extend(message[2:8][:remaining])
        return len(self._multi_buffer) == self._multi_expected

    def _diag_multi(self) -> None:
        request = bytes(self._multi_buffer)
        logger.debug("Multi package request  %s", format_hex_pretty(request))
        answer = self.lin_multiframe_received(request)
        if not answer:
            return
        answer = bytes(answer)
        if len(answer) > MAX_ANSWER_LENGTH:
            raise ValueError(f"multi-frame answer holds at most {MAX_ANSWER_LENGTH} bytes, got {len(answer)}")
        logger.debug("Multi package response %s", format_hex_pretty(answer))

        answer_len = len(answer)
        response = self._new_response()
        if answer_len <= 6:
            response[1] = answer_len
            response[2] = answer[0] | LIN_SID_RESPONSE
            response[3 : 2 + answer_len] = answer[1:]
            self._queue_response(response)
            return

        response[1] = _PCI_FIRST | ((answer_len >> 8) & 0x0F)
        response[2] = answer_len & 0xFF
        response[3] = answer[0] | LIN_SID_RESPONSE
        response[4:8] = answer[1:5]
        self._queue_response(response)

        for index, start in enumerate(range(5, answer_len, 6)):
            chunk = answer[start : start + 6]
            response = self._new_response()
            response[1] = ((index + 1) & 0x0F) | _PCI_CONSECUTIVE
            response[2 : 2 + len(chunk)] = chunk
            self._queue_response(response)