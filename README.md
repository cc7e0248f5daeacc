# linbox

`linbox` is a LIN bus slave node written in pure Python. You feed it the bytes
that a UART receives. It works out where each frame starts and ends, checks the
parity of the protected identifier and the checksum of each frame, and answers
the master's orders through a write callable that you supply. On top of this it
handles the LIN diagnostic transport layer: read by identifier, heartbeat,
assign NAD, and multi-frame requests and responses.

## Installation

```
pip install .
```

To install the test dependencies as well, use `pip install .[test]`.

## Modules

- `linbox.enums` holds the enumerations of the values that a Truma CP Plus
  panel exchanges: `HeatingMode`, `TargetTemp` (tenths of a kelvin),
  `EnergyMix`, `ElectricPowerLevel`, `TrumaDevice`, `TrumaCompany`,
  `AirconMode`, `AirconOperation`, `ClockMode`, `TimerActive` and others.
- `linbox.logmsg` holds the deferred log records `LogMessage` and
  `LogMessageType`, and the extra log levels `VERBOSE` and `VERY_VERBOSE`. It
  also holds `format_hex_pretty`, which renders bytes as dotted upper-case hex,
  for example `03.06.B9`. When there are more than four bytes it adds the
  count, as in `01.02.03.04.05 (5)`.
- `linbox.listener` holds `LinBusListener`, the abstract frame reader. It also
  holds `LinChecksum` (`VERSION_1` classic or `VERSION_2` enhanced),
  `ReadState`, `LinMessage`, and the helpers `data_checksum`, `addr_parity`
  and `describe`.
- `linbox.protocol` holds `LinBusProtocol`, an abstract slave node that answers
  diagnostic frames (master request `0x3C`, slave response `0x3D`).

## Writing a node

Subclass `LinBusProtocol` and implement the four parts that belong to your
device:

```python
from linbox.listener import data_checksum
from linbox.protocol import LinBusProtocol


class MyNode(LinBusProtocol):
    def lin_identifier(self):
        return bytes([0x17, 0x46, 0x00, 0x1F])

    def lin_heartbeat(self):
        print("heartbeat")

    def lin_read_field_by_identifier(self, identifier):
        if identifier == 0x00:
            return bytes([0x17, 0x46, 0x00, 0x1F, 0x01])
        return None  # answered with a negative response

    def lin_multiframe_received(self, message):
        return b""  # nothing to answer


sent = bytearray()
node = MyNode(write=sent.extend)

# The master sends a heartbeat to node address 0x03 on frame 0x3C.
payload = bytes([0x03, 0x06, 0xB9, 0x00, 0x1F, 0x00, 0x00, 0xFF])
node.feed(bytes([0x00, 0x55, 0x3C]) + payload + bytes([data_checksum(payload)]))
node.process_lin_msg_queue()  # calls lin_heartbeat and queues the reply

# The master polls the slave response frame (0x3D, with parity 0x7D).
node.feed(bytes([0x00, 0x55, 0x7D]))
# sent now holds 03 02 F9 00 FF FF FF FF followed by the checksum.
```

The constructor of `LinBusListener` takes these arguments:

- `write`: called with the answer bytes and their checksum.
- `baud_rate`: 9600 by default. It sets the inter-byte timeout.
- `checksum`: `LinChecksum.VERSION_2` by default.
- `observer_mode`: when true, the node reads frames but never writes.
- `fault_pin`: a callable that returns `False` while the transceiver reports a
  fault.
- `clock`: a callable that returns microseconds. The default is a monotonic
  clock.

To run a node:

- Pass the received bytes to `feed()`.
- Call `handle_break()` when the UART reports a break condition.
- Call `process_lin_msg_queue()` to pass the complete frames from the master
  to `lin_message_received`.
- Call `process_log_queue()` to emit the queued diagnostics through the
  `logging` logger `linbox.listener`.
- Call `update()` periodically so that the node polls the fault pin.

While a fault lasts, the node discards the received bytes.

`LinBusProtocol` gives you these members:

- `node_address`: the address of the node. It starts at `0x03` and changes
  when the master sends an assign NAD request.
- `pending_responses`: the replies that are waiting to be sent.
- `lin_reset_device()`: drops all of the replies that are waiting.

## What the package does not do

The package does not open a serial port. You read the bytes and hand them to
`feed()` yourself.

The enumerations in `linbox.enums` describe the values that a CP Plus panel
exchanges. The package has no codec for the panel's status frames, however,
and no application layer that keeps the state of a heater, timer, clock or air
conditioner. `lin_multiframe_received` receives the reassembled request as raw
bytes, and your subclass decides what to answer.