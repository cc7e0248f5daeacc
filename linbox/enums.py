"""Enumerations of the values carried in Truma status frames."""

from __future__ import annotations

from enum import IntEnum


def _kelvin_tenths(celsius: int) -> int:
    return (celsius + 273) * 10


class HeatingMode(IntEnum):
    """Room heating mode."""

    OFF = 0x0
    # Combi
    ECO = 0x1
    # Vario Heat
    VARIO_HEAT_NIGHT = 0x2
    # Vario Heat
    VARIO_HEAT_AUTO = 0x3
    # Combi
    HIGH = 0xA
    # Combi, Vario Heat
    BOOST = 0xB


class ElectricPowerLevel(IntEnum):
    """Electric heating power in watts."""

    LEVEL_0 = 0
    LEVEL_900 = 900
    LEVEL_1800 = 1800


class TargetTemp(IntEnum):
    """Target temperatures, encoded in tenths of a kelvin."""

    OFF = 0x0

    WATER_ECO = _kelvin_tenths(40)
    WATER_HIGH = _kelvin_tenths(60)
    WATER_BOOST = _kelvin_tenths(200)

    TEMP_05C = _kelvin_tenths(5)
    TEMP_06C = _kelvin_tenths(6)
    TEMP_07C = _kelvin_tenths(7)
    TEMP_08C = _kelvin_tenths(8)
    TEMP_09C = _kelvin_tenths(9)
    TEMP_10C = _kelvin_tenths(10)
    TEMP_11C = _kelvin_tenths(11)
    TEMP_12C = _kelvin_tenths(12)
    TEMP_13C = _kelvin_tenths(13)
    TEMP_14C = _kelvin_tenths(14)
    TEMP_15C = _kelvin_tenths(15)
    TEMP_16C = _kelvin_tenths(16)
    TEMP_17C = _kelvin_tenths(17)
    TEMP_18C = _kelvin_tenths(18)
    TEMP_19C = _kelvin_tenths(19)
    TEMP_20C = _kelvin_tenths(20)
    TEMP_21C = _kelvin_tenths(21)
    TEMP_22C = _kelvin_tenths(22)
    TEMP_23C = _kelvin_tenths(23)
    TEMP_24C = _kelvin_tenths(24)
    TEMP_25C = _kelvin_tenths(25)
    TEMP_26C = _kelvin_tenths(26)
    TEMP_27C = _kelvin_tenths(27)
    TEMP_28C = _kelvin_tenths(28)
    TEMP_29C = _kelvin_tenths(29)
    TEMP_30C = _kelvin_tenths(30)
    TEMP_31C = _kelvin_tenths(31)

    ROOM_MIN = _kelvin_tenths(5)
    ROOM_MAX = _kelvin_tenths(30)

    AIRCON_MIN = _kelvin_tenths(16)
    AIRCON_MAX = _kelvin_tenths(31)

    AIRCON_AUTO_MIN = _kelvin_tenths(18)
    AIRCON_AUTO_MAX = _kelvin_tenths(25)


class EnergyMix(IntEnum):
    """Energy source used by the heater."""

    NONE = 0b00
    GAS = 0b01
    DIESEL = 0b01
    ELECTRICITY = 0b10
    MIX = 0b11


class OperatingStatus(IntEnum):
    """Heater operating status."""

    UNSET = 0x0
    OFF = 0x0
    WARNING = 0x1
    START_OR_COOL_DOWN = 0x4
    ON_5 = 0x5
    ON_6 = 0x6
    ON_7 = 0x7
    ON_8 = 0x8
    ON_9 = 0x9


class OperatingUnits(IntEnum):
    """Temperature units shown on the panel."""

    CELSIUS = 0x0
    FAHRENHEIT = 0x1


class Language(IntEnum):
    """Panel language."""

    GERMAN = 0x0
    ENGLISH = 0x1
    FRENCH = 0x2
    ITALY = 0x3


class ResponseAckResult(IntEnum):
    """Result code of an acknowledge frame."""

    OKAY = 0x0
    ERROR_INVALID_MSG = 0x2
    # The response status frame message type is unknown.
    ERROR_INVALID_ID = 0x3


class ClockMode(IntEnum):
    """Clock display mode."""

    CLOCK_24H = 0x0
    CLOCK_12H = 0x1


class TimerActive(IntEnum):
    """Whether the timer is enabled."""

    ON = 0x1
    OFF = 0x0


class ClockSource(IntEnum):
    """Where the panel clock was last set from."""

    MANUAL = 0x1
    PROG = 0x2


class TrumaCompany(IntEnum):
    """Manufacturer identifier found in the message preamble."""

    UNKNOWN = 0x00
    TRUMA = 0x1E
    ALDE = 0x1A


class TrumaDevice(IntEnum):
    """Device type, as reported in the first software revision byte."""

    UNKNOWN = 0x00
    # Saphir Compact AC
    AIRCON_DEVICE = 0x01
    # CP Plus for Combi
    CPPLUS_COMBI = 0x04
    # CP Plus for Vario Heat
    CPPLUS_VARIO = 0x05
    # Combi 4
    HEATER_COMBI4 = 0x02
    # Vario Heat Comfort (non E)
    HEATER_VARIO = 0x03
    # Old CP6 (MY 2015)
    HEATER_CP6 = 0x05
    # Combi 6 D
    HEATER_COMBI6D = 0x06


class TrumaDeviceState(IntEnum):
    """Whether a registered device is reachable."""

    OFFLINE = 0x00
    ONLINE = 0x01


class AirconMode(IntEnum):
    """Air conditioner mode."""

    OFF = 0x00
    AC_VENTILATION = 0x04
    AC_COOLING = 0x05


class AirconOperation(IntEnum):
    """Air conditioner operation."""

    AC_ONLY = 0x71
    # Heater and aircon
    AUTO = 0x72