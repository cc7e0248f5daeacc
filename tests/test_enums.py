import pytest

from linbox.enums import (
    AirconOperation,
    ElectricPowerLevel,
    EnergyMix,
    HeatingMode,
    OperatingStatus,
    TargetTemp,
    TrumaCompany,
    TrumaDevice,
)


def test_source_values():
    assert HeatingMode(0xB) is HeatingMode.BOOST
    assert TrumaCompany(0x1A) is TrumaCompany.ALDE
    assert AirconOperation(0x72) is AirconOperation.AUTO
    assert ElectricPowerLevel(1800) is ElectricPowerLevel.LEVEL_1800


def test_aliases_share_members():
    assert EnergyMix(0b01) is EnergyMix.DIESEL
    assert EnergyMix(0b01) is EnergyMix.GAS
    assert OperatingStatus(0x0) is OperatingStatus.OFF
    assert OperatingStatus(0x0) is OperatingStatus.UNSET
    assert TrumaDevice(0x05) is TrumaDevice.HEATER_CP6
    assert TrumaDevice(0x05) is TrumaDevice.CPPLUS_VARIO


def test_target_temp_ranges_are_aliases():
    assert TargetTemp((5 + 273) * 10) is TargetTemp.ROOM_MIN
    assert TargetTemp((5 + 273) * 10) is TargetTemp.TEMP_05C
    assert TargetTemp((30 + 273) * 10) is TargetTemp.ROOM_MAX
    assert TargetTemp((30 + 273) * 10) is TargetTemp.TEMP_30C
    assert TargetTemp((16 + 273) * 10) is TargetTemp.AIRCON_MIN
    assert TargetTemp((16 + 273) * 10) is TargetTemp.TEMP_16C
    assert TargetTemp((31 + 273) * 10) is TargetTemp.AIRCON_MAX
    assert TargetTemp((31 + 273) * 10) is TargetTemp.TEMP_31C
    assert TargetTemp((18 + 273) * 10) is TargetTemp.AIRCON_AUTO_MIN
    assert TargetTemp((18 + 273) * 10) is TargetTemp.TEMP_18C
    assert TargetTemp((25 + 273) * 10) is TargetTemp.AIRCON_AUTO_MAX
    assert TargetTemp((25 + 273) * 10) is TargetTemp.TEMP_25C


def test_degree_steps_are_ten_tenths():
    temps = [member for name, member in TargetTemp.__members__.items() if name.startswith("TEMP_")]
    assert len(temps) == 27
    assert all(b - a == 10 for a, b in zip(temps, temps[1:]))


def test_water_levels_ordered():
    levels = [TargetTemp(value) for value in (0, (40 + 273) * 10, (60 + 273) * 10, (200 + 273) * 10)]
    assert levels == [TargetTemp.OFF, TargetTemp.WATER_ECO, TargetTemp.WATER_HIGH, TargetTemp.WATER_BOOST]
    assert levels == sorted(levels)


def test_unknown_value_rejected():
    with pytest.raises(ValueError):
        HeatingMode(0x55)


def test_lookup_by_value():
    assert TrumaDevice(0x04) is TrumaDevice.CPPLUS_COMBI
    assert EnergyMix(0b11) is EnergyMix.MIX