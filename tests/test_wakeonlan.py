import pytest

from iotmods.wakeonlan import (
    WakeOnLan,
    broadcast_address,
    is_valid_mac,
    magic_packet,
    main,
    parse_mac,
)

MAC = "02:00:00:00:00:01"
SECURE = "02:00:00:00:00:02"


class Recorder:
    def __init__(self):
        self.calls = []

    def __call__(self, packet, address, port):
        self.calls.append((packet, address, port))


@pytest.mark.parametrize(
    "mac,expected",
    [
        ("02:00:00:00:00:01", True),
        ("020000000001", True),
        ("0a:bb:cc:dd:ee:ff", True),
        ("02-00-00-00-00-01", False),
        ("02:00:00:00:00", False),
        ("02:00:00:00:00:0G", False),
        ("", False),
    ],
)
def test_is_valid_mac(mac, expected):
    assert is_valid_mac(mac) is expected


def test_parse_mac_roundtrip():
    raw = parse_mac(MAC)
    assert len(raw) == 6
    assert ":".join(f"{b:02x}" for b in raw) == MAC


def test_parse_mac_invalid():
    with pytest.raises(ValueError):
        parse_mac("nothex")


def test_magic_packet_layout():
    packet = magic_packet(MAC)
    assert len(packet) == 102
    assert packet[:6] == b"\xff" * 6
    assert packet[6:] == parse_mac(MAC) * 16


def test_magic_packet_secure_on():
    packet = magic_packet(MAC, SECURE)
    assert len(packet) == 108
    assert packet[-6:] == parse_mac(SECURE)
    assert packet[:102] == magic_packet(MAC)


def test_broadcast_address():
    assert broadcast_address("192.168.1.10", "255.255.255.0") == "192.168.1.255"


def test_broadcast_address_keeps_network_part():
    result = broadcast_address("10.1.2.3", "255.0.0.0")
    assert result.startswith("10.")
    assert result.endswith(".255")


def test_send_repeats_packet():
    rec = Recorder()
    wol = WakeOnLan(MAC, repeats=3, delay=0, broadcast="10.0.0.255", sender=rec)
    packet = wol.send(MAC)
    assert len(rec.calls) == 3
    assert all(call == (packet, "10.0.0.255", 9) for call in rec.calls)


def test_invalid_config_mac_is_cleared():
    wol = WakeOnLan('"zz"', sender=Recorder())
    assert wol.mac == ""


def test_config_quotes_stripped():
    wol = WakeOnLan(f'"{MAC}"', sender=Recorder())
    assert wol.mac == MAC


def test_set_value_sends_configured_target():
    rec = Recorder()
    wol = WakeOnLan(MAC, port=7, repeats=1, delay=0, sender=rec)
    assert wol.set_value(1) == "1"
    assert rec.calls == [(magic_packet(MAC), "255.255.255.255", 7)]


def test_set_value_secure_on():
    rec = Recorder()
    wol = WakeOnLan(MAC, SECURE, repeats=1, delay=0, sender=rec)
    wol.set_value(1)
    assert rec.calls[0][0] == magic_packet(MAC, SECURE)


def test_set_value_zero_does_nothing():
    rec = Recorder()
    wol = WakeOnLan(MAC, repeats=1, delay=0, sender=rec)
    assert wol.set_value(0) == "0"
    assert rec.calls == []


def test_set_value_without_mac_raises():
    wol = WakeOnLan("", sender=Recorder())
    with pytest.raises(ValueError):
        wol.set_value(1)
    assert wol.value == 1


def test_execute_variants():
    rec = Recorder()
    wol = WakeOnLan(MAC, repeats=1, delay=0, sender=rec)
    wol.execute("mac", [MAC])
    wol.execute("mac", [MAC, 40000])
    wol.execute("mac", [MAC, SECURE, 7])
    assert [c[2] for c in rec.calls] == [9, 40000, 7]
    assert rec.calls[2][0] == magic_packet(MAC, SECURE)


def test_execute_invalid_raises():
    wol = WakeOnLan(MAC, repeats=1, delay=0, sender=Recorder())
    with pytest.raises(ValueError):
        wol.execute("mac", ["bad"])
    with pytest.raises(ValueError):
        wol.execute("mac", [MAC, "bad", 9])


def test_execute_unknown_command_sends_nothing():
    rec = Recorder()
    wol = WakeOnLan(MAC, sender=rec)
    assert wol.execute("other", [MAC]) is None
    assert rec.calls == []


def test_main_rejects_invalid_mac(capsys):
    assert main(["not-a-mac"]) == 2
    assert "invalid" in capsys.readouterr().err