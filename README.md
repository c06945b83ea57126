# iotmods

Small home-automation building blocks in plain Python. They use only the
standard library.

- `iotmods.wakeonlan`: checks MAC addresses, builds Wake-on-LAN magic packets
  (with an optional SecureOn password) and sends them over UDP broadcast.
- `iotmods.noise`: gathers ADC samples and works out noise statistics: mean,
  min/max, RMS, median, peak, peak-to-peak, peak voltage and an approximate dB
  level.
- `iotmods.timeutils`: calendar helpers on Unix timestamps, taken in UTC. They
  convert dates to timestamps and back, parse `DD.MM.YY hh:mm:ss`, detect
  European summer time, and give week numbers, weekdays, days in a month and
  the date of Orthodox Easter.
- `iotmods.softrtc`: a software real-time clock (`SoftRTC`). It tracks where
  the current time came from (`SyncStatus`: restored, manual, browser, NTP and
  so on), can restore a stored timestamp, and switches between winter and
  summer zone offsets. `SoftRTCSyncStatus` reports status changes.
- `iotmods.solar`: the position of the Sun (azimuth, elevation, right
  ascension, declination, sidereal time, hour angle from transit) and the times
  of sunrise, transit and sunset. `SolarCalculator` answers these as scenario
  commands.

## Installation

```
pip install .
```

## Waking a machine from the command line

```
iotmods-wol 02:00:00:00:00:01
```

Options: `--secure-on`, `--port` (default 9), `--repeats` (default 3) and
`--broadcast` (default `255.255.255.255`). The command exits with status 2 for
an invalid MAC address or SecureOn password, and with status 1 if sending fails.

## Using the library

```python
from iotmods.wakeonlan import WakeOnLan, broadcast_address, is_valid_mac, magic_packet

assert is_valid_mac("02:00:00:00:00:01")
packet = magic_packet("02:00:00:00:00:01")          # 102 bytes
print(broadcast_address("192.168.1.20", "255.255.255.0"))  # 192.168.1.255

wol = WakeOnLan("02:00:00:00:00:01", port=9, repeats=3)
wol.set_value(1)   # sends to the configured MAC; raises ValueError if none is valid
```

`WakeOnLan` takes a `sender` callable `(packet, address, port)`, which replaces
the UDP socket, for example in tests.

```python
from iotmods.noise import NoiseAdc, analyze_samples

stats = analyze_samples([512, 530, 498, 505, 520], 0.02, 3.3, 4095.0)
print(stats.get("RMS"), stats.get("db"))

adc = NoiseAdc(reader=lambda pin: 2048, pin=34, steps=50, interval=1000, parameter="db")
```

`analyze_samples` returns `None` when it has fewer than five samples.

```python
from iotmods.timeutils import format_unix_time, orthodox_easter, unix_from_string

print(orthodox_easter(2024))                  # datetime.date(2024, 5, 5)
print(format_unix_time(0))                    # 01.01.70 00:00:00
print(unix_from_string("01.01.70 00:00:00"))  # 0
```

```python
from iotmods.softrtc import SoftRTC

rtc = SoftRTC(timezone=3)
rtc.on_module_order("setUTime", "1700000000")
print(rtc.execute("getTime", []), rtc.sync_status)
```

```python
from iotmods.solar import JulianDay, horizontal_coordinates, hours_to_string, sunrise_sunset

transit, sunrise, sunset = sunrise_sunset(2024, 6, 21, 55.75, 37.62)
print(hours_to_string(sunrise + 3))
azimuth, elevation = horizontal_coordinates(JulianDay(2024, 6, 21, 12, 0, 0), 55.75, 37.62)
```

## What the package does not do

- It reads no ADC hardware. `NoiseAdc` calls the `reader` function you give it.
- It runs no NTP client. Call `SoftRTC.ntp_synced()` when your own
  synchronisation succeeds.
- It does not set the operating-system clock. `SystemClock` keeps an offset
  inside the process.
- It stores no settings or values. `SoftRTC` takes the stored timestamp as
  `stored_value` and reports zone changes through `on_timezone_change`. Saving
  them is up to the caller.

## Running the tests

```
pip install .[test]
pytest
```