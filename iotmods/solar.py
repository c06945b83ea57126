"""Solar position and sunrise/sunset calculations."""

from __future__ import annotations

import logging
import math
import re
import time
from dataclasses import dataclass
from datetime import datetime, timezone as _tz
from typing import Callable, Optional, Sequence, Tuple

log = logging.getLogger(__name__)

# Altitude of the sun's upper limb at rise and set, refraction included.
SUNRISE_ALTITUDE = -0.833
_J2000 = 2451545.0
_SIDEREAL_RATE = 360.98564736629
_NO_TIME = "--:--"
_PARAMETERS = ("azimuth", "elevation", "sunArcFromTransit")
_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")

Clock = Callable[[], float]
EventHandler = Callable[[float], None]


def hours_to_string(hours: float) -> str:
    """Format fractional hours as ``HH:MM``, rounded to the minute."""
    if math.isnan(hours) or math.isinf(hours):
        return _NO_TIME
    minutes = int(round(hours * 60)) % (24 * 60)
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def wrap_to_360(angle: float) -> float:
    """Reduce an angle to the range [0, 360)."""
    return angle % 360.0


def wrap_to_180(angle: float) -> float:
    """Reduce an angle to the range [-180, 180)."""
    return wrap_to_360(angle + 180.0) - 180.0


@dataclass
class JulianDay:
    """A Julian date split into the day at 0h UT and the fraction of the day."""

    jd0: float
    m: float

    def __init__(
        self,
        year: int,
        month: int,
        day: int,
        hour: float = 0,
        minute: float = 0,
        second: float = 0,
    ) -> None:
        year, month, day = int(year), int(month), int(day)
        if month <= 2:
            year -= 1
            month += 12
        jd0 = int(365.25 * (year + 4716)) + int(30.6001 * (month + 1)) + day - 1524.5
        if jd0 > 2299160.4:
            century = year // 100
            jd0 += 2 - century + century // 4
        self.jd0 = jd0
        self.m = (hour + minute / 60.0 + second / 3600.0) / 24.0

    @property
    def value(self) -> float:
        """The full Julian date."""
        return self.jd0 + self.m


def julian_century(jd: JulianDay) -> float:
    """Return Julian centuries elapsed since J2000.0."""
    return (jd.jd0 - _J2000 + jd.m) / 36525.0


def solar_coordinates(t: float) -> Tuple[float, float]:
    """Return the sun's apparent right ascension and declination in degrees."""
    mean_long = wrap_to_360(280.46646 + t * (36000.76983 + t * 0.0003032))
    anomaly = math.radians(wrap_to_360(357.52911 + t * (35999.05029 - 0.0001537 * t)))
    centre = (
        math.sin(anomaly) * (1.914602 - t * (0.004817 + 0.000014 * t))
        + math.sin(2 * anomaly) * (0.019993 - 0.000101 * t)
        + math.sin(3 * anomaly) * 0.000289
    )
    omega = math.radians(125.04 - 1934.136 * t)
    apparent_long = math.radians(mean_long + centre - 0.00569 - 0.00478 * math.sin(omega))
    mean_obliquity = 23 + (26 + (21.448 - t * (46.815 + t * (0.00059 - t * 0.001813))) / 60) / 60
    obliquity = math.radians(mean_obliquity + 0.00256 * math.cos(omega))
    ra = math.degrees(
        math.atan2(math.cos(obliquity) * math.sin(apparent_long), math.cos(apparent_long))
    )
    dec = math.degrees(math.asin(math.sin(obliquity) * math.sin(apparent_long)))
    return wrap_to_360(ra), dec


def mean_sidereal_time(jd: JulianDay) -> float:
    """Return the Greenwich mean sidereal time in degrees."""
    t = julian_century(jd)
    gmst = (
        100.46061837
        + 0.98564736629 * (jd.jd0 - _J2000)
        + t * t * (0.000387933 - t / 38710000.0)
    )
    return wrap_to_360(wrap_to_360(gmst) + _SIDEREAL_RATE * jd.m)


def _refraction(elevation: float) -> float:
    if elevation <= -1.0:
        return 0.0
    arcmin = 1.02 / math.tan(math.radians(elevation + 10.3 / (elevation + 5.11)))
    return arcmin / 60.0


def horizontal_coordinates(
    jd: JulianDay, latitude: float, longitude: float
) -> Tuple[float, float]:
    """Return the sun's azimuth (from north) and refracted elevation in degrees."""
    ra, dec = solar_coordinates(julian_century(jd))
    hour_angle = math.radians(mean_sidereal_time(jd) + longitude - ra)
    lat = math.radians(latitude)
    dec_r = math.radians(dec)
    azimuth = math.degrees(
        math.atan2(
            math.sin(hour_angle),
            math.cos(hour_angle) * math.sin(lat) - math.tan(dec_r) * math.cos(lat),
        )
    )
    elevation = math.degrees(
        math.asin(
            math.sin(lat) * math.sin(dec_r)
            + math.cos(lat) * math.cos(dec_r) * math.cos(hour_angle)
        )
    )
    return wrap_to_360(azimuth + 180.0), elevation + _refraction(elevation)


def _at_fraction(base: JulianDay, fraction: float) -> JulianDay:
    moment = JulianDay.__new__(JulianDay)
    moment.jd0 = base.jd0
    moment.m = fraction
    return moment


def _event_time(
    base: JulianDay, latitude: float, longitude: float, direction: int
) -> float:
    """Iterate to the UT hour of transit (0), rise (-1) or set (+1)."""
    fraction = 0.5 - longitude / 360.0
    lat = math.radians(latitude)
    for _ in range(6):
        moment = _at_fraction(base, fraction)
        ra, dec = solar_coordinates(julian_century(moment))
        hour_angle = wrap_to_180(mean_sidereal_time(moment) + longitude - ra)
        target = 0.0
        if direction:
            dec_r = math.radians(dec)
            cos_h0 = (
                math.sin(math.radians(SUNRISE_ALTITUDE)) - math.sin(lat) * math.sin(dec_r)
            ) / (math.cos(lat) * math.cos(dec_r))
            if abs(cos_h0) > 1:
                return math.nan
            target = direction * math.degrees(math.acos(cos_h0))
        fraction += wrap_to_180(target - hour_angle) / _SIDEREAL_RATE
    return fraction * 24.0


def sunrise_sunset(
    year: int, month: int, day: int, latitude: float, longitude: float
) -> Tuple[float, float, float]:
    """Return (transit, sunrise, sunset) in UT hours; NaN when the sun never crosses the horizon."""
    base = JulianDay(year, month, day)
    return (
        _event_time(base, latitude, longitude, 0),
        _event_time(base, latitude, longitude, -1),
        _event_time(base, latitude, longitude, 1),
    )


def sun_arc_from_transit(jd: JulianDay, longitude: float) -> float:
    """Return the sun's local hour angle: 0 at transit, positive afterwards."""
    ra, _ = solar_coordinates(julian_century(jd))
    gha = wrap_to_360(mean_sidereal_time(jd) - ra)
    return wrap_to_180(gha + longitude)


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _leading_int(text: object) -> int:
    match = _LEADING_INT_RE.match(str(text))
    return int(match.group(1)) if match else 0


def _noop_event(value: float) -> None:
    return None


class SolarCalculator:
    """Reports solar position for a fixed place and answers scenario queries.

    *clock* returns the current Unix time; ``None`` means the time is not
    synchronised. *timezone* is the local offset from UTC in hours.
    """

    def __init__(
        self,
        latitude: float = 0.0,
        longitude: float = 0.0,
        parameter: str = "",
        timezone: int = 0,
        clock: Optional[Clock] = time.time,
        on_event: Optional[EventHandler] = None,
    ) -> None:
        self.latitude = float(latitude)
        self.longitude = float(longitude)
        self.parameter = parameter
        self.timezone = int(timezone)
        self.clock = clock
        self.on_event: EventHandler = on_event or _noop_event
        self.value: Optional[float] = None

    @property
    def synced(self) -> bool:
        return self.clock is not None

    def _now(self) -> datetime:
        assert self.clock is not None
        return datetime.fromtimestamp(int(self.clock()), tz=_tz.utc)

    def _now_jd(self) -> JulianDay:
        now = self._now()
        return JulianDay(now.year, now.month, now.day, now.hour, now.minute, now.second)

    def do_by_interval(self) -> Optional[float]:
        """Compute the configured parameter for now; None when time is not synced."""
        if not self.synced:
            return None
        if self.parameter not in _PARAMETERS:
            raise ValueError(f"{self.parameter} is not correct parameter")
        jd = self._now_jd()
        if self.parameter == "sunArcFromTransit":
            result = sun_arc_from_transit(jd, self.longitude)
        else:
            azimuth, elevation = horizontal_coordinates(jd, self.latitude, self.longitude)
            result = azimuth if self.parameter == "azimuth" else elevation
        self.value = result
        self.on_event(result)
        return result

    def _date(self, params: Sequence) -> Tuple[int, int, int]:
        if not params and self.synced:
            now = self._now()
            return now.year, now.month, now.day
        if len(params) == 3 and all(_is_number(p) for p in params):
            return int(params[2]), int(params[1]), int(params[0])
        raise ValueError("wrong parameters or time is not synched")

    def _moment(self, params: Sequence) -> JulianDay:
        if not params and self.synced:
            return self._now_jd()
        if len(params) > 3:
            day, month, year, hour = (int(float(p)) for p in params[:4])
            minute = int(float(params[4])) if len(params) > 4 else 0
            second = int(float(params[5])) if len(params) > 5 else 0
            return JulianDay(year, month, day, hour, minute, second)
        raise ValueError("wrong parameters or time is not synched")

    def execute(self, command: str, params: Sequence):
        """Run a scenario command and return its result."""
        if command in ("sunrise", "transit", "sunset"):
            year, month, day = self._date(params)
            transit, sunrise, sunset = sunrise_sunset(
                year, month, day, self.latitude, self.longitude
            )
            hours = {"sunrise": sunrise, "transit": transit, "sunset": sunset}[command]
            return hours_to_string(hours + self.timezone)
        if command in ("azimuth", "elevation"):
            azimuth, elevation = horizontal_coordinates(
                self._moment(params), self.latitude, self.longitude
            )
            return azimuth if command == "azimuth" else elevation
        if command == "sunArcFromTransit":
            return sun_arc_from_transit(self._moment(params), self.longitude)
        if command == "jd":
            return self._moment(params).value
        if command == "GMST":
            return mean_sidereal_time(self._moment(params))
        if command == "LST":
            return wrap_to_360(mean_sidereal_time(self._moment(params)) + self.longitude)
        if command in ("ra", "dec"):
            ra, dec = solar_coordinates(julian_century(self._moment(params)))
            return ra if command == "ra" else dec
        if command == "getHour" and len(params) == 1:
            return _leading_int(str(params[0]).split(":", 1)[0]) - self.timezone
        if command == "getMinute" and len(params) == 1:
            return _leading_int(str(params[0]).rsplit(":", 1)[-1])
        raise ValueError(f"unknown command or wrong parameters: {command}")