"""A software real-time clock that tracks where the system time came from."""

from __future__ import annotations

import enum
import logging
import re
import time
from datetime import datetime, timezone as _tz
from typing import Callable, Optional, Sequence, Union

from iotmods.timeutils import (
    day_of_week_number,
    days_in_month,
    format_unix_time,
    is_dst,
    orthodox_easter,
    unix_from_string,
    unix_from_ymdhms,
    week_of_year,
)

log = logging.getLogger(__name__)

EventHandler = Callable[[Union[str, int], bool], None]

# Times above this are taken to have been set before the clock started.
_PLAUSIBLE_TIME = 100000
# A jump larger than this (in seconds) counts as the time having been changed.
_JUMP_TOLERANCE = 2

_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")


class SyncStatus(enum.IntEnum):
    """Where the current system time came from."""

    NOT_SET = 0
    BEFORE_SOFTRTC = 1
    RESTORED = 2
    MANUAL = 3
    FROM_BROWSER_OR_NTP = 4
    FROM_BROWSER = 5
    NTP_JUST = 6
    NTP = 7


class SystemClock:
    """Process-local clock: wall time that can be set, plus monotonic millis."""

    def __init__(self) -> None:
        self._offset = 0.0

    def now(self) -> int:
        """Return the current Unix time in whole seconds."""
        return int(time.time() + self._offset)

    def set(self, unix_time: int) -> None:
        """Make ``now()`` report *unix_time* from this moment on."""
        self._offset = int(unix_time) - time.time()

    def millis(self) -> int:
        """Return a monotonic millisecond counter."""
        return int(time.monotonic() * 1000)


def _leading_int(text: object) -> int:
    match = _LEADING_INT_RE.match(str(text))
    return int(match.group(1)) if match else 0


class SoftRTC:
    """Keeps the clock set from NTP, manual input or a stored timestamp."""

    def __init__(
        self,
        clock: Optional[SystemClock] = None,
        timezone: int = 0,
        ticker: bool = False,
        interval: int = 60,
        winter_time: int = 2,
        summer_time: int = 3,
        stored_value: Optional[str] = None,
        on_event: Optional[EventHandler] = None,
        on_timezone_change: Optional[Callable[[int], None]] = None,
    ) -> None:
        self.clock = clock if clock is not None else SystemClock()
        self.timezone = int(timezone)
        self.ticker = ticker
        self.interval = int(interval)
        self.winter_time = int(winter_time)
        self.summer_time = int(summer_time)
        self.stored_value = stored_value
        self.on_event = on_event
        self.on_timezone_change = on_timezone_change

        self.sync_status = SyncStatus.NOT_SET
        self.last_sync_status = SyncStatus.NOT_SET
        self.last_ntp_correction = 0
        self.last_unix_time = 0
        self.last_unix_time_millis = 0
        self.value = ""
        self._before = self.clock.now()
        self._start_millis = self.clock.millis()

    @property
    def _offset(self) -> int:
        return self.timezone * 60 * 60

    def _local_now(self) -> int:
        return self.clock.now() + self._offset

    def _emit(self, value: Union[str, int], generate: bool) -> None:
        if self.on_event is not None:
            self.on_event(value, generate)

    def _set_manual(self, unix_time: int) -> str:
        self.clock.set(unix_time)
        self.sync_status = SyncStatus.MANUAL
        log.debug("LT: %s", format_unix_time(self.clock.now() + self._offset))
        text = str(unix_time)
        self._emit(text, self.ticker)
        return text

    def ntp_synced(self) -> None:
        """Record that the time was just synchronised through NTP."""
        self.sync_status = SyncStatus.NTP_JUST

    def loop(self) -> None:
        """Handle a fresh NTP sync and watch for the time being changed."""
        if self.sync_status == SyncStatus.NTP_JUST:
            now = self.clock.now()
            log.debug("time synchronised via NTP: %s", format_unix_time(now + self._offset))
            elapsed = (self.clock.millis() - self.last_unix_time_millis) // 1000
            self.last_ntp_correction = now - (self.last_unix_time + elapsed)
            self.sync_status = SyncStatus.NTP
            self._emit(str(now), True)

        if self.sync_status < SyncStatus.FROM_BROWSER_OR_NTP:
            after = self.clock.now()
            elapsed_ms = self.clock.millis() - self._start_millis
            if abs(after - self._before) - (elapsed_ms + 500) // 1000 > _JUMP_TOLERANCE:
                if self.sync_status == self.last_sync_status:
                    log.debug("time changed without a status change")
                    self.sync_status = SyncStatus.FROM_BROWSER
                    self.last_sync_status = SyncStatus.FROM_BROWSER
                else:
                    log.debug("time changed together with its status")
                    self.last_sync_status = self.sync_status
            self._before = self.clock.now()
            self._start_millis = self.clock.millis()

    def _restore(self) -> int:
        if self.stored_value is None:
            log.debug("time cannot be restored from storage")
            return 0
        recovered = _leading_int(self.stored_value)
        next_second = self.clock.millis() // 1000 + 1
        unix_time = recovered + next_second + self.interval // 2
        self.clock.set(unix_time)
        self.sync_status = SyncStatus.RESTORED
        log.info(
            "restored time set: %s LT: %s",
            unix_time,
            format_unix_time(unix_time + self._offset),
        )
        return unix_time

    def do_by_interval(self) -> Optional[str]:
        """Publish the current time; restore it from storage if never set."""
        status = self.sync_status
        unix_time = 0
        if status in (
            SyncStatus.RESTORED,
            SyncStatus.MANUAL,
            SyncStatus.FROM_BROWSER,
            SyncStatus.NTP,
            SyncStatus.NTP_JUST,
        ):
            unix_time = self.clock.now()
        elif self.clock.now() > _PLAUSIBLE_TIME:
            self.sync_status = SyncStatus.BEFORE_SOFTRTC
            unix_time = self.clock.now()
        elif status == SyncStatus.NOT_SET:
            unix_time = self._restore()
        else:
            log.debug("time is not set")

        if not unix_time:
            return None
        self.last_unix_time = unix_time
        self.last_unix_time_millis = self.clock.millis()
        self.value = str(unix_time)
        self._emit(self.value, self.ticker)
        return self.value

    def on_module_order(self, key: str, value: str) -> Optional[str]:
        """Handle ``setUTime`` (Unix time) and ``setSysTime`` (local date text)."""
        if key == "setUTime":
            return self._set_manual(_leading_int(value))
        if key == "setSysTime":
            return self._set_manual(unix_from_string(value) - self._offset)
        return None

    def execute(self, command: str, params: Sequence) -> Union[str, int, None]:
        """Run a scenario command and return its result, if it has one."""
        if command == "checkForSummer":
            new_zone = self.summer_time if is_dst(self.clock.now()) else self.winter_time
            if new_zone != self.timezone:
                self.timezone = new_zone
                if self.on_timezone_change is not None:
                    self.on_timezone_change(new_zone)
                log.info(
                    "switched to %s time",
                    "summer" if new_zone == self.summer_time else "winter",
                )
            return None
        if command == "getTime":
            return format_unix_time(self._local_now())
        if command == "setUnixTime":
            if len(params) == 1:
                self._set_manual(_leading_int(params[0]))
            return None
        if command == "setTimeFromYMDHMS":
            if len(params) == 6:
                fields = [int(float(p)) for p in params]
                self._set_manual(unix_from_ymdhms(*fields))
            return None
        if command == "lastNTPtimeCorrection":
            return self.last_ntp_correction
        if command == "getWeekNumber":
            return week_of_year(self._local_now())
        if command == "getDayOfWeek":
            return day_of_week_number(self._local_now())
        if command == "getDaysInMonth":
            return days_in_month(self._local_now())

        moment = datetime.fromtimestamp(self._local_now(), tz=_tz.utc)
        if command == "getYear":
            return moment.year
        if command == "getDayOfYear":
            return moment.timetuple().tm_yday
        if command == "getOrthodoxEaster":
            easter = orthodox_easter(moment.year)
            return f"{easter.day:02d}.{easter.month:02d}.{moment.year}"
        if command == "isOrthodoxEaster":
            easter = orthodox_easter(moment.year)
            return int(moment.day == easter.day and moment.month == easter.month)
        return None


class SoftRTCSyncStatus:
    """Reports a SoftRTC's sync status whenever it changes."""

    def __init__(
        self,
        rtc: SoftRTC,
        ticker: bool = True,
        on_event: Optional[EventHandler] = None,
    ) -> None:
        self.rtc = rtc
        self.ticker = ticker
        self.on_event = on_event
        self.last_sync_status = -1
        self.value = -1

    def loop(self) -> Optional[int]:
        """Return the new status if it changed since the last call, else None."""
        status = int(self.rtc.sync_status)
        if status == self.last_sync_status:
            return None
        self.last_sync_status = status
        self.value = status
        if self.on_event is not None:
            self.on_event(status, self.ticker)
        return status