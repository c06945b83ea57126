"""Home-automation modules: Wake-on-LAN, ADC noise analysis, time helpers, a software RTC and solar calculations."""

__version__ = "0.1.0"
__all__ = ["wakeonlan", "noise", "timeutils", "softrtc", "solar"]