[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "iotmods"
version = "0.1.0"
description = "Home-automation modules: Wake-on-LAN sender, ADC noise analyser, software real-time clock and solar position calculator"
requires-python = ">=3.10"
dependencies = []
keywords = ["wake-on-lan", "iot", "home-automation", "rtc", "solar", "sunrise", "noise"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Home Automation",
    "Topic :: Scientific/Engineering :: Astronomy",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
iotmods-wol = "iotmods.wakeonlan:main"

[tool.hatch.build.targets.wheel]
packages = ["iotmods"]

[tool.pytest.ini_options]
addopts = "-ra"
