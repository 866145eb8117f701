[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hoylink"
version = "0.1.0"
description = "Decoders for microinverter radio payloads: statistics, alarm logs, device info, grid profiles and inverter models"
requires-python = ">=3.10"
dependencies = []
keywords = ["inverter", "solar", "photovoltaic", "telemetry", "mqtt", "parser"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Home Automation",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["hoylink"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
