[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "eoiptap"
version = "0.1.0"
description = "EoIP (Ethernet over IP) tunnel daemon bridging a Linux TAP device to a raw GRE socket"
requires-python = ">=3.10"
dependencies = []
keywords = ["eoip", "gre", "tap", "tunnel", "ethernet"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: No Input/Output (Daemon)",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
eoiptap = "eoiptap.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["eoiptap"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
