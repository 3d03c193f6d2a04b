[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "catnip"
version = "0.1.0"
description = "Building blocks of a user-space TCP/IP stack: Ethernet and ARP framing, ARP resolution, ICMPv4 headers, TTL caches and cooperative scheduling helpers"
requires-python = ">=3.10"
dependencies = []
keywords = ["networking", "tcp/ip", "arp", "ethernet", "icmp", "asyncio"]
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
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest", "pytest-asyncio"]

[tool.hatch.build.targets.wheel]
packages = ["catnip"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
