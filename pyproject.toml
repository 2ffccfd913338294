[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "zcache"
version = "2.0.0"
description = "Thread-safe in-memory key/value cache with per-item expiration and proxy keys"
requires-python = ">=3.10"
dependencies = []
keywords = ["cache", "in-memory", "expiration", "ttl", "key-value"]
classifiers = [
    "Development Status :: 5 - Production/Stable",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["zcache"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
