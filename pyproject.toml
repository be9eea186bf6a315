[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cshell"
version = "0.1.0"
description = "Command shell toolkit for CubeSat Space Protocol networks: parameters, tunnel crypto, sniffing and metrics export"
requires-python = ">=3.10"
keywords = ["csp", "cubesat", "shell", "parameters", "prometheus", "telemetry"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications",
]
dependencies = [
    "pynacl",
    "msgpack",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
csh = "cshell.shell:main"

[tool.hatch.build.targets.wheel]
packages = ["cshell"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
