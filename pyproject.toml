[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tpcero"
version = "0.1.0"
description = "A small TCP client and server that exchange length-prefixed messages and packages of values"
requires-python = ">=3.10"
dependencies = []
keywords = ["tcp", "sockets", "client", "server", "serialization"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Education",
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
test = ["pytest"]

[project.scripts]
tpcero-client = "tpcero.client:main"
tpcero-server = "tpcero.server:main"

[tool.hatch.build.targets.wheel]
packages = ["tpcero"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
