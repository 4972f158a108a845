[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "respcmd"
version = "0.1.0"
description = "Typed command objects that build Redis command arguments and decode parsed RESP replies"
requires-python = ">=3.10"
dependencies = []
keywords = ["redis", "resp", "commands", "replies", "protocol"]
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
    "Topic :: Database",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["respcmd"]

[tool.pytest.ini_options]
addopts = "-ra"
