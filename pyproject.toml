[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ledgertools"
version = "0.1.0"
description = "Command-line helpers for plain-text accounting journals: interactive entry, AI-assisted import and questions"
requires-python = ">=3.10"
keywords = ["hledger", "ledger", "accounting", "plain-text accounting", "journal", "cli"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial :: Accounting",
    "Topic :: Utilities",
]
dependencies = [
    "httpx",
    "prompt-toolkit",
]

[project.optional-dependencies]
test = [
    "pytest",
    "respx",
]

[project.scripts]
hledger-tools = "ledgertools.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["ledgertools"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]
