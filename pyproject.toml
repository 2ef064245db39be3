[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "configtree"
version = "1.0.0"
description = "Parse configuration and data files (JSON/JSONC, JSON Lines, CBOR, env, INI, TOML, YAML, XML, plist) into one uniform, comment-aware tree"
requires-python = ">=3.11"
keywords = ["config", "json", "jsonc", "yaml", "toml", "ini", "xml", "plist", "cbor", "tree", "parser"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Text Processing :: Markup",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Typing :: Typed",
]
dependencies = [
    "cbor2",
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["configtree"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
