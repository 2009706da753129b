[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "statiq"
version = "0.2.5"
description = "SQL Server entity mapping, SQL generation, positional parameter binding, circuit breaking and caching layers"
requires-python = ">=3.10"
keywords = ["mssql", "sql-server", "entity", "sql-generation", "cache", "redis", "circuit-breaker"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Framework :: AsyncIO",
    "Topic :: Database :: Front-Ends",
    "Typing :: Typed",
]
dependencies = [
    "cachetools",
    "cryptography",
    "redis",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["statiq"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
