[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "starsalloc"
version = "0.1.0"
description = "Block inflation allocation for a proof-of-stake chain: params, messages, keeper logic, contract message encoding and test-network tooling"
requires-python = ">=3.10"
dependencies = []
keywords = ["inflation", "allocation", "vesting", "fairburn", "bech32", "community-pool"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
starsalloc-readiness = "starsalloc.readiness:main"
starsalloc-watcher = "starsalloc.watcher:main"

[tool.hatch.build.targets.wheel]
packages = ["starsalloc"]

[tool.hatch.build.targets.sdist]
include = ["starsalloc", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
