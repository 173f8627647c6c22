[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kthreads"
version = "0.1.0"
description = "The threading core of a small teaching kernel: cooperative threads, a priority scheduler, and semaphores, locks, conditions and channels built on it"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "threads",
    "scheduler",
    "semaphore",
    "lock",
    "condition variable",
    "channel",
    "operating systems",
    "teaching kernel",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Education",
    "Topic :: System :: Operating System Kernels",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
kthreads = "kthreads.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["kthreads"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
