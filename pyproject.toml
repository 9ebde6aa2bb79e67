[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "yippee"
version = "12.0.0"
description = "Building blocks for an AUR helper: pacman-style argument parsing, configuration, command building, PGP key checks and PKGBUILD work directories"
requires-python = ">=3.11"
dependencies = []
keywords = ["aur", "pacman", "makepkg", "arch", "package-manager", "pkgbuild"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Software Distribution",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["yippee"]

[tool.hatch.build.targets.sdist]
include = ["yippee", "tests", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
