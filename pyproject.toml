[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sdeutils"
version = "0.1.0"
description = "Desktop-environment helpers: string utilities, coloured logging, desktop Exec line expansion and resource/config path resolution"
requires-python = ">=3.10"
dependencies = []
keywords = ["desktop", "xdg", "logging", "paths", "launcher", "utilities"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
    "Topic :: Desktop Environment",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["sdeutils"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
