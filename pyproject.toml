[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "budx"
version = "0.1.0"
description = "Insertion-ordered maps, simple sets and a HOCON-style configuration loader"
requires-python = ">=3.10"
dependencies = []
keywords = ["config", "hocon", "configuration", "ordered-map", "set"]
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
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["budx"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
