[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "jsonwriter"
version = "0.1.0"
description = "A buffered JSON output stream with typed writers and value encoding for Python objects"
requires-python = ">=3.10"
dependencies = []
keywords = ["json", "serialization", "encoder", "stream", "dataclass"]
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
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Topic :: File Formats :: JSON",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["jsonwriter"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
