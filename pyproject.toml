[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "edtext"
version = "0.1.0"
description = "Editable text buffers with undo, and a box-model layout engine for frames of text"
requires-python = ">=3.10"
dependencies = []
keywords = ["editor", "text buffer", "undo", "redo", "utf-8", "frame", "layout"]
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
    "Topic :: Text Editors",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["edtext"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
