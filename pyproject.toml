[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lilgraph"
version = "0.1.0"
description = "Parse, edit, topologically sort and write graphs in the small lilgraph text format"
requires-python = ">=3.10"
dependencies = []
keywords = ["graph", "dag", "parser", "topological-sort", "text-format"]
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
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Topic :: Text Processing",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["lilgraph"]

[tool.pytest.ini_options]
addopts = "-ra"
