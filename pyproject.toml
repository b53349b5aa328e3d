[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "apart"
version = "0.1.0"
description = "Tile-map puzzle game core: chunked tile maps, entity movement and collision, a software renderer and map files"
requires-python = ">=3.10"
dependencies = []
keywords = ["game", "tilemap", "collision", "software-rendering", "bitmap", "level-editor"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Games/Entertainment :: Puzzle Games",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["apart"]

[tool.pytest.ini_options]
addopts = "-ra"
