[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cubed"
version = "0.1.0"
description = "A grid-based raycasting first-person game with textured walls, sliding doors, maps and a menu"
requires-python = ">=3.10"
keywords = ["raycasting", "game", "first-person", "pygame", "xpm42"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: First Person Shooters",
]
dependencies = [
    "pygame",
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
cubed = "cubed.app:main"

[tool.hatch.build.targets.wheel]
packages = ["cubed"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
