[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "turtlepanel"
version = "0.1.0"
description = "Status panel and control client for an AFC filament changer on a Moonraker/Klipper printer"
requires-python = ">=3.10"
keywords = ["klipper", "moonraker", "afc", "filament", "3d-printing", "status-panel"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Printing",
]
dependencies = [
    "requests>=2.28",
]

[project.optional-dependencies]
test = [
    "pytest>=7",
    "responses>=0.23",
]

[project.scripts]
turtlepanel = "turtlepanel.app:main"

[tool.hatch.build.targets.wheel]
packages = ["turtlepanel"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
