[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "postkit"
version = "0.1.0"
description = "Building blocks for digital cinema and IMF post-production tools"
requires-python = ">=3.10"
keywords = ["dcp", "imf", "digital-cinema", "subtitles", "otio", "prores", "ffmpeg"]
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
    "Topic :: Multimedia :: Video :: Conversion",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "platformdirs",
    "watchdog",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["postkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
