[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hwscan"
version = "0.1.0"
description = "Discover hardware information about the host: CPU, block storage, BIOS, baseboard and chassis."
requires-python = ">=3.10"
keywords = ["hardware", "inventory", "cpu", "block", "dmi", "sysfs", "bios"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Operating System :: MacOS",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Hardware",
]
dependencies = [
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
hwscan = "hwscan.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["hwscan"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
