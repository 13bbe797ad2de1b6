[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bankersim"
version = "0.1.0"
description = "Banker's algorithm simulation across cooperating nodes with priority aging and deadlock prediction"
requires-python = ">=3.10"
dependencies = []
keywords = ["bankers-algorithm", "deadlock", "resource-allocation", "simulation", "operating-systems"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Distributed Computing",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
bankersim = "bankersim.simulation:main"

[tool.hatch.build.targets.wheel]
packages = ["bankersim"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
