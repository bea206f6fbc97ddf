[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kudoapi"
version = "0.1.0"
description = "Data model and plan-selection logic for KUDO operators, operator versions and instances"
requires-python = ">=3.10"
dependencies = []
keywords = ["kubernetes", "operator", "kudo", "crd", "plans"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Clustering",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["kudoapi"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
