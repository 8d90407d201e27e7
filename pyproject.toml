[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tigerir"
version = "0.1.0"
description = "Intermediate-representation building blocks for a Tiger language compiler targeting x86-64"
requires-python = ">=3.10"
dependencies = []
keywords = ["compiler", "tiger", "intermediate representation", "ir", "x86-64", "stack frame"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Compilers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["tigerir"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
