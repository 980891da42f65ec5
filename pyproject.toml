[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kitgen"
version = "0.1.0"
description = "Build go-kit server handler code and HTTP transport descriptions from a service definition"
requires-python = ">=3.10"
keywords = ["code generation", "go-kit", "protobuf", "grpc", "http transport", "templates"]
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
    "Topic :: Software Development :: Code Generators",
]
dependencies = [
    "jinja2",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["kitgen"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
