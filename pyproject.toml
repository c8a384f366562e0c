[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "actnet"
version = "0.1.0"
description = "Asyncio service building blocks: connection counters, local channels, DNS resolution, TCP connectors and TLS acceptors."
requires-python = ">=3.11"
dependencies = []
keywords = ["asyncio", "networking", "tls", "connector", "resolver", "channel"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Framework :: AsyncIO",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
    "cryptography",
]

[tool.hatch.build.targets.wheel]
packages = ["actnet"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
