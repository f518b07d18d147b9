[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "trainpress"
version = "0.1.0"
description = "A small asyncio web framework with routing, middleware, extractors and JSON responses"
requires-python = ">=3.10"
dependencies = [
    "h11",
]
keywords = ["web", "framework", "http", "async", "router", "middleware"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Framework :: AsyncIO",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    "Topic :: Software Development :: Libraries :: Application Frameworks",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
trainpress-hello = "trainpress.examples.hello_world:main"
trainpress-middleware-demo = "trainpress.examples.middleware_example:main"
trainpress-user-crud = "trainpress.examples.user_crud:main"

[tool.hatch.build.targets.wheel]
packages = ["trainpress"]

[tool.hatch.build.targets.sdist]
include = ["trainpress", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
