[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "newscms"
version = "0.1.0"
description = "Content management service for a news portal, configured from Consul and backed by PostgreSQL"
requires-python = ">=3.10"
keywords = ["cms", "news", "content-management", "flask", "postgresql", "consul", "migrations"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Web Environment",
    "Framework :: Flask",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: Dynamic Content :: Content Management System",
]
dependencies = [
    "flask",
    "werkzeug",
    "sqlalchemy",
    "pyyaml",
    "requests",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
newscms = "newscms.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["newscms"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
ignore_missing_imports = true
