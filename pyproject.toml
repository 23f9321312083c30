[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "statuswatch"
version = "0.1.0"
description = "Scrape third-party status pages, record their incidents and hand new updates to notification workers."
requires-python = ">=3.10"
keywords = [
    "status page",
    "incidents",
    "monitoring",
    "scraping",
    "notifications",
    "discord",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
    "Topic :: Internet :: WWW/HTTP",
]
dependencies = [
    "requests",
    "beautifulsoup4",
    "python-slugify",
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[tool.hatch.build.targets.wheel]
packages = ["statuswatch"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]
