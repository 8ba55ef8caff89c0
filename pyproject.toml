[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "jobcrawl"
version = "0.1.0"
description = "Crawl Korean job boards for Go postings, store new ones in MySQL and mail a digest"
requires-python = ">=3.10"
keywords = ["crawler", "jobs", "go", "scraping", "mysql", "smtp"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Natural Language :: Korean",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: Indexing/Search",
]
dependencies = [
    "pyyaml",
    "requests",
    "beautifulsoup4",
    "pymysql",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[project.scripts]
jobcrawl = "jobcrawl.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["jobcrawl"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
