[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "zanobia"
version = "0.1.0"
description = "Inventory management core: units and conversions, warehouses, users and permissions, retailers, retailer stock batches and transaction history."
requires-python = ">=3.10"
dependencies = []
keywords = ["inventory", "warehouse", "retailer", "stock", "units", "transactions"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["zanobia"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
