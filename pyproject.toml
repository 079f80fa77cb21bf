[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "coretune"
version = "0.1.0"
description = "Audit, probe and benchmark hybrid-core Linux machines, and generate a kernel tuning script"
requires-python = ">=3.10"
dependencies = ["numpy"]
keywords = ["benchmark", "sysfs", "tuning", "cpu", "affinity", "hugepages", "rapl", "mlock"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Benchmark",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
coretune = "coretune.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["coretune"]

[tool.pytest.ini_options]
addopts = "-ra"
