[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ddnskit"
version = "0.1.0"
description = "Building blocks for dynamic DNS clients: cloud API request signers, IP caching, network helpers and self-update."
requires-python = ">=3.10"
keywords = ["ddns", "dns", "dynamic-dns", "signature", "aliyun", "huawei", "tencent", "baidu", "volcengine"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: Name Service (DNS)",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "requests>=2.28",
    "bcrypt>=4.0",
    "dnspython>=2.3",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[tool.hatch.build.targets.wheel]
packages = ["ddnskit"]

[tool.pytest.ini_options]
addopts = "-ra"
