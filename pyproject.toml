[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "message_transmitter"
version = "0.1.0"
description = "In-memory message transmitter for cross-chain transfer messages with attested signatures"
requires-python = ">=3.10"
keywords = ["cross-chain", "messaging", "attestation", "secp256k1", "nonce", "keccak"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial",
]
dependencies = [
    "pycryptodome",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["message_transmitter"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
