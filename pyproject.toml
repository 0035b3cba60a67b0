[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "apigate"
version = "0.1.0"
description = "Building blocks for an API gateway: service discovery, load balancing, backend status handling and HTTP server setup"
requires-python = ">=3.10"
keywords = ["api-gateway", "load-balancing", "service-discovery", "dns-srv", "http", "wsgi", "tls"]
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
    "Topic :: Internet :: WWW/HTTP",
    "Topic :: Internet :: WWW/HTTP :: WSGI :: Server",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "dnspython",
    "requests",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["apigate"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
