#!/usr/bin/env python
"""Setup script for hoodie-python-sdk.

This file is required for backwards compatibility with older pip versions.
The actual package configuration is in pyproject.toml.
"""

from setuptools import setup

# The actual configuration is in pyproject.toml
# This file is just for compatibility
setup()