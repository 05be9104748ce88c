#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Legacy entry point for volspec packaging.

All metadata, dependencies and package discovery live in pyproject.toml;
this shim only lets tools that still invoke ``setup.py`` build the package.
"""

import setuptools

if __name__ == "__main__":
    setuptools.setup()
