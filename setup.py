# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
buildtime Python Package Setup Configuration
"""

from setuptools import setup, find_packages

setup(
    name="buildtime-analyzer",
    version="0.1.0",
    description="Per-symbol compile timing extraction from build logs",
    author="buildtime Contributors",
    license="BSD-3-Clause",
    packages=find_packages(include=["buildtime", "buildtime.*"]),
    python_requires=">=3.9",
    install_requires=[
        "click>=8.0.0",
        "jsonschema>=4.0.0",
        "rich>=12.0.0",
        "tabulate>=0.8.3",
        "zstandard>=0.16.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "mypy>=1.0.0",
            "black>=22.0.0",
            "ruff>=0.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "buildtime=buildtime.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: BSD License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
