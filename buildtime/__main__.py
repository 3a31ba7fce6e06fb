# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Allow running buildtime as a module: python -m buildtime
"""

from buildtime.cli import main

if __name__ == "__main__":
    main()
