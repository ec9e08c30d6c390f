"""
WARNING: Do not modify this file.
"""

__all__ = [
    "__title__", "__summary__", "__version__", "__author__", "__email__", "__license__", "__copyright__", "__url__"
]

__title__ = "timelock"

__url__ = "https://github.com/timelock-commit/timelock"

__summary__ = "Time-locked commit/reveal sessions on top of a threshold key-release network."

__version__ = "0.3.0"

__author__ = "Timelock Contributors"

__email__ = "dev@timelock-commit.org"

__license__ = "GNU Affero General Public License, Version 3"

__copyright__ = 'Copyright (C) 2024 Timelock Contributors'
