# This file is part of instancemd. See LICENSE file for license information.

__VERSION__ = "0.3.0"


def version_string():
    """Extract a version string from the package."""
    return __VERSION__
