# This file is part of instancemd. See LICENSE file for license information.
"""Metadata channels and their resolution."""
