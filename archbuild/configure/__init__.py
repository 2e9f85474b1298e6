# SPDX-License-Identifier: MIT
"""Host detection and prerequisite checks."""
