# SPDX-License-Identifier: MIT
"""Build plan resolution and error types."""
