# SPDX-License-Identifier: MIT
"""MMAudio MCP server: video-to-audio and text-to-audio generation tools."""

__version__ = "1.0.0"
