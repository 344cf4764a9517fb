# SPDX-License-Identifier: MIT
"""Tool implementations for the MMAudio MCP server.

This package contains the business logic behind each FastMCP tool:
- generation: video_to_audio and text_to_audio
- account: validate_api_key

The server module wraps these functions and registers them with FastMCP.
"""
