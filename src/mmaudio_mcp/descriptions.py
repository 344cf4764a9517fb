# SPDX-License-Identifier: MIT
"""Tool descriptions for MCP server. Optimized for token efficiency."""

# ==================== GENERATION TOOL DESCRIPTIONS ====================

VIDEO_TO_AUDIO = """Generate synchronized audio (sound effects, ambience, atmosphere) for a video using MMAudio.

Params: video_url (mp4|webm|avi|mov), prompt, negative_prompt, seed (optional), num_steps (1-50, default 25), duration (1-30s, default 8), cfg_strength (1-10, default 4.5)

Returns: success, message, result (audio_url, content_type, file_name, file_size, duration, prompt)

Example: video_to_audio("https://example.com/clip.mp4", "forest sounds with birds chirping")"""

TEXT_TO_AUDIO = """Generate audio from a text description using MMAudio: sound effects, ambience, music, soundscapes.

Params: prompt, duration (1-30s, default 8), num_steps (1-50, default 25), cfg_strength (1-10, default 4.5), negative_prompt, seed (default 0)

Returns: success, message, result (audio_url, content_type, file_name, file_size, duration, prompt)

Example: text_to_audio("rain falling on leaves", duration=10)"""


# ==================== ACCOUNT TOOL DESCRIPTIONS ====================

VALIDATE_API_KEY = """Validate an MMAudio API key and check account credits.

Params: api_key (optional, uses configured key if omitted)

Returns: success, message, result (valid, credits, account_status | error)"""


# ==================== PARAMETER DESCRIPTIONS ====================

VIDEO_URL = "URL of the video file to generate audio for (supports mp4, webm, avi, mov formats)"
PROMPT = 'Describe the audio you want to generate (e.g., "rain falling on leaves", "urban traffic noise")'
NEGATIVE_PROMPT = "Describe what you want to avoid in the generated audio (optional)"
SEED = "Random seed for reproducible results"
NUM_STEPS = "Number of inference steps (higher = better quality, slower)"
DURATION = "Duration of generated audio in seconds"
CFG_STRENGTH = "Classifier-free guidance strength (higher = more adherence to prompt)"
API_KEY = "MMAudio API key to validate (optional, uses configured key if not provided)"
