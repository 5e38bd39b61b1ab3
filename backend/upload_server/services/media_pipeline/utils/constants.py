# backend/upload_server/services/media_pipeline/utils/constants.py
"""
Media Pipeline Constants
"""

# Image thumbnail bounding box (width, height)
THUMBNAIL_SIZE = (320, 320)
THUMBNAIL_FORMAT = "PNG"

# Video screenshots
SCREENSHOT_COUNT = 3
SCREENSHOT_WIDTH = 320

# Animated preview
GIF_FPS = 10
GIF_WIDTH = 320
PALETTE_MAX_COLORS = 32
GIF_COMPRESSION_LEVEL = 50
TARGET_PREVIEW_SECONDS = 5

# Used when the container reports no usable duration
FALLBACK_DURATION_SECONDS = 10.0
FALLBACK_SPEED_FACTOR = 1.0

# Without a duration, screenshot N is the most representative frame of the
# first N * batch frames, so short clips still yield every frame
FALLBACK_SCREENSHOT_BATCH_FRAMES = 30

# Derivative file naming
THUMBNAIL_SUFFIX = "-thumb.png"
SCREENSHOT_SUFFIX_TEMPLATE = "-thumb-{index}.png"
GIF_SUFFIX = "-animation.gif"
PALETTE_SUFFIX = "-palette.png"
TEMP_FILE_SUFFIX = ".tmp"

# Stored filename generation
RANDOM_NAME_LENGTH = 20
OWNER_SEPARATOR = "_"

# Version check timeout for ffmpeg/ffprobe availability probes
TOOL_CHECK_TIMEOUT_SECONDS = 10
