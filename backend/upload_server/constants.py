# backend/upload_server/constants.py
"""
Application-wide constants.
"""

# ====================================================================
# API CONSTANTS
# ====================================================================

# Application info
APPLICATION_NAME = "recipe-upload-server"
APPLICATION_VERSION = "1.0.0"
APPLICATION_DESCRIPTION = "Media upload and derivative generation for the recipe platform"

# Static mounts publishing the storage roots
UPLOADS_MOUNT_PATH = "/uploads"
PROFILE_MOUNT_PATH = "/uploads/profile"
