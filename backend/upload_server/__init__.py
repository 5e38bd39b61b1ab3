"""
Recipe platform upload server.

Ingests image and video uploads, generates their derivatives and deletes
assets together with everything derived from them.
"""
