"""
Services module for the upload server.

Available Services:
- MediaStorage: Ingestion, ownership checks and cascade deletes
- UploadService: Storage plus derivative pipeline for one upload
- MediaPipeline: Image thumbnail and video derivative generation
- LoggerService: Centralized loguru-backed logging
"""
