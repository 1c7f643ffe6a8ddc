"""
DevFlow Backend: Pydantic Schemas
===================================

Request/response models for the API routes and the request session.
Document schemas live in devflow/models/.
"""
