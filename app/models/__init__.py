"""Pydantic schemas for the AwwVision service."""
