"""Pipelines served by the AwwVision service."""
