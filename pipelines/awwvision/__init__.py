"""
AwwVision Pipeline

Scrapes image posts from Reddit, labels them with the Cloud Vision API, and
stores newly labeled images in Cloud Storage for the gallery view.
"""

__version__ = "1.0.0"
