"""HTTP routes for the AwwVision pipeline."""
