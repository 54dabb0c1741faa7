"""Cloud Function entry points for the AwwVision pipeline."""
