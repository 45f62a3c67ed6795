"""AWS S3 object storage."""
