"""Vector index implementations (S3 Vectors for prod, FAISS for dev)."""
