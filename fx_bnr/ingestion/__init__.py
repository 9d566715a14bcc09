"""Feed retrieval and decoding."""
