"""Core domain logic: tokenization, chunking, embedding, ingestion, conversation."""
