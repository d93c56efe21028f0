"""CCS message and stanza models."""
