"""Application core: configuration, logging, errors, retries and tokens."""
