"""Parameter records and environment configuration."""
