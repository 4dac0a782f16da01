"""Image handling: upload normalisation and provider adapters."""
