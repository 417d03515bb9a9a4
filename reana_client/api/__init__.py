"""HTTP transport and response models for the REANA server API."""
