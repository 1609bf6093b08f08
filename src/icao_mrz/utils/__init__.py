"""MRZ parsing, validation and generation utilities."""
