"""In-memory stand-ins used across the test suite."""
