"""AI Board of Directors API."""
