"""Business logic services for the AI Board of Directors API."""
