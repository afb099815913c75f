"""Business logic operating on the database session."""
