"""API automation against the Restful Booker REST endpoints."""
