"""Service functions shared by the HTTP routes."""
