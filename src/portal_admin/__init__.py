"""Admin dashboard for careers and activities stored as JSON in a GitHub repository."""
