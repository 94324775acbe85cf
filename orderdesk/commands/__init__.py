"""Command implementations for the orderdesk CLI."""
