"""Chart Audit web service."""
