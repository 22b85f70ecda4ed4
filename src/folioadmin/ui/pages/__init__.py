"""Admin panel pages."""
