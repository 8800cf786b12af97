"""Bundled SQL migrations (NNN_description.sql)."""
