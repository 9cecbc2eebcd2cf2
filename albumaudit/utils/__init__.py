"""Utility modules for AlbumAudit."""
