"""Command line interface for AlbumAudit."""
