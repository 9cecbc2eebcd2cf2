"""AlbumAudit: check photo album folders against the dates in their names."""

from albumaudit.utils.constants import VERSION

__version__ = VERSION
