"""Constants for AlbumAudit."""

# Version
VERSION = "0.4.0"

# Files that count as photos inside an album
IMAGE_EXTENSIONS = {
    ".jpg", ".jpeg", ".png", ".tiff", ".tif",
    ".heic", ".heif", ".webp", ".bmp", ".gif"
}

RAW_EXTENSIONS = {
    ".cr2", ".cr3", ".nef", ".arw", ".dng",
    ".orf", ".rw2", ".raf", ".pef", ".srw"
}

ALL_IMAGE_EXTENSIONS = IMAGE_EXTENSIONS | RAW_EXTENSIONS

# Formats exifread can pull capture dates from
DECODABLE_EXTENSIONS = {
    ".jpg", ".jpeg", ".tiff", ".tif", ".heic", ".heif",
    ".png", ".webp", ".cr2", ".nef", ".arw", ".dng"
}

# Formats we can rewrite in place (piexif, JPEG only)
WRITABLE_EXTENSIONS = {".jpg", ".jpeg"}

# Album name rules
ALBUM_DATE_PREFIX_LENGTH = 8
MIN_ALBUM_YEAR = 1900
MAX_ALBUM_YEAR = 2100
ALBUM_DATE_FORMAT = "%Y%m%d"

# Severity thresholds (days between album date and capture date)
WARNING_GAP_DAYS = 7
ERROR_GAP_DAYS = 30

# Cache
CACHE_TTL_SECONDS = 5 * 60

# EXIF
EXIF_DATE_FORMAT = "%Y:%m:%d %H:%M:%S"
EXIF_DATE_FORMATS = [
    "%Y:%m:%d %H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d %H:%M:%S",
    "%Y:%m:%d %H:%M",
    "%Y-%m-%d %H:%M",
]

# Time of day used when a photo has no capture time to preserve
DEFAULT_FIX_HOUR = 12

# Backups written before an in-place metadata rewrite
BACKUP_SUFFIX = ".bak"
