"""Configuration file templates written by ``albumaudit config init``."""

MINIMAL_TEMPLATE = """\
# AlbumAudit configuration
version: "1.0"

general:
  # Folder holding one sub-folder per album ("YYYYMMDD Label")
  root: null

severity:
  warning_gap_days: 7
  error_gap_days: 30

fix:
  dry_run_default: false
"""

FULL_TEMPLATE = """\
# AlbumAudit configuration (all options)
version: "1.0"

general:
  # Folder holding one sub-folder per album ("YYYYMMDD Label")
  root: null
  ignore_hidden_files: true
  # Analyze albums in a thread pool after the folder listing is shown
  background_analysis: true
  max_workers: 4

albums:
  image_extensions: [".bmp", ".gif", ".heic", ".heif", ".jpeg", ".jpg", ".png", ".tif", ".tiff", ".webp"]
  raw_extensions: [".arw", ".cr2", ".cr3", ".dng", ".nef", ".orf", ".pef", ".raf", ".rw2", ".srw"]
  # Only JPEG capture dates can be rewritten
  writable_extensions: [".jpeg", ".jpg"]

severity:
  # Album is a warning when any photo is more than this many days off
  warning_gap_days: 7
  # Album is an error when any photo is more than this many days off
  error_gap_days: 30

cache:
  enabled: true
  ttl_seconds: 300

fix:
  dry_run_default: false
  # Originals are kept next to the photo as <name><suffix>
  backup_suffix: ".bak"
  confirm: true

export:
  include_photos: true
  include_statistics: true
  pretty_print: true

logging:
  level: "info"
  color_output: true
  log_to_file: false
  file_path: ".albumaudit/albumaudit.log"
  activity_entries: 100
"""


def get_config_template(full: bool = False) -> str:
    """Return the YAML text for a new config file."""
    return FULL_TEMPLATE if full else MINIMAL_TEMPLATE
