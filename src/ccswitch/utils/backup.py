# ABOUTME: Backup utilities for the ccswitch data file.
# ABOUTME: Timestamped copies taken before destructive imports, last 5 kept.
import logging
import re
import shutil
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

# ABOUTME: Matches {stem}_{YYYYMMDD}_{HHMMSS}_{micros}.{ext}
BACKUP_PATTERN = re.compile(r"^(.+?)_(\d{8}_\d{6}_\d{6})\.(.+)$")


def get_backup_dir(data_file: Path) -> Path:
    """Return the backup directory that sits beside the data file.

    Does not create the directory.
    """
    return data_file.parent / "backups"


def create_backup(source_path: Path, backup_dir: Path, max_backups: int = 5) -> Path:
    """Create a timestamped backup of a file.

    ABOUTME: Backup format: {stem}_{YYYYMMDD}_{HHMMSS}_{micros}{ext}
    ABOUTME: Uses shutil.copy2() to preserve file metadata
    ABOUTME: Prunes older backups of the same file down to max_backups

    Args:
        source_path: File to back up
        backup_dir: Directory where the backup is written (created if missing)
        max_backups: How many backups of this file to keep

    Returns:
        Path to created backup file

    Raises:
        FileNotFoundError: If source_path doesn't exist

    Examples:
        >>> create_backup(Path("~/.cc-switch/ccswitch-data.json"), Path("~/.cc-switch/backups")).name
        'ccswitch-data_20261019_143022_120033.json'
    """
    if not source_path.exists():
        raise FileNotFoundError(f"Source file not found: {source_path}")

    backup_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    backup_path = backup_dir / f"{source_path.stem}_{timestamp}{source_path.suffix}"

    shutil.copy2(source_path, backup_path)
    logger.info("Backed up %s to %s", source_path, backup_path)

    cleanup_old_backups(backup_dir, max_backups)

    return backup_path


def cleanup_old_backups(backup_dir: Path, max_backups: int = 5) -> list[Path]:
    """Remove old backup files, keeping only the newest per source file.

    ABOUTME: Groups backups by stem prefix, sorts by timestamp descending
    ABOUTME: Logs warnings on errors but does not raise exceptions

    Returns:
        List of paths that were deleted
    """
    deleted_files: list[Path] = []

    if not backup_dir.exists():
        return deleted_files

    backups_by_stem: dict[str, list[tuple[str, Path]]] = {}

    for file_path in backup_dir.iterdir():
        if not file_path.is_file():
            continue

        match = BACKUP_PATTERN.match(file_path.name)
        if not match:
            continue

        backups_by_stem.setdefault(match.group(1), []).append((match.group(2), file_path))

    for backups in backups_by_stem.values():
        backups.sort(key=lambda x: x[0], reverse=True)

        for _timestamp, file_path in backups[max_backups:]:
            try:
                file_path.unlink()
                deleted_files.append(file_path)
                logger.debug("Deleted old backup: %s", file_path)
            except OSError as e:
                logger.warning("Failed to delete old backup %s: %s", file_path, e)

    return deleted_files
