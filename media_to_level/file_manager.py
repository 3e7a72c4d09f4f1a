"""Per-session download files for generated levels.

Each browser session gets one directory holding at most one file per
converter ("image" and "midi"). Writing a new level replaces the previous
file, so repeated generation never accumulates files on disk.
"""

import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


class LevelFileManager:
    """Manages the downloadable level files of one session.

    Attributes:
        session_dir: Directory holding this session's files.
        current_files: Active file per converter mode.
    """

    def __init__(self, session_id: str | None = None):
        """Create the session directory.

        Args:
            session_id: Session identifier; a fresh unique directory is
                        created when None.
        """
        base_dir = os.environ.get("GRADIO_TEMP_DIR", tempfile.gettempdir())

        if session_id:
            self.session_dir = Path(base_dir) / f"media-to-level-{session_id}"
        else:
            self.session_dir = Path(
                tempfile.mkdtemp(prefix="media-to-level-", dir=base_dir)
            )

        self.session_dir.mkdir(parents=True, exist_ok=True)
        self.current_files: dict[str, Path] = {}

    def write_level(self, mode: str, text: str, stem: str = "level") -> str:
        """Write level JSON for a converter mode, replacing its previous file.

        Args:
            mode: Converter mode ("image" or "midi").
            text: Serialized level document.
            stem: File name without extension offered for download.

        Returns:
            Path of the written file.
        """
        self.discard(mode)

        safe_stem = "".join(c for c in stem if c.isalnum() or c in "-_ ").strip()
        mode_dir = self.session_dir / mode
        mode_dir.mkdir(parents=True, exist_ok=True)
        file_path = mode_dir / f"{safe_stem or 'level'}.json"

        # Write to a side file first so readers never see a partial level
        temp_path = file_path.with_suffix(".json.tmp")
        temp_path.write_text(text, encoding="utf-8")
        os.replace(temp_path, file_path)

        self.current_files[mode] = file_path
        return str(file_path)

    def discard(self, mode: str) -> None:
        """Remove the active file of a converter mode, if any."""
        file_path = self.current_files.pop(mode, None)
        if file_path is not None and file_path.exists():
            try:
                file_path.unlink()
            except OSError as e:
                logger.debug(f"Could not remove {file_path}: {e}")

    def cleanup_all(self) -> None:
        """Remove every tracked file and, when empty, the session directory.

        Safe to call multiple times.
        """
        for mode in list(self.current_files):
            self.discard(mode)

        for path in sorted(self.session_dir.glob("*"), reverse=True):
            if path.is_dir():
                try:
                    path.rmdir()
                except OSError:
                    pass  # still holds files

        if self.session_dir.exists():
            try:
                self.session_dir.rmdir()
            except OSError:
                pass  # still holds files
