import json
import logging
import os
import threading
import time
from pathlib import Path
from typing import Any, Callable, List, Optional

import jmespath
from jmespath.exceptions import JMESPathError
from pydantic import ValidationError
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from ..config import settings
from ..models.schemas import PresetLibrary, ThemePreset

logger = logging.getLogger(settings.SERVICE_NAME + ".loader")


class PresetsFileHandler(FileSystemEventHandler):
    """
    Watchdog event handler that detects changes to the presets file
    and triggers a reload callback.
    """

    def __init__(self, presets_file_path: Path, reload_callback: Callable[[], bool]):
        self.presets_file_path = presets_file_path
        self.reload_callback = reload_callback
        logger.info(f"Watching for changes to presets file: {presets_file_path}")

    def on_modified(self, event):
        if not event.is_directory and Path(event.src_path) == self.presets_file_path:
            logger.info(f"Detected change to presets file: {event.src_path}")
            self.reload_callback()


class PresetLibraryLoader:
    """
    Manages loading and hot-reloading of the saved theme library.
    A tenant picks its active theme from this library.
    """

    def __init__(self, presets_file_path: Optional[Path] = None, watch: Optional[bool] = None):
        self.presets_file_path = Path(presets_file_path or settings.get_absolute_presets_path())
        self.library: Optional[PresetLibrary] = None
        self.last_modified_time: float = 0
        self.observer: Optional[Observer] = None
        self.lock = threading.RLock()

        self.load_presets()

        if settings.ENABLE_HOT_RELOAD if watch is None else watch:
            self._setup_file_watcher()
        else:
            logger.info("Hot reload is disabled. Presets will not be automatically reloaded.")

    def _setup_file_watcher(self):
        """Set up a watchdog observer to monitor the presets file for changes."""
        try:
            self.observer = Observer(timeout=settings.FILE_WATCH_INTERVAL_SECONDS)
            handler = PresetsFileHandler(self.presets_file_path, self.load_presets)
            self.observer.schedule(handler, str(self.presets_file_path.parent), recursive=False)
            self.observer.start()
            logger.info(f"File watcher started for {self.presets_file_path}")
        except OSError as e:
            logger.error(f"Failed to set up file watcher: {e}", exc_info=True)
            self.observer = None

    def load_presets(self, force: bool = False) -> bool:
        """
        Load and validate the presets file.
        Returns True if the library is loaded (or unchanged since the last load).
        """
        with self.lock:
            try:
                if not self.presets_file_path.exists():
                    logger.error(f"Presets file not found: {self.presets_file_path}")
                    return False

                current_mtime = os.path.getmtime(self.presets_file_path)
                if not force and current_mtime <= self.last_modified_time:
                    logger.debug("Presets file has not changed since last load.")
                    return True

                logger.info(f"Loading presets from {self.presets_file_path}")
                with open(self.presets_file_path, "r", encoding="utf-8") as f:
                    raw_data = json.load(f)

                self.library = PresetLibrary(**raw_data)
                self.last_modified_time = current_mtime
                logger.info(f"Presets loaded successfully: {len(self.library.presets)} presets")
                return True

            except json.JSONDecodeError as e:
                logger.error(f"Failed to parse presets file: {e}", exc_info=True)
                return False
            except ValidationError as e:
                logger.error(f"Presets file does not match the expected schema: {e}")
                return False
            except OSError as e:
                logger.error(f"Error reading presets file: {e}", exc_info=True)
                return False

    def get_presets(self) -> List[ThemePreset]:
        with self.lock:
            return list(self.library.presets) if self.library else []

    def get_preset(self, preset_id: str) -> Optional[ThemePreset]:
        """Return a preset by id (case-insensitive), or None."""
        wanted = preset_id.lower().strip()
        for preset in self.get_presets():
            if preset.id.lower() == wanted:
                return preset
        return None

    def query_presets(self, jmespath_query: str) -> Any:
        """
        Query the library using JMESPath syntax, e.g.
        "presets[?contains(tags, 'minimal')].id".
        """
        with self.lock:
            if not self.library:
                return None
            data = self.library.model_dump(mode="json")
        try:
            return jmespath.search(jmespath_query, data)
        except JMESPathError as e:
            logger.error(f"JMESPath query error: {e}")
            return None

    def find_presets(self, tag: Optional[str] = None, industry: Optional[str] = None) -> List[ThemePreset]:
        """Presets carrying the given tag and/or made for the given industry."""
        filters = []
        if tag:
            filters.append(f"contains(tags, {json.dumps(tag.lower())})")
        if industry:
            filters.append(f"contains(industries, {json.dumps(industry.lower())})")
        if not filters:
            return self.get_presets()

        ids = self.query_presets(f"presets[?{' && '.join(filters)}].id") or []
        return [preset for preset in self.get_presets() if preset.id in ids]

    def stop_file_watcher(self):
        """Stop the file watcher if it's running."""
        if self.observer and self.observer.is_alive():
            logger.info("Stopping file watcher...")
            self.observer.stop()
            self.observer.join(timeout=2.0)
            logger.info("File watcher stopped.")

    def __del__(self):
        """Ensure the file watcher is stopped when the object is garbage collected."""
        self.stop_file_watcher()


# Create a singleton instance of the PresetLibraryLoader
_loader_instance = None


def get_preset_loader() -> PresetLibraryLoader:
    """
    Get the singleton instance of PresetLibraryLoader.
    This ensures that there's only one instance monitoring the file.
    """
    global _loader_instance
    if _loader_instance is None:
        _loader_instance = PresetLibraryLoader()
    return _loader_instance


if __name__ == "__main__":
    loader = get_preset_loader()
    for preset in loader.get_presets():
        print(f"  - {preset.id}: {preset.name} {preset.tags}")

    if settings.ENABLE_HOT_RELOAD:
        try:
            print("\nWatching for changes to presets file. Press Ctrl+C to stop.")
            while True:
                time.sleep(1)
        except KeyboardInterrupt:
            print("\nStopping file watcher...")
        finally:
            loader.stop_file_watcher()
