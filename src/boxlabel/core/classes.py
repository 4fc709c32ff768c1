"""Class name table backed by the darknet label file."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

from .errors import LabelFileError

logger = logging.getLogger(__name__)

DEFAULT_CLASS = "object"
LABELS_FILE_NAME = "_darknet.labels"


class ClassTable:
    """
    Ordered list of unique class names.

    A name's position is its numeric id in annotation files. The table
    is shared by every image in a directory and persisted to a label
    file with one name per line.

    Legacy quirk: when the first entry is the placeholder "object",
    numeric ids read from annotation files are shifted up by one
    before lookup, and shifted back down when written.
    """

    def __init__(self, names: Optional[Iterable[str]] = None) -> None:
        """
        Initialize the table.

        Args:
            names: Initial class names, defaults to ["object"]
        """
        self._names: List[str] = []
        for name in names or [DEFAULT_CLASS]:
            if name not in self._names:
                self._names.append(name)
        if not self._names:
            self._names.append(DEFAULT_CLASS)
        self.path: Optional[Path] = None
        self.modified = False

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __getitem__(self, index: int) -> str:
        return self._names[index]

    @property
    def names(self) -> List[str]:
        """Copy of the class names in id order."""
        return list(self._names)

    @property
    def legacy_offset(self) -> int:
        """Shift applied to numeric ids read from annotation files."""
        return 1 if self._names and self._names[0] == DEFAULT_CLASS else 0

    def index_of(self, name: str) -> Optional[int]:
        """Return the index of a class name, or None if absent."""
        try:
            return self._names.index(name)
        except ValueError:
            return None

    # === Persistence ===

    def load(self, path: Path) -> None:
        """
        Load class names from a label file.

        Blank lines are skipped and names are trimmed. A missing, empty
        or unreadable file leaves the table as ["object"]. A missing file
        marks the table modified so the next persist creates it.

        Args:
            path: Path to the label file
        """
        path = Path(path)
        self.path = path
        self._names = []
        self.modified = False

        if path.exists():
            try:
                with open(path, "r", encoding="utf-8") as f:
                    for line in f:
                        name = line.strip()
                        if name and name not in self._names:
                            self._names.append(name)
                logger.info(f"Loaded {len(self._names)} classes from {path}")
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Could not read label file {path}: {e}")
                self._names = []
        else:
            logger.info(f"Label file not found at {path}, using defaults")
            self.modified = True

        if not self._names:
            self._names.append(DEFAULT_CLASS)

    def save(self, path: Optional[Path] = None) -> None:
        """
        Write one class name per line, overwriting the file.

        Args:
            path: Target path, defaults to the path last loaded from

        Raises:
            LabelFileError: If the file cannot be written
        """
        target = Path(path) if path is not None else self.path
        if target is None:
            raise LabelFileError("No label file path set")

        try:
            with open(target, "w", encoding="utf-8") as f:
                for name in self._names:
                    f.write(name + "\n")
        except OSError as e:
            raise LabelFileError(f"Error writing label file {target}: {e}", target) from e

        self.path = target
        self.modified = False
        logger.debug(f"Saved {len(self._names)} classes to {target}")

    def save_if_modified(self) -> bool:
        """
        Persist the table if it changed since the last load or save.

        Returns:
            True if the file was written

        Raises:
            LabelFileError: If the file cannot be written
        """
        if not self.modified or self.path is None:
            return False
        self.save()
        return True

    # === Lookup ===

    def add(self, name: str) -> int:
        """
        Add a class name if absent.

        Args:
            name: Class name, surrounding whitespace is ignored

        Returns:
            Index of the class

        Raises:
            ValueError: If the name is blank
        """
        name = name.strip()
        if not name:
            raise ValueError("Class name must not be empty")
        return self.id_for(name)

    def id_for(self, name: str) -> int:
        """
        Return the index of a class, appending it if unseen.

        Appending marks the table as modified; callers persist afterwards.
        """
        index = self.index_of(name)
        if index is not None:
            return index

        self._names.append(name)
        self.modified = True
        logger.info(f"Added class '{name}' with id {len(self._names) - 1}")
        return len(self._names) - 1

    def resolve_token(self, token: str) -> str:
        """
        Resolve the class field of an annotation line to a class name.

        Numeric tokens (digits with an optional leading "+") are shifted
        by the legacy offset and looked up; ids past the end grow the
        table with "class_<n>" placeholders up to that id, marking it
        modified. Any other token is a literal
        class name with underscores standing in for spaces.

        Args:
            token: First field of an annotation line

        Returns:
            The class name
        """
        digits = token[1:] if token.startswith("+") else token
        if not (digits.isascii() and digits.isdigit()):
            return token.replace("_", " ")

        class_id = int(digits) + self.legacy_offset
        while len(self._names) <= class_id:
            placeholder = f"class_{len(self._names)}"
            self._names.append(placeholder)
            self.modified = True
            logger.debug(f"Extended class table with placeholder '{placeholder}'")
        return self._names[class_id]

    def serialized_id(self, name: str) -> int:
        """
        Return the numeric id written to annotation files for a class.

        Inverse of resolve_token: the index minus the legacy offset. The
        "object" entry itself is written as 0.
        """
        class_id = self.id_for(name)
        offset = self.legacy_offset
        if class_id < offset:
            offset = 0
        return class_id - offset
