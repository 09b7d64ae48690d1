"""
Storage for uploaded file payloads.
Each file paste owns ``<base_dir>/<animal-names>/<file name>``.
"""
import logging
import os
import shutil
from typing import BinaryIO

from wordbin.animals import to_animal_names
from wordbin.models import Paste

logger = logging.getLogger(__name__)


class FilePayloadStore:
    """Directory-per-paste storage for uploaded files."""

    def __init__(self, base_dir: str):
        """
        Initialize the store, creating ``base_dir`` if needed.

        Args:
            base_dir: Directory holding one subdirectory per file paste
        """
        self.base_dir = base_dir
        os.makedirs(self.base_dir, exist_ok=True)

    def directory_for(self, paste_id: int) -> str:
        """
        Directory owned by a paste.

        Args:
            paste_id: Numeric paste identifier

        Returns:
            Path named after the paste's animal-name identifier
        """
        return os.path.join(self.base_dir, to_animal_names(paste_id))

    def path_for(self, paste: Paste) -> str:
        """
        Location of the file attached to a paste.

        Args:
            paste: A paste with a file attached

        Returns:
            Path of the stored upload

        Raises:
            ValueError: If the paste has no file
        """
        if not paste.has_file:
            raise ValueError(f"Paste {paste.id_as_animals()} has no file")
        return os.path.join(self.directory_for(paste.id), paste.file_name)

    def open_for_write(self, paste_id: int, file_name: str) -> BinaryIO:
        """
        Create the paste's directory and open ``file_name`` in it for writing.

        Args:
            paste_id: Identifier reserved for the paste being uploaded
            file_name: Normalised upload name

        Returns:
            Binary file handle; the caller closes it
        """
        directory = self.directory_for(paste_id)
        os.makedirs(directory, exist_ok=True)
        return open(os.path.join(directory, file_name), "wb")

    def delete(self, paste_id: int) -> None:
        """
        Remove a paste's directory and everything in it.

        Args:
            paste_id: Numeric paste identifier; a missing directory is ignored
        """
        directory = self.directory_for(paste_id)
        if not os.path.isdir(directory):
            return
        shutil.rmtree(directory)
        logger.info(f"Deleted file payload {directory}")
