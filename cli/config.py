"""Configuration and session storage for the FileVault CLI."""

import json
import os
import shutil
from pathlib import Path
from typing import Optional

from common.constants import (
    DEFAULT_TIMEOUT_SECONDS,
    UPLOAD_TIMEOUT_BASE_SECONDS,
    UPLOAD_TIMEOUT_PER_MB_SECONDS,
)
from common.logging_config import get_logger
from common.types import Identity

logger = get_logger(__name__)

SESSION_KEYS = ("user_id", "is_admin", "username", "email", "first_name", "last_name")


class Config:
    """Manages CLI configuration and the logged-in session in a JSON file."""

    DEFAULT_CONFIG = {
        "server_url": os.environ.get("FILEVAULT_SERVER_URL", "http://localhost:8080"),
        "share_origin": os.environ.get("FILEVAULT_SHARE_ORIGIN", ""),
        "timeout": DEFAULT_TIMEOUT_SECONDS,
        "upload_timeout_base": UPLOAD_TIMEOUT_BASE_SECONDS,
        "upload_timeout_per_mb": UPLOAD_TIMEOUT_PER_MB_SECONDS,
        "downloads_dir": "downloads",
    }

    def __init__(self, config_path: Path):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (typically ~/.filevault/config.json)
        """
        self.config_path = config_path
        self.data = self._load()

    def _load(self) -> dict:
        """
        Load configuration from file, creating defaults if necessary.

        Returns:
            Configuration dictionary
        """
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
        except PermissionError:
            import tempfile
            self.config_path = Path(tempfile.gettempdir()) / '.filevault' / 'config.json'
            self.config_path.parent.mkdir(parents=True, exist_ok=True)

        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    data = json.load(f)
                config = self.DEFAULT_CONFIG.copy()
                config.update(data)
                return config
            except (json.JSONDecodeError, IOError) as e:
                logger.warning(f"Unreadable config at {self.config_path}: {e}; using defaults")
                backup_path = self.config_path.with_suffix('.json.bak')
                try:
                    shutil.copy(self.config_path, backup_path)
                except OSError as copy_error:
                    logger.warning(f"Could not back up config: {copy_error}")
                return self.DEFAULT_CONFIG.copy()
        else:
            config = self.DEFAULT_CONFIG.copy()
            try:
                with open(self.config_path, 'w') as f:
                    json.dump(config, f, indent=2)
            except IOError as e:
                logger.warning(f"Could not write default config: {e}")
            return config

    def save(self) -> None:
        """Save current configuration to file."""
        try:
            with open(self.config_path, 'w') as f:
                json.dump(self.data, f, indent=2)
        except IOError as e:
            logger.warning(f"Could not save config: {e}")

    def get_identity(self) -> Optional[Identity]:
        """
        Get the logged-in identity.

        Returns:
            Identity or None if no user is logged in
        """
        user_id = self.data.get('user_id')
        if not user_id:
            return None
        return Identity(user_id=user_id, is_admin=bool(self.data.get('is_admin', False)))

    def set_session(
        self,
        user_id: str,
        is_admin: bool = False,
        username: str = "",
        email: str = "",
        first_name: str = "",
        last_name: str = "",
    ) -> None:
        """
        Store the logged-in session and save to file.

        Args:
            user_id: Opaque user id returned by login
            is_admin: Administrator flag returned by login
            username: Display username
            email: Account email
            first_name: First name
            last_name: Last name
        """
        self.data.update({
            'user_id': user_id,
            'is_admin': is_admin,
            'username': username,
            'email': email,
            'first_name': first_name,
            'last_name': last_name,
        })
        self.save()

    def clear_session(self) -> None:
        """Forget the logged-in session and save to file."""
        for key in SESSION_KEYS:
            self.data.pop(key, None)
        self.save()

    def get_profile(self) -> dict:
        """Stored profile fields of the logged-in user."""
        return {key: self.data.get(key, "") for key in ('username', 'email', 'first_name', 'last_name')}

    def get_base_url(self) -> str:
        """
        Get server base URL.

        Returns:
            Base URL string (e.g., "http://localhost:8080")
        """
        return self.data.get('server_url', 'http://localhost:8080').rstrip('/')

    def get_share_origin(self) -> str:
        """
        Get the origin share links are built on.

        Returns:
            Configured share origin, or the server URL when unset
        """
        return (self.data.get('share_origin') or self.get_base_url()).rstrip('/')

    def get_timeout(self) -> float:
        """
        Get request timeout in seconds.

        Returns:
            Timeout value in seconds
        """
        return self.data.get('timeout', DEFAULT_TIMEOUT_SECONDS)

    def get_upload_timeout_config(self) -> dict:
        """
        Get upload timeout configuration.

        Returns:
            Dictionary with 'upload_timeout_base' and 'upload_timeout_per_mb'
        """
        return {
            'upload_timeout_base': self.data.get('upload_timeout_base', UPLOAD_TIMEOUT_BASE_SECONDS),
            'upload_timeout_per_mb': self.data.get('upload_timeout_per_mb', UPLOAD_TIMEOUT_PER_MB_SECONDS),
        }

    def get_downloads_dir(self) -> Path:
        """
        Get the directory downloads are saved to.

        Returns:
            Absolute path of the downloads directory
        """
        return Path(self.data.get('downloads_dir', 'downloads')).expanduser().resolve()
