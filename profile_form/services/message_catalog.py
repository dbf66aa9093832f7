"""Service for loading field error messages from YAML."""

import yaml
from pathlib import Path
from typing import Dict, Optional
from pydantic import RootModel, ValidationError


class MessageCatalog(RootModel[Dict[str, Dict[str, str]]]):
    """Field path (without indices) -> error kind -> message."""
    
    def lookup(self, field: str, kind: str, default: str) -> str:
        """
        Find the message for a field and error kind.
        
        Args:
            field: Field path without list indices, e.g. "techs.title"
            kind: Error kind value, e.g. "required"
            default: Message to use when the catalog has no entry
            
        Returns:
            str: The catalog message, or the default
        """
        return self.root.get(field, {}).get(kind, default)


class MessageCatalogLoader:
    """Service to load and validate the message catalog."""
    
    def __init__(self, data_dir: Optional[Path] = None):
        """
        Initialize the catalog loader.
        
        Args:
            data_dir: Directory containing messages.yaml. Defaults to profile_form/data/
        """
        if data_dir is None:
            data_dir = Path(__file__).parent.parent / "data"
        self.data_dir = data_dir
    
    def load(self) -> MessageCatalog:
        """
        Load the message catalog.
        
        Returns:
            MessageCatalog: Validated catalog
            
        Raises:
            FileNotFoundError: If messages.yaml doesn't exist
            ValueError: If the YAML is malformed or has the wrong shape
        """
        filepath = self.data_dir / "messages.yaml"
        
        if not filepath.exists():
            raise FileNotFoundError(f"Message catalog not found: {filepath}")
        
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML format in {filepath}: {e}") from e
        
        if data is None:
            raise ValueError(f"Message catalog is empty: {filepath}")
        
        try:
            return MessageCatalog.model_validate(data)
        except ValidationError as e:
            raise ValueError(f"Invalid message catalog in {filepath}: {e}") from e


# Singleton instance
_catalog: Optional[MessageCatalog] = None


def get_message_catalog() -> MessageCatalog:
    """
    Get or load the message catalog singleton.
    
    Returns:
        MessageCatalog: The shared catalog
    """
    global _catalog
    if _catalog is None:
        _catalog = MessageCatalogLoader().load()
    return _catalog
