"""Art library on the backend and the local custom set symbol store."""

import json
import logging
import time
from pathlib import Path
from typing import Optional

from mtg_card_designer.config import get_settings
from mtg_card_designer.domain.card import AssetRef, CustomSetSymbol
from mtg_card_designer.errors import InputValidationError, ServiceError
from mtg_card_designer.services.api_client import ApiClient

logger = logging.getLogger(__name__)


class AssetService:
    """Upload, list and delete the user's art images."""

    def __init__(self, client: Optional[ApiClient] = None):
        self.client = client or ApiClient()

    def upload_art(self, data: bytes, filename: str = "art.png") -> AssetRef:
        if not data:
            raise InputValidationError("No image data to upload")
        row = self.client.post(
            "assets",
            files={"art": (filename, data, "image/png")},
            default_error="Failed to upload asset",
        )
        if not isinstance(row, dict):
            raise ServiceError("Malformed asset response")
        asset = AssetRef.model_validate(row)
        logger.info(f"Uploaded art asset {asset.id}")
        return asset

    def list_art(self) -> list[AssetRef]:
        rows = self.client.get("assets", default_error="Failed to fetch assets")
        return [AssetRef.model_validate(row) for row in rows or []]

    def delete_art(self, asset_id: int) -> None:
        self.client.delete(f"assets/{asset_id}", default_error="Failed to delete asset")


class SetSymbolStore:
    """Custom set symbols kept in a JSON file in the data directory."""

    FILENAME = "custom_set_symbols.json"

    def __init__(self, path: Optional[Path] = None):
        self.path = path or get_settings().data_dir / self.FILENAME

    def list(self) -> list[CustomSetSymbol]:
        if not self.path.exists():
            return []
        with open(self.path, encoding="utf-8") as f:
            return [CustomSetSymbol.model_validate(item) for item in json.load(f)]

    def add(self, name: str, url: str) -> CustomSetSymbol:
        if not name.strip():
            raise InputValidationError("Set symbol name is required")
        if not url:
            raise InputValidationError("Set symbol image is required")

        symbols = self.list()
        symbol = CustomSetSymbol(id=f"custom-{time.time_ns()}", name=name.strip(), url=url)
        symbols.append(symbol)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump([s.model_dump() for s in symbols], f, indent=2)
        return symbol
