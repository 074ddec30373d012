from pathlib import Path

from pydantic import BaseModel


class StorageSettings(BaseModel):
    data_dir: Path = Path("data")  # One <invoice-id>.json per invoice
