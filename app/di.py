# app/di.py
from dataclasses import dataclass
from typing import Optional

from app.config import Settings
from app.services.volume import VolumeService

@dataclass
class Container:
    settings: Settings
    volume_service: VolumeService

def build_container(settings: Optional[Settings] = None) -> Container:
    s = settings or Settings()
    volume = VolumeService(s.VOLUME_ROOT, max_upload_bytes=s.MAX_UPLOAD_BYTES)
    return Container(s, volume)
