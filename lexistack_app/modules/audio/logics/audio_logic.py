import hashlib
import os


def generate_hash_name(text: str, engine: str, voice: str) -> str:
    """
    Generate a deterministic MD5 hash filename for the audio request.
    Format: md5(text|engine|voice).mp3
    """
    text_norm = text.strip()
    voice_norm = voice if voice else "default"

    raw_key = f"{text_norm}|{engine}|{voice_norm}"
    hash_obj = hashlib.md5(raw_key.encode('utf-8'))
    return f"{hash_obj.hexdigest()}.mp3"


def get_storage_path(cache_dir: str, filename: str) -> dict:
    """
    Resolve physical path and public URL for a cached audio file.

    Returns:
        dict: {'physical_path': str, 'url': str}
    """
    return {
        'physical_path': os.path.join(cache_dir, filename),
        'url': f"/audio/{filename}",
    }
