"""
Deployment settings read from the environment (and a local .env file).
"""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

DEFAULT_IMAGE_EXTENSIONS = ".png,.jpg,.jpeg,.bmp,.gif,.webp,.tif,.tiff"
LOG_FORMAT = '%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s'
LOG_DATEFMT = '%H:%M:%S'


def valid_image_extensions() -> set[str]:
    raw = os.getenv("VALID_IMAGE_EXTENSIONS", DEFAULT_IMAGE_EXTENSIONS)
    return {ext.strip().lower() for ext in raw.split(",") if ext.strip()}


def image_load_timeout() -> int:
    return int(os.getenv("IMAGE_LOAD_TIMEOUT", "5"))


def url_fetch_timeout() -> float:
    return float(os.getenv("URL_FETCH_TIMEOUT", "10"))


def max_url_image_bytes() -> int:
    return int(os.getenv("MAX_URL_IMAGE_MB", "20")) * 1024 * 1024


def upload_folder() -> str:
    return os.getenv("UPLOAD_FOLDER", "data/temp_uploads")


def max_upload_bytes() -> int:
    return int(os.getenv("MAX_UPLOAD_SIZE_MB", "20")) * 1024 * 1024


def api_server_port() -> int:
    return int(os.getenv("API_SERVER_PORT", "5002"))


def log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()
