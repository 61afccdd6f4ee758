#!/usr/bin/env python3
"""
QR Region Scanner API Server
Upload a photo (or point at an image URL) and get back the decoded QR code,
its corners in the original image, and how it was found.
"""

import logging
import uuid
from pathlib import Path

from flask import Flask, request, jsonify
from flask_cors import CORS
from werkzeug.utils import secure_filename

from .config import (
    LOG_DATEFMT,
    LOG_FORMAT,
    api_server_port,
    log_level,
    max_upload_bytes,
    upload_folder,
    valid_image_extensions,
)
from .exceptions import ImageLoadError
from .pipeline.qr_scanner import default_search_service, describe, scan_file, scan_url
from .services.image_service import ImageService

app = Flask(__name__)
CORS(app)  # Enable CORS for frontend communication

# Configuration
UPLOAD_FOLDER = upload_folder()
ALLOWED_EXTENSIONS = valid_image_extensions()

app.config['UPLOAD_FOLDER'] = UPLOAD_FOLDER
app.config['MAX_CONTENT_LENGTH'] = max_upload_bytes()

# Initialize services
image_service = ImageService()
search_service = default_search_service()

logger = logging.getLogger(__name__)


def allowed_file(filename: str) -> bool:
    """Check if file extension is allowed."""
    return Path(filename).suffix.lower() in ALLOWED_EXTENSIONS


@app.route('/api/scan', methods=['POST'])
def scan_upload():
    """Scan an uploaded image file (multipart field `image`)."""
    if 'image' not in request.files:
        return jsonify({'found': False, 'message': 'No image provided'}), 400

    file = request.files['image']
    if file.filename == '':
        return jsonify({'found': False, 'message': 'No file selected'}), 400
    if not allowed_file(file.filename):
        return jsonify({'found': False, 'message': f'Unsupported file type: {file.filename}'}), 400

    # Save uploaded file temporarily
    filename = secure_filename(file.filename)
    Path(UPLOAD_FOLDER).mkdir(parents=True, exist_ok=True)
    temp_path = Path(UPLOAD_FOLDER) / f"scan_{uuid.uuid4().hex}_{filename}"
    file.save(str(temp_path))

    try:
        outcome = scan_file(temp_path, image_service=image_service, search_service=search_service)
        return jsonify(describe(outcome))
    except ImageLoadError as e:
        logger.error(f"Upload could not be loaded: {e}")
        return jsonify({'found': False, 'kind': 'error', 'message': 'Image failed to load'}), 400
    finally:
        # Clean up temp file
        if temp_path.exists():
            temp_path.unlink()


@app.route('/api/scan-url', methods=['POST'])
def scan_remote():
    """Scan an image fetched from a URL (JSON body `{"url": ...}`)."""
    payload = request.get_json(silent=True) or {}
    url = (payload.get('url') or '').strip()
    if not url:
        return jsonify({'found': False, 'message': 'No image URL provided'}), 400

    try:
        outcome = scan_url(url, image_service=image_service, search_service=search_service)
    except ImageLoadError as e:
        logger.error(f"Remote image could not be loaded: {e}")
        return jsonify({
            'found': False,
            'kind': 'error',
            'message': 'Image failed to load; check the URL and that the host allows access',
        }), 400

    return jsonify(describe(outcome))


@app.route('/api/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return jsonify({'status': 'healthy', 'service': 'qr-region-scanner'})


@app.errorhandler(413)
def too_large(e):
    """Handle file too large error."""
    limit_mb = app.config['MAX_CONTENT_LENGTH'] // (1024 * 1024)
    return jsonify({'found': False, 'message': f'File too large. Maximum size is {limit_mb}MB'}), 413


@app.errorhandler(500)
def internal_error(e):
    """Handle internal server error."""
    logger.error(f"Internal server error: {e}")
    return jsonify({'error': 'Internal server error'}), 500


def main():
    logging.basicConfig(level=log_level(), format=LOG_FORMAT, datefmt=LOG_DATEFMT)
    port = api_server_port()
    logger.info(f"Starting QR Region Scanner API on port {port} (uploads: {UPLOAD_FOLDER})")
    app.run(host='0.0.0.0', port=port)


if __name__ == '__main__':
    main()
