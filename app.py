"""
Flask API Application for PDF Annotation Export

Endpoints:
- POST /api/export: Merge viewer annotations into the stored PDF and return it
- POST /api/upload: Store a PDF in DigitalOcean Spaces
- DELETE /api/delete: Remove a stored PDF
- POST /api/deepseek: Draft annotation text with the language model

The bundled font is loaded once when the app is created; a missing font
file stops the service from starting.
"""

import os
import time
import uuid
from datetime import datetime, timezone
from urllib.parse import urlparse

from botocore.exceptions import BotoCoreError, ClientError
from flask import Blueprint, Flask, Response, current_app, jsonify, request

from annotation_export import (
    AIServiceError,
    AnnotationValidationError,
    StorageConfigError,
    StorageNotFoundError,
    export_annotated_pdf,
    load_font_asset,
    parse_export_request,
)
from annotation_export import do_spaces
from annotation_export.ai_client import DeepSeekClient
from config import (
    DEEPSEEK_API_KEY,
    DEEPSEEK_BASE_URL,
    DEEPSEEK_MODEL,
    DEEPSEEK_TIMEOUT,
    DO_SPACES_BUCKET,
    FONT_NAME,
    FONT_PATH,
    MAX_UPLOAD_BYTES,
)
from logger import get_logger, get_request_logger, new_request_id

logger = get_logger('app')

api = Blueprint('api', __name__)


@api.route('/api/export', methods=['POST'])
def export_pdf():
    """
    Export the source PDF with annotations embedded.

    Request body:
        - filename (required): storage key of the source PDF
        - annotations (required): list of viewer annotations with replies

    Returns:
        - 200: application/pdf attachment, X-Annotation-Count header
        - 400: missing or malformed fields
        - 404: source PDF not found in storage
        - 500: load or assembly failure
    """
    request_id = new_request_id()
    log = get_request_logger(request_id)

    try:
        filename, annotations = parse_export_request(request.get_json(silent=True))
    except AnnotationValidationError as e:
        log.warning("Rejected export request: %s", e)
        return jsonify({'error': str(e)}), 400

    log.info("Export started: file=%s, annotations=%d", filename, len(annotations))

    try:
        pdf_bytes, count = export_annotated_pdf(
            filename, annotations, current_app.config['FONT_ASSET'], log
        )
    except StorageNotFoundError as e:
        return jsonify({'error': 'File not found', 'details': str(e)}), 404
    except StorageConfigError as e:
        log.error("Storage not configured: %s", e)
        return jsonify({'error': 'Storage not configured', 'details': str(e)}), 500
    except Exception as e:
        log.exception("Export failed")
        return jsonify({'error': 'Failed to export annotated PDF', 'details': str(e)}), 500

    export_name = f"export_{datetime.now().strftime('%Y%m%d%H%M%S')}.pdf"
    log.info("Export finished: %s, %d annotation objects", export_name, count)

    response = Response(pdf_bytes, status=200, mimetype='application/pdf')
    response.headers['Content-Disposition'] = f'attachment; filename="{export_name}"'
    response.headers['X-Annotation-Count'] = str(count)
    response.headers['X-Request-Id'] = request_id
    return response


@api.route('/api/upload', methods=['POST'])
def upload_pdf():
    """
    Upload a PDF (multipart field "file") to storage under its own name.

    Returns:
        - success, document metadata (id, name, url, size, uploadTime, blobPath)
    """
    file = request.files.get('file')
    if file is None or not file.filename:
        return jsonify({'success': False, 'error': 'No file provided'}), 400

    if file.mimetype != 'application/pdf':
        return jsonify({'success': False, 'error': 'Only PDF files are allowed'}), 400

    data = file.read()
    max_size = current_app.config['MAX_UPLOAD_BYTES']
    if len(data) > max_size:
        return jsonify({
            'success': False,
            'error': f'File size must be less than {max_size / (1024 * 1024):.1f}MB'
        }), 400

    name = os.path.basename(file.filename)
    result = do_spaces.upload_to_spaces(data, name)
    if result['status'] != 'success':
        return jsonify({'success': False, 'error': 'Upload failed: ' + result['message']}), 500

    document = {
        'id': f"{int(time.time() * 1000)}{uuid.uuid4().hex[:9]}",
        'name': name,
        'url': result['public_url'],
        'size': len(data),
        'uploadTime': datetime.now(timezone.utc).isoformat(),
        'blobPath': name,
    }
    return jsonify({'success': True, 'document': document}), 200


@api.route('/api/delete', methods=['DELETE'])
def delete_pdf():
    """Delete a stored PDF by its blobPath (storage key or public URL)."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    blob_path = data.get('blobPath')
    if not blob_path:
        return jsonify({'success': False, 'error': 'Blob path is required'}), 400
    if not isinstance(blob_path, str):
        return jsonify({'success': False, 'error': 'Blob path must be a string'}), 400

    if blob_path.startswith(('http://', 'https://')):
        blob_path = urlparse(blob_path).path.lstrip('/')

    result = do_spaces.delete_from_spaces(blob_path)
    if result['status'] != 'success':
        return jsonify({'success': False, 'error': 'Delete failed: ' + result['message']}), 500

    return jsonify({'success': True}), 200


@api.route('/api/deepseek', methods=['POST'])
def generate_text():
    """
    Run a prompt through the language model.

    Request body:
        - prompt (required): string
        - model (optional): model name, overridden by DEEPSEEK_MODEL
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    prompt = data.get('prompt')
    if not prompt:
        return jsonify({'error': 'Prompt is required'}), 400

    client = DeepSeekClient(
        api_key=current_app.config['DEEPSEEK_API_KEY'],
        base_url=current_app.config['DEEPSEEK_BASE_URL'],
        model=current_app.config['DEEPSEEK_MODEL'] or None,
        timeout=current_app.config['DEEPSEEK_TIMEOUT'],
    )
    try:
        result = client.complete(prompt, model=data.get('model'))
    except AIServiceError as e:
        return jsonify({'error': str(e), 'details': e.details}), e.status_code

    return jsonify(result), 200


@api.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint to verify the API is running."""
    return jsonify({
        "status": "healthy",
        "service": "pdf-annotation-export"
    }), 200


@api.route('/health/storage', methods=['GET'])
def storage_health_check():
    """Check that DigitalOcean Spaces is configured and the bucket is reachable."""
    try:
        client = do_spaces.get_spaces_client()
        client.head_bucket(Bucket=DO_SPACES_BUCKET)
    except StorageConfigError as e:
        return jsonify({
            "status": "unhealthy",
            "service": "storage",
            "message": str(e)
        }), 503
    except (ClientError, BotoCoreError) as e:
        return jsonify({
            "status": "unhealthy",
            "service": "storage",
            "message": str(e)
        }), 503

    return jsonify({
        "status": "healthy",
        "service": "storage",
        "bucket": DO_SPACES_BUCKET
    }), 200


def create_app(font_asset=None, **overrides) -> Flask:
    """
    Build the Flask application.

    Args:
        font_asset: Preloaded FontAsset (default: loaded from FONT_PATH)
        overrides: Extra Flask config values

    Raises:
        FontAssetError: the font file is missing or unreadable
    """
    app = Flask(__name__)
    app.config.update(
        MAX_UPLOAD_BYTES=MAX_UPLOAD_BYTES,
        DEEPSEEK_API_KEY=DEEPSEEK_API_KEY,
        DEEPSEEK_BASE_URL=DEEPSEEK_BASE_URL,
        DEEPSEEK_MODEL=DEEPSEEK_MODEL,
        DEEPSEEK_TIMEOUT=DEEPSEEK_TIMEOUT,
    )
    app.config.update(overrides)

    if font_asset is None:
        font_asset = load_font_asset(FONT_PATH, FONT_NAME)
    app.config['FONT_ASSET'] = font_asset

    app.register_blueprint(api)
    logger.info("Export service ready (font: %s)", font_asset.path)
    return app


if __name__ == '__main__':
    create_app().run(debug=True, host='0.0.0.0', port=5003)
