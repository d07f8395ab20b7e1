#!/usr/bin/env python3
"""
Leaf Health Analyzer API Server
One upload in, segmentation + pigment verdict out.
"""

import os
import logging
from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from flask import Flask, request, jsonify
from flask_cors import CORS

from .exceptions import InvalidBufferError
from .models.segmentation_config import SegmentationConfig
from .pipeline.leaf_analyzer import analyze_leaf
from .services.image_service import ImageService

# --- Centralized Logging Configuration ---
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
    datefmt='%H:%M:%S'
)

app = Flask(__name__)
CORS(app)  # Enable CORS for frontend communication

# Configuration
ALLOWED_EXTENSIONS = set(os.getenv("ALLOWED_EXTENSIONS", "png,jpg,jpeg,gif,bmp,webp").split(","))
MAX_CONTENT_LENGTH = int(os.getenv("MAX_UPLOAD_SIZE_MB", "20")) * 1024 * 1024
CONFIG_FIELDS = (
    "tolerance_multiplier",
    "min_threshold",
    "max_threshold",
    "sample_stride",
    "morph_iterations",
    "min_component_pixels",
)

app.config['MAX_CONTENT_LENGTH'] = MAX_CONTENT_LENGTH

# Initialize services
image_service = ImageService()

logger = logging.getLogger(__name__)


def allowed_file(filename: str) -> bool:
    """Check if file extension is allowed."""
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


def _truthy(value) -> bool:
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


@app.route('/api/analyze', methods=['POST'])
def analyze():
    """Segment the uploaded leaf photo and classify its pigments."""
    if 'leaf_image' not in request.files:
        return jsonify({'success': False, 'message': 'No leaf image provided'}), 400

    file = request.files['leaf_image']
    if file.filename == '':
        return jsonify({'success': False, 'message': 'No file selected'}), 400
    if not allowed_file(file.filename):
        return jsonify({'success': False, 'message': f'Unsupported file type: {file.filename}'}), 400

    try:
        config = SegmentationConfig.from_mapping(
            {name: request.form.get(name) for name in CONFIG_FIELDS}
        )
    except ValueError as e:
        return jsonify({'success': False, 'message': f'Invalid segmentation settings: {e}'}), 400

    use_remote = _truthy(request.form.get('use_remote', 'false'))
    image_bytes = file.read()

    try:
        image = image_service.fit_to_max_dim(image_service.decode(image_bytes))
        logger.info(f"Leaf image decoded: {image.pixels.shape}, remote={use_remote}")

        analysis = analyze_leaf(
            image,
            config=config,
            image_bytes=image_bytes,
            use_remote=use_remote,
            image_service=image_service,
        )
    except (InvalidBufferError, ValueError) as e:
        logger.warning(f"Rejected leaf image {file.filename}: {e}")
        return jsonify({'success': False, 'message': f'Could not read image: {e}'}), 400
    except Exception as e:
        logger.error(f"Leaf analysis error: {e}")
        return jsonify({'success': False, 'message': 'Error analyzing leaf image'}), 500

    return jsonify({
        'success': True,
        **analysis.to_dict(),
        'width': analysis.image.width,
        'height': analysis.image.height,
        'cutout': image_service.to_base64_png(analysis.image),
    })


@app.route('/api/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return jsonify({
        'status': 'healthy',
        'message': 'Leaf Health Analyzer API is running',
    })


@app.errorhandler(413)
def too_large(e):
    """Handle file too large error."""
    return jsonify({'error': f'File too large. Maximum size is {MAX_CONTENT_LENGTH // (1024 * 1024)}MB.'}), 413


@app.errorhandler(400)
def bad_request(e):
    """Handle bad request error."""
    return jsonify({'error': 'Bad request'}), 400


@app.errorhandler(500)
def internal_error(e):
    """Handle internal server error."""
    logger.error(f"Internal server error: {e}")
    return jsonify({'error': 'Internal server error'}), 500


def main():
    host = os.getenv("API_HOST", "127.0.0.1")
    port = int(os.getenv("API_PORT", "5000"))
    logger.info(f"Starting Leaf Health Analyzer API on {host}:{port} "
                f"(max upload {MAX_CONTENT_LENGTH // (1024 * 1024)}MB)")
    app.run(host=host, port=port, debug=False)


if __name__ == '__main__':
    main()
