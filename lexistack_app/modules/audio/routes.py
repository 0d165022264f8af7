# File: lexistack_app/modules/audio/routes.py
from flask import current_app, send_from_directory

from . import audio_bp


@audio_bp.route('/<path:filename>', methods=['GET'])
def serve_audio(filename):
    """Serve a synthesized file from the audio cache."""
    return send_from_directory(current_app.config['AUDIO_CACHE_DIR'], filename, mimetype='audio/mpeg')
