"""
Cross-Post Routes
=================

API Endpoints:
- POST /api/post?services=bluesky,twitter - Publish text + up to 4 images
    form fields: text, altTexts (JSON array or single string)
    files: images
- GET /api/targets - Registered targets and their session state

Status codes: 201 when at least one target succeeded, 400 for a bad
request, 401 when a target fails to authenticate, 413 when the body is
over MAX_CONTENT_LENGTH, 500 when targets are not configured or every
post failed.
"""

from flask import jsonify, request, current_app
from werkzeug.exceptions import RequestEntityTooLarge

from . import crosspost_bp
from .errors import (
    AllTargetsFailedError, AuthError, ConfigError, TranscodeError, ValidationError,
)
from .models import PostRequest
from .upload import MAX_FILES, MAX_UPLOAD_SIZE, parse_alt_texts, parse_targets, save_uploads


def _get_service():
    return current_app.extensions['crossposter'].service


@crosspost_bp.route('/post', methods=['POST'])
def create_post():
    """Cross-post one message to the requested platforms"""
    service = _get_service()

    try:
        images = save_uploads(
            request.files.getlist('images'),
            current_app.config['UPLOAD_FOLDER'],
            max_files=service.max_attachments or MAX_FILES,
            max_upload_size=current_app.config.get('CROSSPOST_MAX_UPLOAD_SIZE', MAX_UPLOAD_SIZE),
        )
    except RequestEntityTooLarge:
        limit = current_app.config.get('MAX_CONTENT_LENGTH') or 0
        return jsonify({'error': f'Request too large. Maximum is {limit // (1024 * 1024)}MB'}), 413
    except ValidationError as e:
        return jsonify({'error': str(e)}), 400
    except OSError as e:
        current_app.logger.error(f"Error saving uploads: {e}")
        return jsonify({'error': 'Failed to save uploaded images'}), 500

    post_request = PostRequest(
        text=request.form.get('text', ''),
        alt_texts=parse_alt_texts(request.form.get('altTexts')),
        images=images,
        targets=parse_targets(request.args.get('services')),
    )

    try:
        response = service.post(post_request)
    except ValidationError as e:
        return jsonify({'error': str(e)}), 400
    except ConfigError as e:
        return jsonify({'error': 'Target credentials not configured', 'errors': e.errors}), 500
    except AuthError as e:
        return jsonify({'error': 'Authentication failed', 'errors': e.errors}), 401
    except TranscodeError as e:
        return jsonify({'error': str(e), 'errors': e.errors}), 400
    except AllTargetsFailedError as e:
        return jsonify({
            'error': 'All posts failed',
            'details': [r.to_dict() for r in e.results],
            'imageCount': e.image_count,
        }), 500
    except Exception as e:
        current_app.logger.error(f"Error creating posts: {e}")
        return jsonify({'error': 'Failed to create posts'}), 500

    return jsonify(response.to_dict()), 201


@crosspost_bp.route('/targets', methods=['GET'])
def list_targets():
    """List registered targets"""
    service = _get_service()
    return jsonify({
        'targets': [
            {
                'name': name,
                'maxAttachments': target.max_attachments,
                'configured': target.validate_config(),
                'authenticated': target.is_authenticated(),
            }
            for name, target in service.targets.items()
        ]
    })
