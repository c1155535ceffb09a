"""
Image storage backed by Cloudinary.

Used for fee QR codes, payment screenshots, expense receipts and profile
pictures. Only the secure URL and the public id are persisted locally.
"""

import logging

import cloudinary
import cloudinary.uploader
from django.conf import settings

from .exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

IMAGE_FORMATS = ['jpg', 'jpeg', 'png', 'webp']
DOCUMENT_FORMATS = IMAGE_FORMATS + ['pdf']


class MediaStorage:
    """
    Thin wrapper around ``cloudinary.uploader``.
    """

    def __init__(self):
        cloudinary.config(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET,
            secure=True,
        )

    def upload(self, file, folder, allowed_formats=None, transformation=None):
        """
        Upload ``file`` into ``folder``.

        Returns:
            dict with ``url`` and ``public_id``
        """
        options = {
            'folder': f"{settings.CLOUDINARY_ROOT_FOLDER}/{folder}",
            'allowed_formats': allowed_formats or IMAGE_FORMATS,
            'resource_type': 'image',
        }
        if transformation:
            options['transformation'] = transformation

        try:
            result = cloudinary.uploader.upload(file, **options)
        except Exception as e:
            logger.error(f"Image upload to '{folder}' failed: {e}", exc_info=True)
            raise ExternalServiceError('Failed to upload image') from e

        logger.info(f"Uploaded image {result.get('public_id')} to '{folder}'")
        return {'url': result['secure_url'], 'public_id': result['public_id']}

    def delete(self, public_id):
        if not public_id:
            return False
        try:
            result = cloudinary.uploader.destroy(public_id)
        except Exception as e:
            logger.error(f"Failed to delete image {public_id}: {e}", exc_info=True)
            raise ExternalServiceError('Failed to delete image') from e
        return result.get('result') == 'ok'


def get_media_storage():
    """Return the configured media storage."""
    return MediaStorage()
