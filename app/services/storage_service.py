"""
Local Image Storage Service
Saves complaint photos into UPLOAD_FOLDER and serves them under /uploads
"""

import os
import uuid

from flask import current_app
from PIL import Image, UnidentifiedImageError

from app.errors import ValidationError


class LocalStorageService:
    """Service for storing uploaded complaint images on local disk"""

    @staticmethod
    def allowed_file(filename):
        """Check if file extension is allowed"""
        allowed_extensions = current_app.config.get('ALLOWED_EXTENSIONS',
                                                     {'png', 'jpg', 'jpeg', 'gif', 'webp'})
        return '.' in filename and \
               filename.rsplit('.', 1)[1].lower() in allowed_extensions

    @staticmethod
    def verify_image(file):
        """Make sure the payload really decodes as an image"""
        try:
            with Image.open(file.stream) as img:
                img.verify()
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            current_app.logger.warning(f'Rejected upload {file.filename!r}: {str(e)}')
            raise ValidationError('Only image files are allowed')
        finally:
            file.stream.seek(0)

    @staticmethod
    def save_image(file):
        """
        Validate and save an uploaded image

        Args:
            file: FileStorage from request.files

        Returns:
            Public URL of the stored file, or None when no file was sent
        """
        if not file or not file.filename:
            return None

        mimetype = file.mimetype or ''
        if not mimetype.startswith('image/') or not LocalStorageService.allowed_file(file.filename):
            current_app.logger.warning(f'Rejected upload {file.filename!r} ({mimetype})')
            raise ValidationError('Only image files are allowed')

        LocalStorageService.verify_image(file)

        upload_folder = current_app.config['UPLOAD_FOLDER']
        os.makedirs(upload_folder, exist_ok=True)

        # Generate unique filename
        file_ext = file.filename.rsplit('.', 1)[1].lower()
        filename = f"{uuid.uuid4().hex}.{file_ext}"
        file.save(os.path.join(upload_folder, filename))

        prefix = current_app.config.get('UPLOAD_URL_PREFIX', '/uploads')
        return f"{prefix}/{filename}"

    @staticmethod
    def delete_image(image_url):
        """Remove a stored image; used when the complaint insert fails"""
        if not image_url:
            return False

        filename = os.path.basename(image_url)
        path = os.path.join(current_app.config['UPLOAD_FOLDER'], filename)
        try:
            os.remove(path)
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            current_app.logger.error(f'Image delete error: {str(e)}')
            return False
