import logging
import os
from io import BytesIO

from PIL import Image, ImageOps

logger = logging.getLogger(__name__)

MAX_PHOTO_SIZE = (800, 800)
MAX_UPLOAD_BYTES = 5 * 1024 * 1024

FORMAT_CONTENT_TYPES = {
    'JPEG': 'image/jpeg',
    'PNG': 'image/png',
    'WEBP': 'image/webp',
    'GIF': 'image/gif',
}


def prepare_photo(uploaded_file):
    """
    Resize an uploaded photo before it is sent to the family API.

    Returns a ``(filename, content, content_type)`` tuple usable as a
    ``requests`` file. Photos larger than 800x800 are shrunk keeping their
    aspect ratio; formats other than PNG/WEBP/GIF are re-encoded as JPEG.
    """
    uploaded_file.seek(0)
    img = Image.open(uploaded_file)

    image_format = (img.format or 'JPEG').upper()
    if image_format not in FORMAT_CONTENT_TYPES:
        image_format = 'JPEG'

    img = ImageOps.exif_transpose(img)

    if img.height > MAX_PHOTO_SIZE[1] or img.width > MAX_PHOTO_SIZE[0]:
        img.thumbnail(MAX_PHOTO_SIZE, Image.Resampling.LANCZOS)

    if image_format == 'JPEG' and img.mode not in ('RGB', 'L'):
        img = img.convert('RGB')

    buffer = BytesIO()
    if image_format == 'JPEG':
        img.save(buffer, format='JPEG', optimize=True, quality=85)
    else:
        img.save(buffer, format=image_format)

    base_name = os.path.splitext(os.path.basename(uploaded_file.name or 'photo'))[0] or 'photo'
    extension = 'jpg' if image_format == 'JPEG' else image_format.lower()
    filename = f'{base_name}.{extension}'

    logger.debug(f"Photo prepared: {filename} {img.width}x{img.height}")

    return filename, buffer.getvalue(), FORMAT_CONTENT_TYPES[image_format]
