import os
import uuid
from werkzeug.utils import secure_filename
from flask import current_app
from pagebuilder.domain.exceptions import ValidationError

ALLOWED_EXTENSIONS = {'png', 'jpg', 'jpeg', 'webp'}

def allowed_file(filename):
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS

def _stream_size(file):
    stream = file.stream
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)
    return size

def save_file(file):
    if not file or not file.filename:
        raise ValidationError.single("file", "A file is required")
    if not allowed_file(file.filename):
        raise ValidationError.single("file", "Only PNG, JPG and WEBP images are allowed")

    max_bytes = current_app.config.get("MAX_UPLOAD_BYTES", 5 * 1024 * 1024)
    if _stream_size(file) > max_bytes:
        raise ValidationError.single("file", f"Images must be {max_bytes // (1024 * 1024)}MB or smaller")

    filename = secure_filename(file.filename)
    ext = filename.rsplit('.', 1)[1].lower()
    unique_filename = f"{uuid.uuid4().hex}.{ext}"

    upload_folder = current_app.config.get('UPLOAD_FOLDER', 'uploads')
    os.makedirs(upload_folder, exist_ok=True)
    file_path = os.path.join(upload_folder, unique_filename)

    file.save(file_path)

    # Return URL (local for dev, CDN URL in production)
    return f"/{os.path.basename(upload_folder.rstrip('/'))}/{unique_filename}"
