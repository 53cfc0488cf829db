"""
Profile image validation.

A broken profile image makes the compiler fail on an otherwise valid person,
so images are checked before staging: a missing image is fine (templates
render without a photo), an unusable one is skipped with a warning during
generation and rejected outright on upload.
"""

from pathlib import Path

from cvgen.exceptions import InvalidImage

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
JPEG_SIGNATURE = b"\xff\xd8\xff"
MAX_IMAGE_BYTES = 10 * 1024 * 1024


def validate_image_bytes(data: bytes, path: Path) -> None:
    """
    Check that image bytes match the format implied by the target filename.

    Args:
        data: Raw image content
        path: Filename the bytes are (or will be) stored under; its extension
              selects the expected format

    Raises:
        InvalidImage: If the data is empty, too large, truncated, or of the wrong format
    """
    if len(data) == 0:
        raise InvalidImage(path, "Profile image file is empty", "Please upload a valid image file")

    if len(data) > MAX_IMAGE_BYTES:
        raise InvalidImage(
            path,
            f"Image file too large: {len(data) / 1024 / 1024:.1f}MB (max 10MB)",
            "Please resize or compress your image and try again",
        )

    if len(data) < len(PNG_SIGNATURE):
        raise InvalidImage(path, "Image file too small or corrupted", "Please upload a valid image file")

    suffix = Path(path).suffix.lower()
    if suffix == ".png":
        if data.startswith(PNG_SIGNATURE):
            return
        if data.startswith(JPEG_SIGNATURE):
            raise InvalidImage(
                path,
                "File is JPEG but has .png extension",
                "Please convert the image to PNG format",
            )
        raise InvalidImage(path, "Invalid PNG file - corrupted or wrong format", "Please upload a valid PNG image file")

    if suffix in (".jpg", ".jpeg"):
        if data.startswith(JPEG_SIGNATURE):
            return
        if data.startswith(PNG_SIGNATURE):
            raise InvalidImage(
                path,
                "File is PNG but has .jpg/.jpeg extension",
                "Please rename the file to .png",
            )
        raise InvalidImage(path, "Invalid JPEG file - corrupted or wrong format", "Please upload a valid JPEG image file")

    raise InvalidImage(path, "Unsupported image format", "Please use PNG or JPEG format only")


def validate_profile_image(path: Path) -> bool:
    """
    Validate an on-disk profile image.

    Returns:
        True if the image exists and is valid, False if there is no image

    Raises:
        InvalidImage: If the image exists but cannot be used
    """
    path = Path(path)
    if not path.exists():
        return False

    try:
        size = path.stat().st_size
        if size > MAX_IMAGE_BYTES:
            # Size check first; no need to read the file
            raise InvalidImage(
                path,
                f"Image file too large: {size / 1024 / 1024:.1f}MB (max 10MB)",
                "Please resize or compress your image and try again",
            )
        data = path.read_bytes()
    except OSError as e:
        raise InvalidImage(path, f"Cannot read image file: {e}", "Check file permissions") from e

    validate_image_bytes(data, path)
    return True
