"""
Utility functions
"""
from typing import Optional


# Digit order used by GMP for bases above 36
BASE62_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"

# Format signatures of the image types accepted as custom logos
IMAGE_SIGNATURES = (
    (b"\xff\xd8\xff", "jpeg"),
    (b"\x89PNG\r\n\x1a\n", "png"),
    (b"GIF87a", "gif"),
    (b"GIF89a", "gif"),
)


def to_base62(data: bytes) -> str:
    """
    Render bytes as a base62 number

    Example:
        >>> to_base62(b"\\x00\\x3d")
        'z'
    """
    number = int.from_bytes(data, "big")
    if number == 0:
        return "0"

    digits = []
    while number:
        number, rem = divmod(number, 62)
        digits.append(BASE62_ALPHABET[rem])
    return "".join(reversed(digits))


def sniff_image_type(data: bytes) -> Optional[str]:
    """Return 'jpeg', 'png' or 'gif' from the leading bytes, None for anything else"""
    for signature, kind in IMAGE_SIGNATURES:
        if data.startswith(signature):
            return kind
    return None
