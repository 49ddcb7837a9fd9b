"""Binary asset uploads."""

from portal_admin.assets.uploader import (
    ImageDestination,
    ImageUploader,
    decode_image,
    extension_for,
    folder_name_for,
)

__all__ = ["ImageDestination", "ImageUploader", "decode_image", "extension_for", "folder_name_for"]
