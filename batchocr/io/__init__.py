"""Filesystem helpers: atomic writes and artifact naming."""

from .atomic import atomic_write, atomic_write_bytes, atomic_write_image, atomic_write_text, temp_path_for
from .naming import ArtifactNaming, document_output_dir, mirror_output_path

__all__ = [
    "atomic_write",
    "atomic_write_bytes",
    "atomic_write_image",
    "atomic_write_text",
    "temp_path_for",
    "ArtifactNaming",
    "document_output_dir",
    "mirror_output_path",
]
