import json
import logging

from typing import Any

from rhinoview.compute.dataclasses import STRING_TYPE_TAG, Item

from .kernel import GeometryKernel

console_logger = logging.getLogger(__name__)


def try_decode(item: Item, kernel: GeometryKernel) -> Any | None:
    """Attempt to decode a data tree item to kernel geometry.

    Decoding is best-effort. The service uses the same string type tag for
    Draco-compressed meshes and for ordinary strings, so a string that fails to
    decompress is simply not geometry. Every recognized failure yields None;
    the item is never modified.

    Args:
        item: The output item to decode.
        kernel: Geometry kernel used for decompression and decoding.

    Returns:
        The decoded geometry, or None if the item is not geometry.
    """
    try:
        data = json.loads(item.data)
    except (json.JSONDecodeError, TypeError):
        console_logger.debug(f"Item payload of type {item.type} is not JSON")
        return None

    if item.type == STRING_TYPE_TAG:
        # Maybe the string was just a string.
        try:
            return kernel.decompress_draco(data)
        except Exception as e:
            console_logger.debug(f"String item is not a Draco mesh: {e}")
            return None

    if isinstance(data, dict):
        try:
            return kernel.decode_common_object(data)
        except Exception as e:
            console_logger.debug(f"Failed to decode {item.type} object: {e}")
            return None

    return None
