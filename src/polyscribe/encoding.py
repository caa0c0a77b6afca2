"""Multipart form payloads for upload-style backends."""

from __future__ import annotations

from collections.abc import Mapping

import aiohttp


def encode_multipart(
    fields: Mapping[str, bytes],
    filename: str = "audio",
) -> tuple[aiohttp.MultipartWriter, str]:
    """Wrap named binary blobs into a ``multipart/form-data`` body.

    Returns the body (an aiohttp payload that can be passed as ``data=``)
    and its boundary token.
    """
    writer = aiohttp.MultipartWriter("form-data")
    for name, blob in fields.items():
        part = writer.append(blob, {"Content-Type": "application/octet-stream"})
        part.set_content_disposition("form-data", name=name, filename=filename)
    return writer, writer.boundary
