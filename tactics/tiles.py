"""
tactics/tiles.py: tileset image handling

Thin wrapper around Pillow: measure an uploaded sheet, cut it into tiles,
and turn PNG bytes into data URLs that the tile grid and client can use
directly as image sources.
"""

import base64
import io

from PIL import Image, UnidentifiedImageError

from tactics.errors import InvalidInput


def open_image(data, load=True):
    """Open raw image bytes with Pillow.

    With load=False only the header is parsed, which is enough for .size.
    Anything Pillow cannot decode (unknown format, truncated body, pixel
    bomb) is an InvalidInput on the image field.
    """
    try:
        image = Image.open(io.BytesIO(data))
        if load:
            image.load()
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError):
        raise InvalidInput('Tileset image could not be read', details=[
            {'field': 'image', 'message': 'not a supported image file', 'type': 'image_format'},
        ])
    return image


def image_size(data):
    """Pixel (width, height) of raw image bytes, read from the header only."""
    return open_image(data, load=False).size


def to_png(image):
    buffer = io.BytesIO()
    image.save(buffer, format='PNG')
    return buffer.getvalue()


def to_data_url(png_bytes):
    return 'data:image/png;base64,' + base64.b64encode(png_bytes).decode('ascii')


def slice_sheet(data, columns, rows, tile_size_x, tile_size_y):
    """Cut a sheet into columns * rows tiles in row-major order.

    Returns (sheet_png, tiles) where tiles is a list of (index, png_bytes)
    and index = row * columns + col.
    """
    sheet = open_image(data)
    tiles = []
    for row in range(rows):
        for col in range(columns):
            box = (col * tile_size_x, row * tile_size_y,
                   (col + 1) * tile_size_x, (row + 1) * tile_size_y)
            tiles.append((row * columns + col, to_png(sheet.crop(box))))
    return to_png(sheet), tiles
