from __future__ import annotations

from PIL import Image, ImageDraw

from .models import Stats

COMPLETED_COLOR = (99, 102, 241)
MISSED_COLOR = (226, 232, 240)
BACKGROUND_COLOR = (255, 255, 255, 0)


def render_completion_ring(stats: Stats, size: int = 160, thickness: int = 22) -> Image.Image:
    """Donut chart of completed versus missed prompts.

    With no answered prompts the whole ring is drawn in the missed colour.
    """
    size = max(16, int(size))
    thickness = max(1, min(int(thickness), size // 2))
    image = Image.new("RGBA", (size, size), BACKGROUND_COLOR)
    draw = ImageDraw.Draw(image)
    box = [1, 1, size - 2, size - 2]

    draw.ellipse(box, fill=MISSED_COLOR)
    if stats.total > 0 and stats.completed > 0:
        if stats.completed >= stats.total:
            draw.ellipse(box, fill=COMPLETED_COLOR)
        else:
            sweep = 360.0 * stats.completed / stats.total
            # start at twelve o'clock, clockwise
            draw.pieslice(box, start=-90, end=-90 + sweep, fill=COMPLETED_COLOR)

    inner = [1 + thickness, 1 + thickness, size - 2 - thickness, size - 2 - thickness]
    if inner[2] > inner[0]:
        draw.ellipse(inner, fill=BACKGROUND_COLOR)
    return image


def render_app_icon(size: int = 64) -> Image.Image:
    image = Image.new("RGBA", (size, size), BACKGROUND_COLOR)
    draw = ImageDraw.Draw(image)
    draw.ellipse([4, 4, size - 4, size - 4], fill=COMPLETED_COLOR)
    draw.ellipse([size // 3, size // 3, size - size // 3, size - size // 3], fill=(255, 255, 255, 255))
    return image
