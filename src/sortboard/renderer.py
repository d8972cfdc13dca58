"""Board renderer using Pillow — produces PNG snapshots of a board."""

from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Optional

from PIL import Image, ImageDraw, ImageFont

from .layout import CARD_PADDING, DEFAULT_BOARD_WIDTH, BoardLayout, Box, layout_board
from .models import Board, Hierarchy
from .themes import get_theme, ThemePalette


# --- Font handling ---

def _load_font(size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """Load a font, falling back to default if none available."""
    font_paths = [
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
        "/usr/share/fonts/truetype/freefont/FreeSans.ttf",
        "/usr/share/fonts/TTF/DejaVuSans.ttf",
    ]
    for fp in font_paths:
        if Path(fp).exists():
            return ImageFont.truetype(fp, size)
    return ImageFont.load_default()


def _load_bold_font(size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """Load a bold font, falling back to regular."""
    font_paths = [
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
        "/usr/share/fonts/truetype/freefont/FreeSansBold.ttf",
        "/usr/share/fonts/TTF/DejaVuSans-Bold.ttf",
    ]
    for fp in font_paths:
        if Path(fp).exists():
            return ImageFont.truetype(fp, size)
    return _load_font(size)


# --- Color helpers ---

def _hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    """Convert hex color to RGB tuple. Supports both 3-char and 6-char hex."""
    hex_color = hex_color.lstrip("#")
    if len(hex_color) == 3:
        hex_color = hex_color[0]*2 + hex_color[1]*2 + hex_color[2]*2
    return tuple(int(hex_color[i:i+2], 16) for i in (0, 2, 4))


def _hex_to_rgba(hex_color: str, alpha: int = 255) -> tuple[int, int, int, int]:
    """Convert hex color to RGBA tuple."""
    r, g, b = _hex_to_rgb(hex_color)
    return (r, g, b, alpha)


def _text_width(font: ImageFont.FreeTypeFont | ImageFont.ImageFont, text: str) -> int:
    bbox = font.getbbox(text)
    return bbox[2] - bbox[0]


def _fit_text(text: str, font: ImageFont.FreeTypeFont | ImageFont.ImageFont, max_width: float) -> str:
    """Truncate ``text`` with an ellipsis so it fits within max_width pixels."""
    if _text_width(font, text) <= max_width:
        return text
    while text and _text_width(font, text + "...") > max_width:
        text = text[:-1]
    return text + "..."


# --- Main renderer ---

class BoardRenderer:
    """Renders a board hierarchy to a PNG image.

    The drag state of a live board can be shown as well: pass
    ``dragging_id`` to highlight the card being dragged and ``over_list``
    (an item id, or ``""`` for the top-level list) to highlight the list
    under the pointer.
    """

    HANDLE_LABEL = "Drag"
    CARD_RADIUS = 6
    TEXT_INSET = 10

    def __init__(self, scale: float = 1.0, width: float = DEFAULT_BOARD_WIDTH):
        self.scale = scale
        self.width = width
        self.font_body = _load_font(int(15 * scale))
        self.font_label = _load_bold_font(int(16 * scale))
        self.font_title = _load_bold_font(int(22 * scale))
        self.font_small = _load_font(int(12 * scale))
        self.theme: ThemePalette = get_theme("dark")

    def render_board(self, board: Board, output_path: Optional[str] = None, **kwargs) -> bytes:
        """Render a Board document using its own title and theme."""
        return self.render(
            board.hierarchy,
            title=board.title,
            theme=board.theme,
            output_path=output_path,
            **kwargs,
        )

    def render(
        self,
        hierarchy: Hierarchy,
        title: str = "Untitled Board",
        theme: str = "dark",
        output_path: Optional[str] = None,
        dragging_id: Optional[str] = None,
        over_list: Optional[str] = None,
    ) -> bytes:
        """Render the hierarchy to PNG bytes. Optionally save to file.

        Args:
            hierarchy: The board state to draw.
            title: Title drawn across the top.
            theme: "dark" or "light".
            output_path: Optional path to save the PNG.
            dragging_id: Id of an item or sub-item to draw as being dragged.
            over_list: Item id whose sub-item list is dragged over, or ""
                       for the top-level list.
        """
        self.theme = get_theme(theme)
        layout = layout_board(hierarchy, width=self.width)

        img_width = int(layout.width * self.scale)
        img_height = int(layout.height * self.scale)
        img = Image.new("RGBA", (img_width, img_height), _hex_to_rgba(self.theme.background))
        draw = ImageDraw.Draw(img)

        self._draw_title(draw, title, img_width)
        self._draw_list(draw, layout.list_box, over=over_list == "")

        for item, item_layout in zip(hierarchy.items, layout.items):
            self._draw_card(
                draw,
                item_layout.card,
                self.theme.card_fill_dragging if item.id == dragging_id else self.theme.card_fill,
            )
            self._draw_label(draw, item_layout.card, item_layout.handle, item.content)
            self._draw_handle(draw, item_layout.handle)
            self._draw_list(draw, item_layout.sub_list, over=over_list == item.id)

            for sub, box in zip(item.sub_items, item_layout.sub_cards):
                fill = self.theme.card_fill_dragging if sub.id == dragging_id else self.theme.sub_card_fill
                self._draw_card(draw, box, fill)
                self._draw_text(draw, box, sub.content)

        buf = BytesIO()
        img.save(buf, format="PNG", optimize=True)
        png_bytes = buf.getvalue()

        if output_path:
            Path(output_path).write_bytes(png_bytes)

        return png_bytes

    def layout(self, hierarchy: Hierarchy) -> BoardLayout:
        """The layout this renderer would draw ``hierarchy`` with."""
        return layout_board(hierarchy, width=self.width)

    def _scaled(self, box: Box) -> tuple[float, float, float, float]:
        x1, y1, x2, y2 = box.as_tuple()
        s = self.scale
        return (x1 * s, y1 * s, x2 * s, y2 * s)

    def _draw_title(self, draw: ImageDraw.ImageDraw, title: str, img_width: int):
        """Draw the board title centered at the top."""
        tw = _text_width(self.font_title, title)
        x = (img_width - tw) / 2
        draw.text((x, 20 * self.scale), title, fill=self.theme.title_color, font=self.font_title)

    def _draw_list(self, draw: ImageDraw.ImageDraw, box: Box, over: bool):
        fill = self.theme.list_fill_over if over else self.theme.list_fill
        draw.rectangle(self._scaled(box), fill=fill)

    def _draw_card(self, draw: ImageDraw.ImageDraw, box: Box, fill: str):
        draw.rounded_rectangle(self._scaled(box), radius=int(self.CARD_RADIUS * self.scale), fill=fill)

    def _draw_label(self, draw: ImageDraw.ImageDraw, card: Box, handle: Box, text: str):
        """Item content, left of the drag handle in the header row."""
        x1, _, _, _ = self._scaled(card)
        hx1, hy1, _, hy2 = self._scaled(handle)
        left = x1 + CARD_PADDING * self.scale
        max_width = hx1 - left - self.TEXT_INSET * self.scale
        label = _fit_text(text, self.font_label, max_width)
        bbox = self.font_label.getbbox(label or " ")
        th = bbox[3] - bbox[1]
        draw.text((left, (hy1 + hy2 - th) / 2 - bbox[1]), label, fill=self.theme.card_text, font=self.font_label)

    def _draw_handle(self, draw: ImageDraw.ImageDraw, handle: Box):
        x1, y1, x2, y2 = self._scaled(handle)
        draw.rectangle((x1, y1, x2, y2), outline=self.theme.handle_border, width=max(1, int(self.scale)))
        tw = _text_width(self.font_small, self.HANDLE_LABEL)
        bbox = self.font_small.getbbox(self.HANDLE_LABEL)
        th = bbox[3] - bbox[1]
        draw.text(
            ((x1 + x2 - tw) / 2, (y1 + y2 - th) / 2 - bbox[1]),
            self.HANDLE_LABEL,
            fill=self.theme.handle_text,
            font=self.font_small,
        )

    def _draw_text(self, draw: ImageDraw.ImageDraw, box: Box, text: str):
        x1, y1, x2, y2 = self._scaled(box)
        inset = self.TEXT_INSET * self.scale
        line = _fit_text(text, self.font_body, x2 - x1 - 2 * inset)
        bbox = self.font_body.getbbox(line or " ")
        th = bbox[3] - bbox[1]
        draw.text((x1 + inset, (y1 + y2 - th) / 2 - bbox[1]), line, fill=self.theme.card_text, font=self.font_body)
