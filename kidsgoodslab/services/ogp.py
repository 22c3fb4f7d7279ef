"""OGP image service - 1200x630 social preview cards drawn with Pillow."""

import html
import logging
import re
from io import BytesIO
from pathlib import Path

from PIL import Image, ImageDraw, ImageFilter, ImageFont, ImageOps

from ..config import SITE_NAME, SITE_URL
from ..models import SiteLayout
from ..models.category import DARK, GRAY, WHITE, category_color, category_key, CATEGORY_NAMES
from .extract import extract_category, extract_product_name, extract_title

logger = logging.getLogger(__name__)

WIDTH = 1200
HEIGHT = 630
TITLE_MAX_WIDTH = 650
TITLE_MAX_LINES = 3
PRODUCT_IMAGE_SIZE = 320

# Fonts with Japanese glyphs, tried in order when no font path is configured
FONT_CANDIDATES = (
    "/usr/share/fonts/opentype/noto/NotoSansCJK-Bold.ttc",
    "/usr/share/fonts/noto-cjk/NotoSansCJK-Bold.ttc",
    "/usr/share/fonts/truetype/noto/NotoSansJP-Bold.ttf",
    "/System/Library/Fonts/ヒラギノ角ゴシック W6.ttc",
    "/Library/Fonts/Arial Unicode.ttf",
)

AMAZON_IMAGE_LINK_RE = re.compile(
    r'<a href="(https://www\.amazon\.co\.jp[^"]*)"[^>]*>\s*'
    r'<img src="https://m\.media-amazon\.com/images/P/[^"]*"[^>]*>\s*</a>'
)
OG_IMAGE_RE = re.compile(r'<meta property="og:image" content="[^"]*">')
OG_URL_RE = re.compile(r'(<meta property="og:url" content="[^"]*">)')


class OgpError(Exception):
    """Failed to render an OGP image."""
    pass


def _hex_to_rgb(color: str) -> tuple[int, int, int]:
    color = color.lstrip("#")
    return tuple(int(color[i:i + 2], 16) for i in (0, 2, 4))


def wrap_text(draw: ImageDraw.ImageDraw, text: str, font, max_width: int) -> list[str]:
    """Wrap character by character so each line fits max_width."""
    lines = []
    current = ""
    for char in text:
        candidate = current + char
        if draw.textlength(candidate, font=font) > max_width and current:
            lines.append(current)
            current = char
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines


class OgpRenderer:
    """Render OGP preview images for articles."""

    def __init__(self, output_dir: Path, font_path: str | None = None):
        self.output_dir = Path(output_dir)
        self.font_path = font_path or next((p for p in FONT_CANDIDATES if Path(p).exists()), None)
        if self.font_path is None:
            logger.warning("No Japanese font found; OGP text will use Pillow's default font")

    def _font(self, size: int):
        if self.font_path:
            return ImageFont.truetype(self.font_path, size)
        return ImageFont.load_default(size=size)

    def _background(self, bg: str) -> Image.Image:
        """Diagonal gradient from the category background to white."""
        start = Image.new("RGBA", (WIDTH, HEIGHT), _hex_to_rgb(bg) + (255,))
        end = Image.new("RGBA", (WIDTH, HEIGHT), _hex_to_rgb(WHITE) + (255,))
        norm = WIDTH * WIDTH + HEIGHT * HEIGHT
        across = Image.linear_gradient("L").transpose(Image.Transpose.TRANSPOSE).resize((WIDTH, HEIGHT))
        down = Image.linear_gradient("L").resize((WIDTH, HEIGHT))
        mask = Image.blend(across, down, HEIGHT * HEIGHT / norm)
        return Image.composite(end, start, mask)

    def _decorations(self, canvas: Image.Image, accent: str) -> Image.Image:
        """Translucent accent circles in the top-right and bottom-left corners."""
        overlay = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(overlay)
        rgb = _hex_to_rgb(accent)
        cx, cy, r = WIDTH + 50, -50, 250
        draw.ellipse((cx - r, cy - r, cx + r, cy + r), fill=rgb + (0x20,))
        cx, cy, r = -80, HEIGHT + 80, 300
        draw.ellipse((cx - r, cy - r, cx + r, cy + r), fill=rgb + (0x15,))
        return Image.alpha_composite(canvas, overlay)

    def _product_image(self, canvas: Image.Image, image_bytes: bytes) -> Image.Image:
        """Paste the product photo as a circle with a soft shadow."""
        size = PRODUCT_IMAGE_SIZE
        x = WIDTH - size - 80
        y = (HEIGHT - size) // 2
        cx, cy = x + size // 2, y + size // 2

        shadow = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        r = size // 2 + 20
        ImageDraw.Draw(shadow).ellipse((cx - r, cy - r + 6, cx + r, cy + r + 6), fill=(0, 0, 0, 26))
        canvas = Image.alpha_composite(canvas, shadow.filter(ImageFilter.GaussianBlur(10)))
        ImageDraw.Draw(canvas).ellipse((cx - r, cy - r, cx + r, cy + r), fill=_hex_to_rgb(WHITE) + (255,))

        photo = ImageOps.fit(Image.open(BytesIO(image_bytes)).convert("RGBA"), (size, size))
        mask = Image.new("L", (size, size), 0)
        ImageDraw.Draw(mask).ellipse((0, 0, size, size), fill=255)
        canvas.paste(photo, (x, y), mask)
        return canvas

    def _placeholder(self, canvas: Image.Image, accent: str) -> Image.Image:
        """Accent circle with a simple box icon."""
        size = 280
        x = WIDTH - size - 100
        y = (HEIGHT - size) // 2
        rgb = _hex_to_rgb(accent)

        overlay = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(overlay)
        draw.ellipse((x, y, x + size, y + size), fill=rgb + (0x30,))

        cx, cy = x + size // 2, y + size // 2
        draw.rectangle((cx - 60, cy - 35, cx + 60, cy + 55), outline=rgb + (255,), width=8)
        draw.line((cx - 60, cy - 35, cx - 30, cy - 65, cx + 90, cy - 65, cx + 60, cy - 35), fill=rgb + (255,), width=8)
        draw.line((cx + 60, cy + 55, cx + 90, cy + 25, cx + 90, cy - 65), fill=rgb + (255,), width=8)
        return Image.alpha_composite(canvas, overlay)

    def render(
        self,
        product_name: str,
        title: str,
        category: str,
        product_image: bytes | None = None,
    ) -> Image.Image:
        colors = category_color(category)
        canvas = self._decorations(self._background(colors.bg), colors.accent)
        draw = ImageDraw.Draw(canvas)

        # Category tag
        label = CATEGORY_NAMES.get(category, CATEGORY_NAMES["baby"])
        tag_font = self._font(24)
        tag_width = int(draw.textlength(label, font=tag_font)) + 32
        draw.rounded_rectangle((60, 60, 60 + tag_width, 104), radius=22, fill=colors.accent)
        draw.text((76, 92), label, font=tag_font, fill=WHITE, anchor="ls")

        # Product name
        draw.text((60, 160), product_name, font=self._font(28), fill=GRAY, anchor="ls")

        # Title, wrapped
        title_font = self._font(52)
        y = 230
        for line in wrap_text(draw, title, title_font, TITLE_MAX_WIDTH)[:TITLE_MAX_LINES]:
            draw.text((60, y), line, font=title_font, fill=DARK, anchor="ls")
            y += 70

        # Site name
        draw.text((60, HEIGHT - 50), SITE_NAME, font=self._font(22), fill=colors.accent, anchor="ls")

        if product_image:
            try:
                canvas = self._product_image(canvas, product_image)
            except OSError as e:
                logger.warning(f"Product image unusable, drawing placeholder: {e}")
                canvas = self._placeholder(canvas, colors.accent)
        else:
            canvas = self._placeholder(canvas, colors.accent)

        return canvas.convert("RGB")

    def generate(
        self,
        product_name: str,
        title: str,
        category: str,
        slug: str,
        product_image: bytes | None = None,
    ) -> Path:
        """Render and save images/ogp/<slug>.png."""
        print(f"  Rendering OGP: {slug}", flush=True)
        try:
            image = self.render(product_name, title, category, product_image)
            self.output_dir.mkdir(parents=True, exist_ok=True)
            output_path = self.output_dir / f"{slug}.png"
            image.save(output_path, format="PNG")
        except (OSError, ValueError) as e:
            raise OgpError(f"OGP render failed for {slug}: {e}") from e
        return output_path


def attach_ogp(page: str, slug: str, product_name: str) -> tuple[str, bool]:
    """Point the product card image and og:image at the OGP file. Returns (page, modified)."""
    modified = False
    alt = html.escape(product_name, quote=True)

    def _swap(match: re.Match) -> str:
        return (
            f'<a href="{match.group(1)}" target="_blank" rel="noopener sponsored">'
            f'<img src="../images/ogp/{slug}.png" alt="{alt}" '
            f'style="max-width: 100%; height: auto; display: block; margin: 0 auto;"></a>'
        )

    page, count = AMAZON_IMAGE_LINK_RE.subn(_swap, page)
    if count:
        modified = True

    og_image = f'<meta property="og:image" content="{SITE_URL}/images/ogp/{slug}.png">'
    if OG_IMAGE_RE.search(page):
        page = OG_IMAGE_RE.sub(og_image, page, count=1)
        modified = True
    elif OG_URL_RE.search(page):
        page = OG_URL_RE.sub(lambda m: f"{m.group(1)}\n  {og_image}", page, count=1)
        modified = True
    elif "</head>" in page:
        page = page.replace("</head>", f"  {og_image}\n</head>", 1)
        modified = True

    return page, modified


def generate_all(layout: SiteLayout, renderer: OgpRenderer) -> dict[str, int]:
    """Create missing OGP images and wire them into each article page."""
    counts = {"generated": 0, "updated": 0, "skipped": 0, "errors": 0}
    files = layout.article_files()
    print(f"Processing {len(files)} articles", flush=True)

    for path in files:
        slug = path.stem
        page = path.read_text(encoding="utf-8")
        title = extract_title(page)
        if not title:
            logger.warning(f"Skipping {path.name}: no article title")
            counts["skipped"] += 1
            continue

        category = category_key(extract_category(page))
        product_name = extract_product_name(page, slug)

        if not layout.ogp_path(slug).exists():
            try:
                renderer.generate(product_name, title, category, slug)
                counts["generated"] += 1
            except OgpError as e:
                logger.warning(str(e))
                counts["errors"] += 1
                continue

        page, modified = attach_ogp(page, slug, product_name)
        if modified:
            path.write_text(page, encoding="utf-8")
            counts["updated"] += 1

    print(
        f"OGP generated: {counts['generated']}, HTML updated: {counts['updated']}, "
        f"skipped: {counts['skipped']}, errors: {counts['errors']}",
        flush=True,
    )
    return counts
