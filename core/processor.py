from PIL import Image, ImageOps
import os

from core.log import get_logger
from core.trim_rect import TrimRect

logger = get_logger(__name__)


def trim_image(source_path: str, trim_rect: TrimRect, output_path: str) -> bool:
    """
    Crop source_path to trim_rect and save it to output_path with metadata.
    trim_rect: (x, y, w, h) in pixels of the EXIF-upright image, the same
    space the canvas reports.
    """
    trim_rect = TrimRect(*trim_rect)
    if trim_rect.is_empty:
        logger.warning(f"Nothing to trim for {source_path}: {trim_rect}")
        return False

    try:
        image = Image.open(source_path)

        exif_obj = image.getexif()
        icc_profile = image.info.get('icc_profile')

        # The canvas decodes with auto-transform on, so rotate pixels upright too
        image = ImageOps.exif_transpose(image)

        # Orientation is tag 274 (0x0112); already applied above
        if exif_obj and 0x0112 in exif_obj:
            del exif_obj[0x0112]

        orig_w, orig_h = image.size
        rect = trim_rect.clamped(orig_w, orig_h)
        if rect.is_empty:
            logger.warning(f"Trim rect {trim_rect} lies outside {source_path} ({orig_w}x{orig_h})")
            return False

        cropped_img = image.crop((rect.x, rect.y, rect.x + rect.width, rect.y + rect.height))

        out_dir = os.path.dirname(output_path)
        if out_dir:
            os.makedirs(out_dir, exist_ok=True)

        save_kwargs = {}
        if os.path.splitext(output_path)[1].lower() in ('.jpg', '.jpeg'):
            save_kwargs['quality'] = 100
            if cropped_img.mode not in ('RGB', 'L'):
                cropped_img = cropped_img.convert('RGB')
        if icc_profile:
            save_kwargs['icc_profile'] = icc_profile
        if exif_obj:
            save_kwargs['exif'] = exif_obj.tobytes()

        cropped_img.save(output_path, **save_kwargs)
        logger.info(f"Trimmed {source_path} to {rect} -> {output_path}")
        return True

    except Exception:
        logger.exception(f"Error trimming {source_path}")
        return False
