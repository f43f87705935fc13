"""Approximate output resolutions for display.

The API does not report output dimensions, so these tables give the pixel
size a model is expected to produce for a given aspect ratio. They are used
for logging and user-facing summaries only; lookups never fail.
"""

from __future__ import annotations

FLASH_FALLBACK_RESOLUTION = "1024×1024"
UNKNOWN_RESOLUTION = "Unknown"

# Flash-tier models render at a fixed ~1024px budget
FLASH_RESOLUTIONS: dict[str, str] = {
    "1:1": "1024×1024",
    "2:3": "832×1248",
    "3:2": "1248×832",
    "3:4": "864×1184",
    "4:3": "1184×864",
    "4:5": "896×1152",
    "5:4": "1152×896",
    "9:16": "768×1344",
    "16:9": "1344×768",
    "21:9": "1536×672",
}

PRO_RESOLUTIONS: dict[str, dict[str, str]] = {
    "1K": {
        "1:1": "1024×1024",
        "2:3": "848×1264",
        "3:2": "1264×848",
        "3:4": "896×1200",
        "4:3": "1200×896",
        "4:5": "928×1152",
        "5:4": "1152×928",
        "9:16": "768×1376",
        "16:9": "1376×768",
        "21:9": "1584×672",
    },
    "2K": {
        "1:1": "2048×2048",
        "2:3": "1696×2528",
        "3:2": "2528×1696",
        "3:4": "1792×2400",
        "4:3": "2400×1792",
        "4:5": "1856×2304",
        "5:4": "2304×1856",
        "9:16": "1536×2752",
        "16:9": "2752×1536",
        "21:9": "3168×1344",
    },
    "4K": {
        "1:1": "4096×4096",
        "2:3": "3392×5056",
        "3:2": "5056×3392",
        "3:4": "3584×4800",
        "4:3": "4800×3584",
        "4:5": "3712×4608",
        "5:4": "4608×3712",
        "9:16": "3072×5504",
        "16:9": "5504×3072",
        "21:9": "6336×2688",
    },
}


def get_resolution_for_flash(aspect_ratio: str) -> str:
    """Return the flash-tier resolution for an aspect ratio.

    Matching is exact and case-sensitive; unknown tokens get the 1:1 size.

    Args:
        aspect_ratio: Aspect ratio token such as "16:9".

    Returns:
        Resolution string such as "1344×768".
    """
    return FLASH_RESOLUTIONS.get(aspect_ratio, FLASH_FALLBACK_RESOLUTION)


def get_resolution_for_pro(aspect_ratio: str, image_size: str) -> str:
    """Return the pro-tier resolution for an aspect ratio and size tier.

    Args:
        aspect_ratio: Aspect ratio token such as "16:9".
        image_size: Size tier, case-insensitive ("2k" and "2K" are equal).

    Returns:
        Resolution string, or "Unknown" for unsupported combinations.
    """
    return PRO_RESOLUTIONS.get(image_size.upper(), {}).get(aspect_ratio, UNKNOWN_RESOLUTION)
