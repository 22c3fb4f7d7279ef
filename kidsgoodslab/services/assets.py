"""Install the packaged client script into the site."""

import shutil
from pathlib import Path

from ..models import SiteLayout

STATIC_DIR = Path(__file__).parent.parent / "static"


def install_assets(layout: SiteLayout) -> Path:
    """Copy static/js/main.js to the site's js/main.js."""
    target = layout.main_js
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(STATIC_DIR / "js" / "main.js", target)
    print(f"Installed {target}", flush=True)
    return target
