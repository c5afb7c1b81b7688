"""Load and validate docshelf viewer configuration YAML.

The configuration file (``docshelf.yaml`` by default) names the documents
directory, the static site output directory, the Pygments style, the heading
of the notes section, and the page labels. Every key is optional.

Examples
--------
>>> from pathlib import Path
>>> from docshelf.config import load_viewer_config
>>> config = load_viewer_config(Path("docshelf.yaml"))  # doctest: +SKIP
>>> config.theme.site_name  # doctest: +SKIP
'Docs Viewer'
"""

from .loader import DEFAULT_CONFIG_PATH, load_config_or_default, load_viewer_config
from .models import ThemeConfig, ViewerConfig, ViewerConfigError

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "ThemeConfig",
    "ViewerConfig",
    "ViewerConfigError",
    "load_config_or_default",
    "load_viewer_config",
]
