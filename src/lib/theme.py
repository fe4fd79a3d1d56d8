"""
Theme loader for the html backend.

Themes provide styling and print metadata for published documents.
Each theme is a directory containing:
  - theme.yaml: Configuration (pygments style, page size, margins, fonts)
  - theme.css: Optional extra CSS, inlined into the output

The 'default' theme is built in and needs no directory.
"""

import copy
import yaml
from pathlib import Path
from typing import Dict, Any, Optional


class ThemeError(Exception):
    """Raised when theme loading or validation fails"""
    pass


DEFAULT_CONFIG: Dict[str, Any] = {
    'code': {
        'pygments_style': 'default',
    },
    'page': {
        'size': 'A4',
        'margin': '15mm',
        'columns': 1,
    },
    'fonts': {
        'body': 'Helvetica, Arial, sans-serif',
        'mono': 'Menlo, Consolas, monospace',
    },
}

DEFAULT_CSS = """body { font-family: var(--font-body); line-height: 1.4; margin: 0 auto; max-width: 60em; }
pre, code { font-family: var(--font-mono); }
pre { padding: 0.5em; overflow-x: auto; }
h1, h2, h3, h4, h5, h6 { break-after: avoid; }
.page-break { break-after: page; }
.admonition { border-left: 4px solid #888; padding: 0.25em 0.75em; margin: 0.5em 0; }
.admonition .label { font-weight: bold; text-transform: uppercase; margin-right: 0.5em; }
.listing { break-inside: avoid; }
"""


def config_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into a copy of base"""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = config_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class Theme:
    """
    Represents a docsplice theme.

    A theme consists of:
      - Configuration merged over the built-in defaults from theme.yaml
      - Optional custom CSS from theme.css
    """

    def __init__(self, theme_name: str = "default", themes_dir: Optional[str] = None):
        """
        Load a theme by name.

        Args:
            theme_name: Name of the theme directory (e.g., "default", "print")
            themes_dir: Path to themes directory; None uses only the built-in default

        Raises:
            ThemeError: If a non-default theme directory or its theme.yaml doesn't exist
        """
        self.name = theme_name
        self.themes_dir = Path(themes_dir) if themes_dir else None
        self.theme_dir = self.themes_dir / theme_name if self.themes_dir else None

        if self.theme_dir is None or not self.theme_dir.exists():
            if theme_name != "default":
                raise ThemeError(
                    f"Theme '{theme_name}' not found. "
                    f"Expected directory: {self.theme_dir}"
                )
            self.config = copy.deepcopy(DEFAULT_CONFIG)
            self.css_path = None
            return

        self.config_path = self.theme_dir / "theme.yaml"
        if not self.config_path.exists():
            raise ThemeError(
                f"Theme '{theme_name}' missing theme.yaml"
            )

        self.config = config_merge(DEFAULT_CONFIG, self._config_load())
        self.css_path = self.theme_dir / "theme.css"

    def _config_load(self) -> Dict[str, Any]:
        """Load and parse theme.yaml"""
        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                config: Any = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ThemeError(f"Failed to parse theme.yaml: {e}")
        except UnicodeDecodeError as e:
            raise ThemeError(f"theme.yaml is not valid UTF-8: {e.reason} at byte {e.start}")
        except OSError as e:
            raise ThemeError(f"Failed to load theme.yaml: {e}")
        if config is None:
            return {}
        if not isinstance(config, dict):
            raise ThemeError(f"Theme '{self.name}': theme.yaml must contain a mapping")
        return config

    def css_has(self) -> bool:
        """Check if theme has custom CSS file"""
        return self.css_path is not None and self.css_path.exists()

    def config_get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Supports nested keys with dot notation:
          theme.config_get('page.size', 'A4')

        Args:
            key: Configuration key (supports dot notation)
            default: Default value if key doesn't exist

        Returns:
            Configuration value or default
        """
        keys: list[str] = key.split('.')
        value: Any = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def pygmentsStyle_get(self) -> str:
        """
        Get Pygments style name for syntax highlighting.

        Returns:
            Pygments style name (default: 'default')
        """
        return self.config_get('code.pygments_style', 'default')

    def css_get(self) -> str:
        """Built-in CSS, print rules and theme.css, in that order"""
        parts = [
            ":root {"
            f" --font-body: {self.config_get('fonts.body')};"
            f" --font-mono: {self.config_get('fonts.mono')}; }}\n",
            DEFAULT_CSS,
            self.pageRule_get(),
        ]
        if self.css_has():
            parts.append(self.css_path.read_text(encoding='utf-8'))
        return ''.join(parts)

    def pageRule_get(self) -> str:
        """
        @page rule used when printing the document to PDF.

        Example:
            >>> Theme().pageRule_get()
            '@page { size: A4; margin: 15mm; }\\n'
        """
        size = self.config_get('page.size', 'A4')
        margin = self.config_get('page.margin', '15mm')
        rule = f"@page {{ size: {size}; margin: {margin}; }}\n"
        columns = self.config_get('page.columns', 1)
        if isinstance(columns, int) and columns > 1:
            rule += f"@media print {{ main {{ column-count: {columns}; }} }}\n"
        return rule

    def __repr__(self) -> str:
        return f"Theme(name='{self.name}', path='{self.theme_dir}')"


def themes_listAvailable(themes_dir: Optional[str] = None) -> list[str]:
    """
    List all available theme names.

    Args:
        themes_dir: Path to themes directory

    Returns:
        'default' plus directory names with a theme.yaml
    """
    themes: list[str] = ["default"]
    if not themes_dir:
        return themes

    themes_path: Path = Path(themes_dir)
    if not themes_path.exists():
        return themes

    for item in themes_path.iterdir():
        if item.is_dir() and (item / "theme.yaml").exists() and item.name not in themes:
            themes.append(item.name)

    return sorted(themes)
