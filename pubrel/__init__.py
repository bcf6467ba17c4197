"""Create GitHub releases and upload assets to them."""

__version__ = "0.3.0"

PROJECT_URL = "https://github.com/remixz/publish-release"
