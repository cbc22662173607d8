"""AI auto-tagging for Markdown notes."""

from .frontmatter import FrontmatterService
from .pipeline import AutoTagPipeline
from .service import AIService
from .settings import AppSettings

__all__ = ["AIService", "AppSettings", "AutoTagPipeline", "FrontmatterService"]
