from .base import ContentFeature
from .title import TitleFeature
from .content import ImproveContentFeature
from .seo import SEOFeature
from .excerpt import ExcerptFeature

__all__ = [
    "ContentFeature",
    "TitleFeature",
    "ImproveContentFeature",
    "SEOFeature",
    "ExcerptFeature",
]
