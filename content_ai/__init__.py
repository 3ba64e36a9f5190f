"""AI content assistant: title, rewrite, SEO and excerpt generation over a multi-model gateway."""

__version__ = "1.0.0"
