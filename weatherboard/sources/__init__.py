"""Collaborator interfaces and the default teaser image fetcher."""

from .image_fetcher import HttpImageFetcher, decode_image
from .protocols import ArticleSource, ImageFetcher, WeatherSource

__all__ = [
    "ArticleSource",
    "HttpImageFetcher",
    "ImageFetcher",
    "WeatherSource",
    "decode_image",
]
