"""
FeedProxy Processing Module
===========================

Transformation, enhancement and orchestration of parsed feeds.
"""

from .transform import FeedTransformer, FilterOptions, SortOptions
from .enhancer import ContentEnhancer
from .pipeline import FeedPipeline, RenderedFeed

__all__ = [
    'FeedTransformer',
    'FilterOptions',
    'SortOptions',
    'ContentEnhancer',
    'FeedPipeline',
    'RenderedFeed',
]
