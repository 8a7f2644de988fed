from .blog import Category, Tag, PostTag, Post, normalize_post_row

__all__ = [
    "Category", "Tag", "PostTag", "Post",
    "normalize_post_row",
]
