from app.data.sample_books import SAMPLE_BOOKS

__all__ = ["SAMPLE_BOOKS"]
