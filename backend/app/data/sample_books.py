"""
Starter catalog loaded into an empty database.

Ratings are not included; they are derived from reviews.
"""

SAMPLE_BOOKS = [
    {
        "title": "The Great Gatsby",
        "author": "F. Scott Fitzgerald",
        "isbn": "9780743273565",
        "description": "A classic American novel set in the Jazz Age.",
        "published_date": "1925-04-10",
        "page_count": 180,
        "genres": ["Fiction", "Classic", "Literature"],
        "cover_image": "https://covers.openlibrary.org/b/isbn/9780743273565-M.jpg",
        "publisher": "Scribner",
    },
    {
        "title": "To Kill a Mockingbird",
        "author": "Harper Lee",
        "isbn": "9780061120084",
        "description": "A gripping tale of racial injustice and childhood innocence.",
        "published_date": "1960-07-11",
        "page_count": 336,
        "genres": ["Fiction", "Classic", "Drama"],
        "cover_image": "https://covers.openlibrary.org/b/isbn/9780061120084-M.jpg",
        "publisher": "J. B. Lippincott & Co.",
    },
    {
        "title": "1984",
        "author": "George Orwell",
        "isbn": "9780451524935",
        "description": "A dystopian social science fiction novel.",
        "published_date": "1949-06-08",
        "page_count": 328,
        "genres": ["Fiction", "Dystopian", "Science Fiction"],
        "cover_image": "https://covers.openlibrary.org/b/isbn/9780451524935-M.jpg",
        "publisher": "Secker & Warburg",
    },
    {
        "title": "Pride and Prejudice",
        "author": "Jane Austen",
        "isbn": "9780141439518",
        "description": "A witty courtship novel about the Bennet sisters.",
        "published_date": "1813-01-28",
        "page_count": 480,
        "genres": ["Fiction", "Classic", "Romance"],
        "cover_image": "https://covers.openlibrary.org/b/isbn/9780141439518-M.jpg",
        "publisher": "T. Egerton",
    },
    {
        "title": "The Hobbit",
        "author": "J. R. R. Tolkien",
        "isbn": "9780547928227",
        "description": "Bilbo Baggins is swept into a quest to reclaim a dragon's hoard.",
        "published_date": "1937-09-21",
        "page_count": 300,
        "genres": ["Fiction", "Fantasy", "Adventure"],
        "cover_image": "https://covers.openlibrary.org/b/isbn/9780547928227-M.jpg",
        "publisher": "George Allen & Unwin",
    },
    {
        "title": "Brave New World",
        "author": "Aldous Huxley",
        "isbn": "9780060850524",
        "description": "A vision of a future society built on engineered contentment.",
        "published_date": "1932",
        "page_count": 288,
        "genres": ["Fiction", "Dystopian", "Science Fiction"],
        "cover_image": "https://covers.openlibrary.org/b/isbn/9780060850524-M.jpg",
        "publisher": "Chatto & Windus",
    },
]
