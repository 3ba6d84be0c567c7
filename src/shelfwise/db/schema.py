# ABOUTME: SQL DDL statements for the Shelfwise library database schema.
# ABOUTME: Defines books, authors, series, their link tables, and schema versioning.

SCHEMA_V1 = """
-- Core book catalog table; goodreads_id is the natural key
CREATE TABLE books (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    title           TEXT NOT NULL,
    sort            TEXT NOT NULL,
    date_added      TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now')),
    date_published  TEXT,
    last_modified   TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now')),
    number_of_pages INTEGER,
    goodreads_id    INTEGER NOT NULL UNIQUE
);

CREATE TABLE authors (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    name         TEXT NOT NULL,
    sort         TEXT NOT NULL,
    goodreads_id INTEGER NOT NULL UNIQUE
);

CREATE TABLE series (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    name         TEXT NOT NULL,
    sort         TEXT NOT NULL,
    goodreads_id INTEGER NOT NULL UNIQUE
);

CREATE TABLE books_authors_link (
    id     INTEGER PRIMARY KEY AUTOINCREMENT,
    book   INTEGER NOT NULL REFERENCES books(id) ON DELETE CASCADE,
    author INTEGER NOT NULL REFERENCES authors(id) ON DELETE CASCADE,
    UNIQUE (book, author)
);

-- A book holds exactly one position within a given series
CREATE TABLE books_series_link (
    id     INTEGER PRIMARY KEY AUTOINCREMENT,
    book   INTEGER NOT NULL REFERENCES books(id) ON DELETE CASCADE,
    series INTEGER NOT NULL REFERENCES series(id) ON DELETE CASCADE,
    entry  REAL NOT NULL,
    UNIQUE (book, series)
);

CREATE INDEX idx_authors_name ON authors(name);
CREATE INDEX idx_series_name ON series(name);
CREATE INDEX idx_books_authors_link_author ON books_authors_link(author);
CREATE INDEX idx_books_series_link_series ON books_series_link(series);

-- Schema versioning for future migrations
CREATE TABLE schema_version (
    version    INTEGER NOT NULL,
    applied_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now'))
);

INSERT INTO schema_version (version) VALUES (1);
"""

# Ordered (version, sql) pairs applied on top of SCHEMA_V1. Empty until the
# first schema change ships; open_library applies any with a newer version.
MIGRATIONS: list[tuple[int, str]] = []
