# ABOUTME: Heuristic sort keys for person names and book or series titles.
# ABOUTME: "Brandon Sanderson" -> "Sanderson, Brandon"; "The Hobbit" -> "Hobbit, The".

_LEADING_ARTICLES = frozenset({"A", "An", "The"})


def name_sort_key(full_name: str) -> str:
    """Build a "Last, First Middle" sort key from a display name.

    Treats the final token as the surname, so compound surnames sort wrongly:
    "Lois McMaster Bujold" becomes "Bujold, Lois McMaster". Callers should
    prefer a sort key already stored in the library when there is one.
    """
    tokens = full_name.split()
    if not tokens:
        return ""
    if len(tokens) == 1:
        return full_name
    return f"{tokens[-1]}, {' '.join(tokens[:-1])}"


def title_sort_key(title: str) -> str:
    """Move a leading English article to the end of a title.

    Only "A", "An" and "The" are recognised, and only as a standalone first
    word with that exact capitalisation.
    """
    tokens = title.split(maxsplit=1)
    if not tokens or tokens[0] not in _LEADING_ARTICLES:
        return title
    article = tokens[0]
    rest = title.replace(article, "", 1).strip()
    return f"{rest}, {article}"
