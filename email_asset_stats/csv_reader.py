from collections.abc import Iterator


MIN_COLUMNS = 11


def split_row(row: str) -> list[str]:
    """Split one logical row on commas that sit outside double quotes.

    Quote characters only toggle the quoted state and are never kept, so a
    doubled quote inside a quoted field is dropped instead of unescaped.
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False

    for char in row:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(char)

    fields.append("".join(current))
    return fields


def iter_logical_rows(text: str) -> Iterator[str]:
    """Yield logical rows, joining physical lines while a quoted field is open.

    A trailing row with unbalanced quotes at end of input is never yielded.
    """
    pending: list[str] = []
    quote_count = 0

    for line in text.split("\n"):
        quote_count += line.count('"')
        pending.append(line)

        if quote_count % 2 == 0:
            yield "\n".join(pending)
            pending = []
            quote_count = 0


def iter_rows(text: str, *, min_columns: int = MIN_COLUMNS) -> Iterator[list[str]]:
    seen_header = False

    for row in iter_logical_rows(text):
        if not row.strip():
            continue
        if not seen_header:
            seen_header = True
            continue
        fields = split_row(row)
        if len(fields) >= min_columns:
            yield fields
