"""Classification, chunked reading and highlighting of previewed files."""
