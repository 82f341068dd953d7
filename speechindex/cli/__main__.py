"""Allow ``python -m speechindex.cli`` execution."""

from speechindex.cli.ingest import main

main()
