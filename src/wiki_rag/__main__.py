"""Allow ``python -m wiki_rag``."""

from .main import main

main()
