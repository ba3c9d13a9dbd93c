"""
reply-guy - draft replies to social-media posts scraped through mirror hosts.

This package turns a list of post links into post text and a generated
reply per post, fetching each post from the first mirror that serves it.

Main entry point is the CLI via `reply-guy run` command.

Example:
    $ reply-guy run -i links.txt -o out/replies.json
"""

__all__ = ["__version__", "extract_identifiers", "run_batch", "run_batch_async", "process_batch"]
__version__ = "0.1.0"

from .core.identifiers import extract_identifiers
from .runner import process_batch, run_batch, run_batch_async
