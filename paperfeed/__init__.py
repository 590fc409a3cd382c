"""paperfeed - institution RSS aggregation pipeline.

Collects academic publication feeds from several institutions,
deduplicates papers across feeds, tags each with a subject area,
and publishes RSS/JSON feeds plus a growing CSV archive.
"""

__version__ = "1.0.0"

from paperfeed.config import Settings
from paperfeed.models.paper import Paper

__all__ = ["Paper", "Settings", "__version__"]
