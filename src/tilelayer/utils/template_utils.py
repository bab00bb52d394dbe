import logging
import re
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(r'\{ *([\w-]+) *\}')


class TemplateUtils:
    """Utility class for URL template substitution"""

    @staticmethod
    def render(template: str, data: Dict[str, Any]) -> str:
        """Replace {key} placeholders with values from data.

        Callable values are called with the whole data mapping. A placeholder
        without a value renders as an empty string; the resulting URL is
        expected to fail to load and go through the tile error path.
        """
        def substitute(match: 're.Match') -> str:
            key = match.group(1)
            if key not in data or data[key] is None:
                logger.warning(f"No value provided for variable {{{key}}} in template '{template}'")
                return ''
            value = data[key]
            if callable(value):
                value = value(data)
            return str(value)

        return PLACEHOLDER_PATTERN.sub(substitute, template)

    @staticmethod
    def placeholders(template: str) -> List[str]:
        """List placeholder names in order of appearance"""
        return PLACEHOLDER_PATTERN.findall(template)
