"""
Field references ("mentions") embedded in block settings.

The form builder stores a reference to another field as an HTML span:

    <span mention="true" mention-field-id="abc" mention-fallback="0">Price</span>

At save time we only need to know a mention is there; the referenced answer
is substituted when the submission data is available.
"""

import html
import re
from typing import Dict, Any, Optional


MENTION_PATTERN = re.compile(
    r'<span\b(?P<attrs>[^>]*?\bmention\s*=\s*["\']true["\'][^>]*)>(?P<label>.*?)</span>',
    re.IGNORECASE | re.DOTALL
)
ATTRIBUTE_PATTERN = re.compile(r'([\w-]+)\s*=\s*(?:"([^"]*)"|\'([^\']*)\')')
HTML_TAG_PATTERN = re.compile(r'<[^>]+>')
AMOUNT_PATTERN = re.compile(r'-?\d+(?:\.\d+)?')


def contains_mention(value: Any) -> bool:
    """True when a string value holds at least one field reference."""
    return isinstance(value, str) and MENTION_PATTERN.search(value) is not None


def _attributes(raw: str) -> Dict[str, str]:
    attrs = {}
    for name, double_quoted, single_quoted in ATTRIBUTE_PATTERN.findall(raw):
        attrs[name.lower()] = double_quoted or single_quoted
    return attrs


def _stringify(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (list, tuple)):
        return ', '.join(_stringify(v) for v in value if v is not None)
    return str(value)


class MentionParser:
    """
    Substitutes mentions in a piece of content with submitted answers.

    Args:
        content: The raw block setting, possibly containing mention spans
        data: Submitted answers keyed by field id
    """

    def __init__(self, content: Any, data: Optional[Dict[str, Any]] = None):
        self.content = content
        self.data = data or {}

    def _replace(self, match) -> str:
        attrs = _attributes(match.group('attrs'))
        field_id = attrs.get('mention-field-id')
        value = self.data.get(field_id) if field_id else None
        if value is None or value == '' or value == []:
            return attrs.get('mention-fallback', '')
        return _stringify(value)

    def parse(self) -> str:
        """Replace mentions, keeping any surrounding markup."""
        if self.content is None:
            return ''
        return MENTION_PATTERN.sub(self._replace, str(self.content))

    def parse_as_text(self) -> str:
        """Replace mentions and strip the remaining markup."""
        text = HTML_TAG_PATTERN.sub('', self.parse())
        return html.unescape(text).strip()


def resolve_payment_amount(raw_amount: Any, submission_data: Optional[Dict[str, Any]] = None) -> Optional[float]:
    """
    Resolve the amount of a payment block against submitted answers.

    Thousands separators and currency symbols are ignored, so "$1,234.50"
    resolves to 1234.5.

    Returns:
        The amount when it is a positive number, otherwise None
    """
    if isinstance(raw_amount, bool):
        return None
    if isinstance(raw_amount, (int, float)):
        return float(raw_amount) if raw_amount > 0 else None

    parsed = MentionParser(raw_amount, submission_data).parse_as_text()
    match = AMOUNT_PATTERN.search(parsed.replace(',', ''))
    if not match:
        return None

    amount = float(match.group(0))
    return amount if amount > 0 else None
