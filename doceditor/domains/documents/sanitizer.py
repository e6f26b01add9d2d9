import re

TITLE_MAX_LENGTH = 100

# <script ...>...</script>, тело может содержать "<"
_SCRIPT_RE = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
# onclick="..." / onload='...'
_EVENT_HANDLER_RE = re.compile(r"\bon\w+\s*=\s*[\"'][^\"']*[\"']", re.IGNORECASE)


def sanitize_content(content: str) -> str:
    """Удаление <script> и inline-обработчиков событий из HTML"""
    content = _SCRIPT_RE.sub("", content)
    content = _EVENT_HANDLER_RE.sub("", content)
    return content.strip()


def sanitize_title(title: str) -> str:
    """Удаление символов < и >, обрезка до 100 символов"""
    return title.replace("<", "").replace(">", "").strip()[:TITLE_MAX_LENGTH]
