"""
Naming table for standard HTML tags in the shared built-ins module.
"""

from typing import Optional

# Tags whose class name is not a plain capitalization
SPECIAL_NAMES = {
    "a": "Anchor",
    "em": "Emphasis",
    "i": "Italic",
    "b": "Bold",
    "s": "Strikethrough",
    "u": "Underline",
    "kbd": "Keyboard",
    "samp": "Sample",
    "mark": "Mark",
    "q": "Quote",
    "abbr": "Abbreviation",
    "cite": "Citation",
    "code": "Code",
    "strong": "Strong",
    "small": "Small",
    "sub": "Subscript",
    "sup": "Superscript",
    "del": "Deleted",
    "ins": "Inserted",
    "dfn": "Definition",
    "time": "Time",
    "var": "Variable",
    "wbr": "WordBreak",
    "br": "LineBreak",
    "hr": "HorizontalRule",
    "nav": "Navigation",
    "main": "Main",
    "article": "Article",
    "aside": "Aside",
    "header": "Header",
    "footer": "Footer",
    "hgroup": "HeadingGroup",
    "section": "Section",
    "address": "Address",
    "pre": "Preformatted",
}

STANDARD_TAGS = frozenset("""
a abbr address area article aside audio b base bdi bdo blockquote body br
button canvas caption cite code col colgroup data datalist dd del details
dfn dialog div dl dt em embed fieldset figcaption figure footer form h1 h2
h3 h4 h5 h6 head header hgroup hr html i iframe img input ins kbd keygen
label legend li link main map mark menu menuitem meta meter nav noscript
object ol optgroup option output p param picture pre progress q rp rt ruby
s samp script section select small source span strong style sub summary
sup svg table tbody td textarea tfoot th thead time title tr track u ul
var video wbr
""".split())


def builtin_class_name(tag: str) -> Optional[str]:
    """
    Map a standard HTML tag to its built-in class name.

    Returns:
        The class name, or None for tags outside the standard set
    """
    tag = tag.lower()
    if tag in SPECIAL_NAMES:
        return SPECIAL_NAMES[tag]
    if tag in STANDARD_TAGS:
        return tag[0].upper() + tag[1:]
    return None
