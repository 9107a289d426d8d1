"""
Inline style helpers for BeautifulSoup tags.

The form is edited as markup, so style changes go through the ``style``
attribute rather than a live CSSOM.
"""

from typing import Dict, Iterable, List

from bs4 import Tag


def parse_style(style: str) -> Dict[str, str]:
    """Parse a ``style`` attribute into an ordered property map."""
    properties: Dict[str, str] = {}
    for declaration in split_declarations(style or ""):
        if ":" not in declaration:
            continue
        name, value = declaration.split(":", 1)
        name = name.strip().lower()
        if name:
            properties[name] = value.strip()
    return properties


def split_declarations(style: str) -> List[str]:
    """
    Split a declaration block on ``;``.

    Semicolons inside quotes or parentheses belong to the value, as in
    ``url(data:image/png;base64,...)``.
    """
    declarations = []
    current = []
    depth = 0
    quote = None
    for char in style:
        if quote:
            if char == quote:
                quote = None
        elif char in "\"'":
            quote = char
        elif char == "(":
            depth += 1
        elif char == ")" and depth:
            depth -= 1
        elif char == ";" and not depth:
            declarations.append("".join(current))
            current = []
            continue
        current.append(char)
    declarations.append("".join(current))
    return declarations


def format_style(properties: Dict[str, str]) -> str:
    return "; ".join(f"{name}: {value}" for name, value in properties.items())


def get_style(tag: Tag, name: str) -> str:
    return parse_style(tag.get("style", "")).get(name, "")


def set_style(tag: Tag, name: str, value: str) -> None:
    """Set one property; an empty value removes it, as in the DOM."""
    properties = parse_style(tag.get("style", ""))
    if value:
        properties[name] = value
    else:
        properties.pop(name, None)
    _write(tag, properties)


def remove_styles(tag: Tag, names: Iterable[str]) -> None:
    properties = parse_style(tag.get("style", ""))
    for name in names:
        properties.pop(name, None)
    _write(tag, properties)


def set_default_styles(tag: Tag, defaults: Dict[str, str]) -> list:
    """
    Apply each default only where the tag has no value yet.

    Returns:
        list: Names of the properties that were actually added
    """
    properties = parse_style(tag.get("style", ""))
    added = []
    for name, value in defaults.items():
        if not properties.get(name):
            properties[name] = value
            added.append(name)
    _write(tag, properties)
    return added


def _write(tag: Tag, properties: Dict[str, str]) -> None:
    if properties:
        tag["style"] = format_style(properties)
    elif tag.has_attr("style"):
        del tag["style"]
